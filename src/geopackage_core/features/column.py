from dataclasses import dataclass
from typing import Any, Optional

from ..db.data_type import GeoPackageDataType
from ..exceptions import InvalidSchemaError
from ..geom import GeometryType


@dataclass(frozen=True)
class FeatureColumn:
    """A column of a feature table."""
    index: int
    name: str
    data_type: GeoPackageDataType
    not_null: bool = False
    default_value: Optional[Any] = None
    primary_key: bool = False
    max: Optional[int] = None  # TEXT/BLOB length limit
    geometry_type: Optional[GeometryType] = None

    def __post_init__(self):
        if self.max is not None and self.data_type not in (GeoPackageDataType.TEXT, GeoPackageDataType.BLOB):
            raise InvalidSchemaError(
                f"Column '{self.name}': a maximum length only applies to TEXT and BLOB, not {self.data_type.name}"
            )
        if self.primary_key and self.data_type is not GeoPackageDataType.INTEGER:
            raise InvalidSchemaError(f"Primary key column '{self.name}' must be INTEGER")
        if (self.geometry_type is not None) != (self.data_type is GeoPackageDataType.GEOMETRY):
            raise InvalidSchemaError(f"Column '{self.name}': GEOMETRY columns need a geometry type")

    @property
    def is_geometry(self) -> bool:
        return self.geometry_type is not None

    @classmethod
    def create_primary_key_column(cls, index: int, name: str) -> "FeatureColumn":
        return cls(index, name, GeoPackageDataType.INTEGER, not_null=True, primary_key=True)

    @classmethod
    def create_geometry_column(
        cls,
        index: int,
        name: str,
        geometry_type: GeometryType,
        not_null: bool = False,
        default_value: Optional[Any] = None,
    ) -> "FeatureColumn":
        return cls(
            index,
            name,
            GeoPackageDataType.GEOMETRY,
            not_null=not_null,
            default_value=default_value,
            geometry_type=geometry_type,
        )

    @classmethod
    def create_column(
        cls,
        index: int,
        name: str,
        data_type: GeoPackageDataType,
        max: Optional[int] = None,
        not_null: bool = False,
        default_value: Optional[Any] = None,
    ) -> "FeatureColumn":
        if data_type is GeoPackageDataType.GEOMETRY:
            raise InvalidSchemaError(f"Use create_geometry_column for geometry column '{name}'")
        return cls(index, name, data_type, not_null=not_null, default_value=default_value, max=max)
