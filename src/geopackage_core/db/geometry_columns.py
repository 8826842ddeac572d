"""
Geometry column descriptors from the gpkg_geometry_columns table.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..geom import GeometryType
from .connection import GeoPackageConnection


class Dimension(IntEnum):
    """Z/M presence rule of a geometry column, as stored in gpkg_geometry_columns."""
    PROHIBITED = 0
    MANDATORY = 1
    OPTIONAL = 2


@dataclass(frozen=True)
class GeometryColumns:
    """Descriptor of the geometry column of one feature table."""
    table_name: str
    column_name: str
    geometry_type: GeometryType
    srs_id: int
    z: Dimension = Dimension.PROHIBITED
    m: Dimension = Dimension.PROHIBITED


class GeometryColumnsDao:
    """Read geometry column descriptors, keyed by table name."""

    TABLE_NAME = "gpkg_geometry_columns"

    _COLUMNS = "table_name, column_name, geometry_type_name, srs_id, z, m"

    def __init__(self, db: GeoPackageConnection):
        self.db = db

    @staticmethod
    def _from_row(row: tuple) -> GeometryColumns:
        table_name, column_name, geometry_type_name, srs_id, z, m = row
        return GeometryColumns(
            table_name=table_name,
            column_name=column_name,
            geometry_type=GeometryType.from_name(geometry_type_name),
            srs_id=srs_id,
            z=Dimension(z),
            m=Dimension(m),
        )

    def is_table_exists(self) -> bool:
        return self.db.table_exists(self.TABLE_NAME)

    def query_for_all(self) -> list[GeometryColumns]:
        rows = self.db.query_results(
            f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} ORDER BY table_name"
        )
        return [self._from_row(row) for row in rows]

    def query_for_table_name(self, table_name: str) -> Optional[GeometryColumns]:
        row = self.db.query_single_row_results(
            f"SELECT {self._COLUMNS} FROM {self.TABLE_NAME} WHERE table_name = ?",
            (table_name,),
        )
        return self._from_row(row) if row else None

    def feature_table_names(self) -> list[str]:
        return self.db.query_single_column_results(
            f"SELECT table_name FROM {self.TABLE_NAME} ORDER BY table_name"
        )
