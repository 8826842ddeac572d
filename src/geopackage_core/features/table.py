"""
Feature table schemas.

A FeatureTable is the immutable, ordered column list of one user feature
table. FeatureTableReader discovers it at runtime from PRAGMA table_info and
the gpkg_geometry_columns descriptor of the table.
"""

import logging
from typing import Any, Optional, Sequence

from ..db.connection import GeoPackageConnection
from ..db.data_type import GeoPackageDataType, parse_declared_type
from ..db.geometry_columns import GeometryColumns
from ..exceptions import InvalidSchemaError
from .column import FeatureColumn


logger = logging.getLogger(__name__)


class FeatureTable:
    """Immutable schema of a feature table."""

    def __init__(self, table_name: str, columns: Sequence[FeatureColumn]):
        self._table_name = table_name
        self._columns = tuple(columns)
        self._index_by_name: dict[str, int] = {}

        pk_indexes = []
        geometry_indexes = []
        for position, column in enumerate(self._columns):
            if column.index != position:
                raise InvalidSchemaError(
                    f"Column '{column.name}' of {table_name} has index {column.index}, expected {position}"
                )
            key = column.name.lower()
            if key in self._index_by_name:
                raise InvalidSchemaError(f"Duplicate column '{column.name}' in {table_name}")
            self._index_by_name[key] = position
            if column.primary_key:
                pk_indexes.append(position)
            if column.is_geometry:
                geometry_indexes.append(position)

        if len(pk_indexes) != 1:
            raise InvalidSchemaError(
                f"Feature table {table_name} needs exactly one primary key column, found {len(pk_indexes)}"
            )
        if len(geometry_indexes) != 1:
            raise InvalidSchemaError(
                f"Feature table {table_name} needs exactly one geometry column, found {len(geometry_indexes)}"
            )
        self._pk_index = pk_indexes[0]
        self._geometry_index = geometry_indexes[0]

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def columns(self) -> tuple[FeatureColumn, ...]:
        return self._columns

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def pk_index(self) -> int:
        return self._pk_index

    @property
    def pk_column(self) -> FeatureColumn:
        return self._columns[self._pk_index]

    @property
    def geometry_column_index(self) -> int:
        return self._geometry_index

    @property
    def geometry_column(self) -> FeatureColumn:
        return self._columns[self._geometry_index]

    def has_column(self, name: str) -> bool:
        return name.lower() in self._index_by_name

    def column_index(self, name: str) -> int:
        try:
            return self._index_by_name[name.lower()]
        except KeyError:
            raise KeyError(f"No column '{name}' in {self._table_name}") from None

    def get_column(self, key) -> FeatureColumn:
        """Get a column by index or name."""
        if isinstance(key, str):
            key = self.column_index(key)
        return self._columns[key]

    def __repr__(self):
        return f"FeatureTable({self._table_name!r}, columns={self.column_names})"


def _parse_default(text: Optional[str]) -> Optional[Any]:
    """Turn a default value literal from PRAGMA table_info into a Python value."""
    if text is None:
        return None
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1].replace("''", "'")
    if text.upper() == "NULL":
        return None
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            pass
    return text


class FeatureTableReader:
    """Build a FeatureTable from the database schema."""

    def __init__(self, geometry_columns: GeometryColumns):
        self.geometry_columns = geometry_columns

    def read_table(self, db: GeoPackageConnection) -> FeatureTable:
        table_name = self.geometry_columns.table_name
        infos = db.table_info(table_name)
        if not infos:
            raise InvalidSchemaError(f"Feature table not found: {table_name}")

        columns = []
        for info in infos:
            if info.name.lower() == self.geometry_columns.column_name.lower():
                column = FeatureColumn.create_geometry_column(
                    info.cid,
                    info.name,
                    self.geometry_columns.geometry_type,
                    not_null=info.notnull,
                    default_value=_parse_default(info.dflt_value),
                )
            elif info.pk:
                data_type, _ = parse_declared_type(info.type)
                if data_type is not GeoPackageDataType.INTEGER:
                    raise InvalidSchemaError(
                        f"Primary key '{info.name}' of {table_name} is {info.type}, expected INTEGER"
                    )
                column = FeatureColumn.create_primary_key_column(info.cid, info.name)
            else:
                data_type, max_length = parse_declared_type(info.type)
                if data_type is GeoPackageDataType.GEOMETRY:
                    raise InvalidSchemaError(
                        f"Column '{info.name}' of {table_name} is declared {info.type} "
                        f"but is not the registered geometry column"
                    )
                column = FeatureColumn.create_column(
                    info.cid,
                    info.name,
                    data_type,
                    max=max_length if data_type in (GeoPackageDataType.TEXT, GeoPackageDataType.BLOB) else None,
                    not_null=info.notnull,
                    default_value=_parse_default(info.dflt_value),
                )
            columns.append(column)

        logger.debug("Read schema of %s: %s", table_name, [c.name for c in columns])
        return FeatureTable(table_name, columns)
