"""
Feature rows: one record of a feature table with typed cell values.

A row without a primary key value is transient; once it has one it is
persisted and its primary key can no longer be assigned.

TEXT and BLOB values longer than the column maximum are silently truncated
(strings by code point, blobs by byte) unless strict_truncation is set, in
which case ValueTooLongError is raised instead.
"""

import copy
import logging
from typing import Any, Optional

from ..config import FeatureSettings, get_settings
from ..db.data_type import GeoPackageDataType, StorageKind, coerce, to_storage
from ..exceptions import PrimaryKeySetError, TypeMismatchError, ValueTooLongError
from ..geom import GeometryData
from .column import FeatureColumn
from .table import FeatureTable


logger = logging.getLogger(__name__)


class FeatureRow:
    """A detachable snapshot of one feature, keyed to its table schema."""

    def __init__(
        self,
        table: FeatureTable,
        values: Optional[list] = None,
        settings: Optional[FeatureSettings] = None,
    ):
        self._table = table
        self._settings = settings or get_settings()
        if values is None:
            values = [None] * table.column_count
        elif len(values) != table.column_count:
            raise ValueError(
                f"{len(values)} values given for {table.column_count} columns of {table.table_name}"
            )
        self._values = list(values)

    @property
    def table(self) -> FeatureTable:
        return self._table

    @property
    def column_count(self) -> int:
        return self._table.column_count

    @property
    def column_names(self) -> list[str]:
        return self._table.column_names

    def get_column_name(self, index: int) -> str:
        return self._table.get_column(index).name

    def get_column_index(self, name: str) -> int:
        return self._table.column_index(name)

    def get_column(self, key) -> FeatureColumn:
        return self._table.get_column(key)

    @property
    def pk_column_index(self) -> int:
        return self._table.pk_index

    @property
    def geometry_column_index(self) -> int:
        return self._table.geometry_column_index

    @property
    def id(self) -> Optional[int]:
        return self._values[self._table.pk_index]

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def get_value(self, key) -> Any:
        """Get a cell value by column index or name."""
        return self._values[self._index(key)]

    def get_row_column_type(self, key) -> StorageKind:
        """Storage kind the cell has (or will have) in SQLite."""
        index = self._index(key)
        if self._values[index] is None:
            return StorageKind.NULL
        return self._table.get_column(index).data_type.storage

    def _index(self, key) -> int:
        return self._table.column_index(key) if isinstance(key, str) else key

    def set_value(self, key, value: Any):
        """
        Set a cell value by column index or name.

        Raises:
            PrimaryKeySetError: If the row already has a primary key
            TypeMismatchError: If the value does not fit the column type
            OutOfRangeError: If a number does not fit the column type
            ValueTooLongError: If strict truncation is on and the value is too long
        """
        column = self._table.get_column(key)
        if column.primary_key and self.id is not None:
            raise PrimaryKeySetError(
                f"Row {self.id} of {self._table.table_name} already has a primary key"
            )

        try:
            value = coerce(column.data_type, value)
        except TypeMismatchError as e:
            raise TypeMismatchError(e.args[0], column=column.name) from e

        if column.max is not None and value is not None and len(value) > column.max:
            if self._settings.strict_truncation:
                raise ValueTooLongError(
                    f"Value of length {len(value)} exceeds the {column.max} limit of column '{column.name}'"
                )
            logger.debug("Truncating value of column '%s' to %d", column.name, column.max)
            value = value[:column.max]

        if column.is_geometry and value is not None and value.geometry is not None:
            if not value.geometry_type.is_assignable_to(column.geometry_type):
                raise TypeMismatchError(
                    f"{value.geometry_type.name} cannot be stored in a {column.geometry_type.name} column",
                    column=column.name,
                )

        self._values[column.index] = value

    def __getitem__(self, key):
        return self.get_value(key)

    def __setitem__(self, key, value):
        self.set_value(key, value)

    def get_geometry(self) -> Optional[GeometryData]:
        return self._values[self._table.geometry_column_index]

    def set_geometry(self, geometry_data: Optional[GeometryData]):
        self.set_value(self._table.geometry_column_index, geometry_data)

    def _set_id(self, row_id: Optional[int]):
        self._values[self._table.pk_index] = row_id

    def copy(self, keep_id: bool = True) -> "FeatureRow":
        """Deep copy of the row; without keep_id the copy is transient."""
        row = FeatureRow(self._table, copy.deepcopy(self._values), self._settings)
        if not keep_id:
            row._set_id(None)
        return row

    def to_storage_values(self, include_pk: bool = False) -> dict[str, Any]:
        """Column name -> value bound to SQLite."""
        values = {}
        for column in self._table.columns:
            if column.primary_key and not include_pk:
                continue
            values[column.name] = to_storage(column.data_type, self._values[column.index])
        return values

    def __eq__(self, other):
        if not isinstance(other, FeatureRow):
            return NotImplemented
        return self._table.table_name == other._table.table_name and self._values == other._values

    __hash__ = None

    def __repr__(self):
        cells = ", ".join(
            f"{column.name}={self._values[column.index]!r}"
            for column in self._table.columns
            if column.data_type is not GeoPackageDataType.GEOMETRY
        )
        return f"FeatureRow({self._table.table_name}: {cells})"
