"""
Data access object for one feature table.

The DAO translates queries and CRUD calls into SQL against a table whose
schema was discovered at runtime. It keeps no state between operations and
never opens or commits transactions.
"""

import logging
import sqlite3
from typing import Any, Mapping, Optional, Sequence, Union

from ..config import FeatureSettings, get_settings
from ..db.connection import GeoPackageConnection, quote_wrap
from ..db.data_type import coerce, to_storage
from ..db.geometry_columns import GeometryColumns, GeometryColumnsDao
from ..exceptions import (
    GeoPackageError,
    InvalidSchemaError,
    NoPrimaryKeyError,
    PrimaryKeySetError,
    TypeMismatchError,
    UnsupportedSQLiteFeatureError,
)
from ..geom import GeometryType
from .cursor import FeatureCursor
from .row import FeatureRow
from .table import FeatureTable, FeatureTableReader
from .value import ColumnValue


logger = logging.getLogger(__name__)


class FeatureDao:
    """
    Typed access to the rows of a feature table.

    Features:
    - Lazy cursors for queries
    - Equality queries with optional float tolerance
    - Create, update and delete of FeatureRow objects
    """

    def __init__(
        self,
        db: GeoPackageConnection,
        geometry_columns: GeometryColumns,
        table: Optional[FeatureTable] = None,
        settings: Optional[FeatureSettings] = None,
    ):
        """
        Initialize the DAO.

        Args:
            db: Connection to the GeoPackage (not owned by the DAO)
            geometry_columns: Geometry column descriptor of the table
            table: Schema of the table; read from the database when omitted
            settings: Feature settings (default: get_settings())
        """
        self.db = db
        self.geometry_columns = geometry_columns
        self.settings = settings or get_settings()
        self.table = table or FeatureTableReader(geometry_columns).read_table(db)

        if self.table.table_name != geometry_columns.table_name:
            raise InvalidSchemaError(
                f"Schema of {self.table.table_name} given for geometry columns of {geometry_columns.table_name}"
            )
        if self.table.geometry_column.name.lower() != geometry_columns.column_name.lower():
            raise InvalidSchemaError(
                f"Geometry column of {self.table.table_name} is '{self.table.geometry_column.name}', "
                f"registered as '{geometry_columns.column_name}'"
            )

    @classmethod
    def for_table(
        cls,
        db: GeoPackageConnection,
        table_name: str,
        settings: Optional[FeatureSettings] = None,
    ) -> "FeatureDao":
        """Create a DAO for a table registered in gpkg_geometry_columns."""
        geometry_columns = GeometryColumnsDao(db).query_for_table_name(table_name)
        if geometry_columns is None:
            raise GeoPackageError(f"No geometry columns registered for table: {table_name}")
        return cls(db, geometry_columns, settings=settings)

    @property
    def table_name(self) -> str:
        return self.table.table_name

    @property
    def geometry_column_name(self) -> str:
        return self.table.geometry_column.name

    @property
    def geometry_type(self) -> GeometryType:
        return self.geometry_columns.geometry_type

    @property
    def srs_id(self) -> int:
        return self.geometry_columns.srs_id

    def _select_sql(self, where: Optional[str] = None, order_by: Optional[str] = None) -> str:
        columns = ", ".join(quote_wrap(name) for name in self.table.column_names)
        sql = f"SELECT {columns} FROM {quote_wrap(self.table_name)}"
        if where:
            sql += f" WHERE {where}"
        if order_by:
            sql += f" ORDER BY {order_by}"
        return sql

    def _pk_where(self) -> str:
        return f"{quote_wrap(self.table.pk_column.name)} = ?"

    def _build_where(self, column_name: str, value: Union[ColumnValue, Any]) -> tuple[str, list]:
        column = self.table.get_column(column_name)
        tolerance = None
        if isinstance(value, ColumnValue):
            value, tolerance = value.value, value.tolerance
        if tolerance is None and column.data_type.is_float:
            tolerance = self.settings.float_tolerance

        try:
            value = to_storage(column.data_type, coerce(column.data_type, value))
        except TypeMismatchError as e:
            raise TypeMismatchError(e.args[0], column=column.name) from e

        quoted = quote_wrap(column.name)
        if value is None:
            return f"{quoted} IS NULL", []
        if tolerance is not None and column.data_type.is_float:
            return f"{quoted} >= ? AND {quoted} <= ?", [value - tolerance, value + tolerance]
        return f"{quoted} = ?", [value]

    def query(
        self,
        where: Optional[str] = None,
        args: Optional[Sequence[Any]] = None,
        order_by: Optional[str] = None,
    ) -> FeatureCursor:
        """Query with a raw WHERE clause and bound arguments."""
        return FeatureCursor(self.db, self.table, self._select_sql(where, order_by), args or (), self.settings)

    def query_for_all(self) -> FeatureCursor:
        return self.query()

    def query_for_id(self, row_id: int) -> Optional[FeatureRow]:
        """Get the row with the given primary key, or None."""
        with self.query(self._pk_where(), (row_id,)) as cursor:
            if cursor.move_to_next():
                return cursor.get_row()
        return None

    def query_for_eq(self, column_name: str, value: Union[ColumnValue, Any]) -> FeatureCursor:
        where, args = self._build_where(column_name, value)
        return self.query(where, args)

    def query_for_field_values(self, field_values: Mapping[str, Union[ColumnValue, Any]]) -> FeatureCursor:
        """Query rows matching every column = value pair; columns are combined in sorted order."""
        clauses = []
        args: list = []
        for column_name in sorted(field_values):
            where, column_args = self._build_where(column_name, field_values[column_name])
            clauses.append(where)
            args.extend(column_args)
        return self.query(" AND ".join(clauses) or None, args)

    def count(self, where: Optional[str] = None, args: Optional[Sequence[Any]] = None) -> int:
        return self.db.count(self.table_name, where, args)

    def new_row(self) -> FeatureRow:
        """Empty transient row for this table."""
        return FeatureRow(self.table, settings=self.settings)

    def _check_row(self, row: FeatureRow):
        if row.table.table_name != self.table_name:
            raise GeoPackageError(f"Row of {row.table.table_name} given to the DAO of {self.table_name}")

    def _write(self, sql: str, args: Sequence[Any]) -> sqlite3.Cursor:
        try:
            return self.db.execute(sql, args)
        except sqlite3.OperationalError as e:
            missing = self.db.missing_trigger_features(self.table_name)
            if missing:
                logger.info("Write to %s needs unavailable SQLite features: %s", self.table_name, missing)
                raise UnsupportedSQLiteFeatureError(
                    ", ".join(missing),
                    f"Triggers on {self.table_name} need SQLite features that are not available: "
                    f"{', '.join(missing)}",
                ) from e
            raise

    def create(self, row: FeatureRow) -> int:
        """
        Insert a transient row and assign it the new primary key.

        Returns:
            The new primary key
        """
        self._check_row(row)
        if row.id is not None:
            raise PrimaryKeySetError(f"Cannot create row {row.id} of {self.table_name}: primary key already set")

        values = row.to_storage_values()
        if values:
            columns = ", ".join(quote_wrap(name) for name in values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {quote_wrap(self.table_name)} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {quote_wrap(self.table_name)} DEFAULT VALUES"

        cursor = self._write(sql, list(values.values()))
        try:
            row_id = cursor.lastrowid
        finally:
            cursor.close()
        row._set_id(row_id)
        return row_id

    def update(self, row: FeatureRow) -> int:
        """
        Update a persisted row by primary key.

        Returns:
            Number of rows updated (0 or 1)
        """
        self._check_row(row)
        if row.id is None:
            raise NoPrimaryKeyError(f"Cannot update a row of {self.table_name} without a primary key")

        values = row.to_storage_values()
        if not values:
            return 0
        assignments = ", ".join(f"{quote_wrap(name)} = ?" for name in values)
        sql = f"UPDATE {quote_wrap(self.table_name)} SET {assignments} WHERE {self._pk_where()}"
        cursor = self._write(sql, [*values.values(), row.id])
        try:
            return cursor.rowcount
        finally:
            cursor.close()

    def delete(self, row: FeatureRow) -> int:
        """
        Delete a persisted row by primary key.

        Returns:
            Number of rows deleted (0 or 1)
        """
        self._check_row(row)
        if row.id is None:
            raise NoPrimaryKeyError(f"Cannot delete a row of {self.table_name} without a primary key")
        return self.delete_by_id(row.id)

    def delete_by_id(self, row_id: int) -> int:
        return self.delete_where(self._pk_where(), (row_id,))

    def delete_where(self, where: Optional[str] = None, args: Optional[Sequence[Any]] = None) -> int:
        sql = f"DELETE FROM {quote_wrap(self.table_name)}"
        if where:
            sql += f" WHERE {where}"
        cursor = self._write(sql, args or ())
        try:
            return cursor.rowcount
        finally:
            cursor.close()
