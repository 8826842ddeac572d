"""
Thin wrapper around a sqlite3 connection to a GeoPackage.

The wrapper never opens or commits transactions; statement atomicity is
whatever the caller's transaction boundary provides.
"""

import logging
import re
import sqlite3
from pathlib import Path
from typing import Any, NamedTuple, Optional, Sequence

from ..exceptions import UnsupportedSQLiteFeatureError


logger = logging.getLogger(__name__)

# SQL functions used by the GeoPackage spatial index triggers
SPATIAL_FUNCTIONS = (
    "ST_IsEmpty",
    "ST_MinX",
    "ST_MaxX",
    "ST_MinY",
    "ST_MaxY",
)


def quote_wrap(name: str) -> str:
    """Quote an SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


class TableColumnInfo(NamedTuple):
    """One row of PRAGMA table_info."""
    cid: int
    name: str
    type: str
    notnull: bool
    dflt_value: Optional[str]
    pk: bool


class GeoPackageConnection:
    """
    GeoPackage connection wrapper.

    Holds a non-owning reference to a sqlite3 connection unless created with
    open(). Not safe for use from several threads at once.
    """

    def __init__(self, conn: sqlite3.Connection, owns_connection: bool = False):
        self._conn = conn
        self._owns_connection = owns_connection
        self._capabilities: dict[str, bool] = {}

    @classmethod
    def open(cls, path: Path) -> "GeoPackageConnection":
        """
        Open a GeoPackage file and own the resulting connection.

        Args:
            path: Path to the .gpkg file
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"GeoPackage not found: {path}")
        return cls(sqlite3.connect(str(path)), owns_connection=True)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the database connection if this wrapper opened it."""
        if self._owns_connection and self._conn is not None:
            self._conn.close()
        self._conn = None

    def exec_sql(self, sql: str):
        """Execute a statement with no results."""
        logger.debug("exec: %s", sql)
        self._conn.execute(sql)

    def execute(self, sql: str, args: Sequence[Any] = ()) -> sqlite3.Cursor:
        logger.debug("execute: %s %r", sql, args)
        return self._conn.execute(sql, tuple(args))

    def raw_query(self, sql: str, args: Optional[Sequence[Any]] = None) -> sqlite3.Cursor:
        """Prepare and run a query, returning the open cursor."""
        logger.debug("query: %s %r", sql, args)
        return self._conn.execute(sql, tuple(args or ()))

    def last_insert_rowid(self) -> int:
        return self.query_single_result("SELECT last_insert_rowid()")

    def table_info(self, table_name: str) -> list[TableColumnInfo]:
        cursor = self.raw_query(f"PRAGMA table_info({quote_wrap(table_name)})")
        try:
            return [
                TableColumnInfo(cid, name, type_, bool(notnull), dflt_value, bool(pk))
                for cid, name, type_, notnull, dflt_value, pk in cursor.fetchall()
            ]
        finally:
            cursor.close()

    def table_exists(self, table_name: str) -> bool:
        count = self.query_single_result(
            "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND tbl_name = ?",
            (table_name,),
        )
        return count > 0

    def column_exists(self, table_name: str, column_name: str) -> bool:
        return any(column.name == column_name for column in self.table_info(table_name))

    def count(self, table: str, where: Optional[str] = None, args: Optional[Sequence[Any]] = None) -> int:
        sql = f"SELECT COUNT(*) FROM {quote_wrap(table)}"
        if where:
            sql += f" WHERE {where}"
        return self.query_single_result(sql, args)

    def min(self, table: str, column: str, where: Optional[str] = None,
            args: Optional[Sequence[Any]] = None) -> Optional[Any]:
        sql = f"SELECT MIN({quote_wrap(column)}) FROM {quote_wrap(table)}"
        if where:
            sql += f" WHERE {where}"
        return self.query_single_result(sql, args)

    def max(self, table: str, column: str, where: Optional[str] = None,
            args: Optional[Sequence[Any]] = None) -> Optional[Any]:
        sql = f"SELECT MAX({quote_wrap(column)}) FROM {quote_wrap(table)}"
        if where:
            sql += f" WHERE {where}"
        return self.query_single_result(sql, args)

    def delete(self, table: str, where: Optional[str] = None, args: Optional[Sequence[Any]] = None) -> int:
        """Delete matching rows and return how many were removed."""
        sql = f"DELETE FROM {quote_wrap(table)}"
        if where:
            sql += f" WHERE {where}"
        cursor = self.execute(sql, args or ())
        try:
            return cursor.rowcount
        finally:
            cursor.close()

    def query_single_result(self, sql: str, args: Optional[Sequence[Any]] = None) -> Optional[Any]:
        row = self.query_single_row_results(sql, args)
        return row[0] if row else None

    def query_single_row_results(self, sql: str, args: Optional[Sequence[Any]] = None) -> Optional[tuple]:
        results = self.query_results(sql, args, limit=1)
        return results[0] if results else None

    def query_single_column_results(self, sql: str, args: Optional[Sequence[Any]] = None) -> list:
        return [row[0] for row in self.query_results(sql, args)]

    def query_results(self, sql: str, args: Optional[Sequence[Any]] = None,
                      limit: Optional[int] = None) -> list[tuple]:
        cursor = self.raw_query(sql, args)
        try:
            if limit is None:
                return [tuple(row) for row in cursor.fetchall()]
            return [tuple(row) for row in cursor.fetchmany(limit)]
        finally:
            cursor.close()

    def supports_rtree(self) -> bool:
        """Check whether the rtree module is available by creating a temporary rtree table."""
        if "rtree" not in self._capabilities:
            try:
                self._conn.execute(
                    "CREATE VIRTUAL TABLE temp.gpkg_rtree_check USING rtree(id, minx, maxx)"
                )
            except sqlite3.OperationalError:
                self._capabilities["rtree"] = False
            else:
                self._conn.execute("DROP TABLE temp.gpkg_rtree_check")
                self._capabilities["rtree"] = True
            logger.debug("rtree module available: %s", self._capabilities["rtree"])
        return self._capabilities["rtree"]

    def supports_function(self, name: str) -> bool:
        """Check whether a one-argument SQL function is registered."""
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
            raise ValueError(f"Invalid SQL function name: {name}")
        key = f"function:{name.lower()}"
        if key not in self._capabilities:
            try:
                self._conn.execute(f"SELECT {name}(NULL)").close()
            except sqlite3.OperationalError:
                self._capabilities[key] = False
            else:
                self._capabilities[key] = True
            logger.debug("SQL function %s available: %s", name, self._capabilities[key])
        return self._capabilities[key]

    def require_rtree(self):
        if not self.supports_rtree():
            raise UnsupportedSQLiteFeatureError("rtree")

    def missing_trigger_features(self, table_name: str) -> list[str]:
        """
        List SQLite features used by a table's triggers that this connection lacks.

        GeoPackage spatial index triggers call the rtree module and the
        ST_* geometry functions; writes to such tables fail without them.
        """
        trigger_sql = " ".join(
            sql or "" for sql in self.query_single_column_results(
                "SELECT sql FROM sqlite_master WHERE type = 'trigger' AND tbl_name = ?",
                (table_name,),
            )
        ).lower()
        if not trigger_sql:
            return []

        missing = []
        if "rtree_" in trigger_sql and not self.supports_rtree():
            missing.append("rtree")
        for function in SPATIAL_FUNCTIONS:
            if function.lower() + "(" in trigger_sql and not self.supports_function(function):
                missing.append(function)
        return missing
