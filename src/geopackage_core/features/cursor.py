"""
Cursor over the rows of a feature query.

The cursor owns one sqlite3 cursor and reads rows lazily. Rows it returns
are detached snapshots that stay usable after the cursor moves or closes.
Moving backwards re-executes the statement and skips forward.
"""

import logging
import sqlite3
from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from ..config import FeatureSettings, get_settings
from ..db.connection import GeoPackageConnection
from ..db.data_type import StorageKind, to_host
from ..exceptions import GeoPackageError, TypeMismatchError
from ..geom import GeometryData
from .row import FeatureRow
from .table import FeatureTable


logger = logging.getLogger(__name__)


class CursorState(Enum):
    FRESH = "fresh"            # before the first move
    POSITIONED = "positioned"  # on a row
    EXHAUSTED = "exhausted"    # past the last row
    CLOSED = "closed"


class FeatureCursor:
    """
    Lazy cursor producing FeatureRow objects in SQLite's order.

    Always close the cursor, or use it as a context manager. It is also
    closed when garbage collected.
    """

    def __init__(
        self,
        db: GeoPackageConnection,
        table: FeatureTable,
        sql: str,
        args: Sequence[Any] = (),
        settings: Optional[FeatureSettings] = None,
    ):
        self._db = db
        self._table = table
        self._sql = sql
        self._args = tuple(args)
        self._settings = settings or get_settings()
        self._cursor: Optional[sqlite3.Cursor] = None
        self._current: Optional[tuple] = None
        self._position = -1
        self._state = CursorState.CLOSED
        self._execute()

    def _execute(self):
        self._cursor = self._db.raw_query(self._sql, self._args)
        self._current = None
        self._position = -1
        self._state = CursorState.FRESH

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def position(self) -> int:
        """Index of the current row; -1 before the first move."""
        return self._position

    @property
    def table(self) -> FeatureTable:
        return self._table

    @property
    def is_closed(self) -> bool:
        return self._state is CursorState.CLOSED

    def _check_open(self):
        if self._state is CursorState.CLOSED:
            raise GeoPackageError("Cursor is closed")

    def _check_positioned(self):
        self._check_open()
        if self._state is not CursorState.POSITIONED:
            raise GeoPackageError(f"Cursor is not positioned on a row ({self._state.value})")

    def move_to_next(self) -> bool:
        """Advance one row; False once past the last row."""
        self._check_open()
        if self._state is CursorState.EXHAUSTED:
            return False
        raw = self._cursor.fetchone()
        self._position += 1
        if raw is None:
            self._current = None
            self._state = CursorState.EXHAUSTED
            return False
        self._current = tuple(raw)
        self._state = CursorState.POSITIONED
        return True

    def move_to_first(self) -> bool:
        return self.move_to_position(0)

    def move_to_position(self, position: int) -> bool:
        """Move to the row at the given index; False if there is no such row."""
        self._check_open()
        if position < 0:
            raise ValueError(f"Invalid cursor position: {position}")
        if self._state is CursorState.POSITIONED and self._position == position:
            return True
        if position <= self._position:
            self._cursor.close()
            self._execute()
        while self._position < position:
            if not self.move_to_next():
                return False
        return True

    def get_count(self) -> int:
        """Total number of rows the query produces."""
        self._check_open()
        return self._db.query_single_result(f"SELECT COUNT(*) FROM ({self._sql})", self._args)

    def get_raw_value(self, key) -> Any:
        """Cell of the current row exactly as SQLite returned it."""
        self._check_positioned()
        index = self._table.column_index(key) if isinstance(key, str) else key
        return self._current[index]

    def get_row_column_type(self, key) -> StorageKind:
        return StorageKind.of(self.get_raw_value(key))

    def get_value(self, key) -> Any:
        """Typed value of one cell of the current row."""
        column = self._table.get_column(key)
        return self._convert(column, self.get_raw_value(column.index))

    def get_geometry(self) -> Optional[GeometryData]:
        return self.get_value(self._table.geometry_column_index)

    def _convert(self, column, raw: Any) -> Any:
        try:
            return to_host(column.data_type, raw)
        except TypeMismatchError as e:
            raise TypeMismatchError(
                e.args[0],
                column=column.name,
                row=self._position,
                row_id=self._current[self._table.pk_index],
            ) from e

    def get_row(self) -> FeatureRow:
        """
        Materialise the current row.

        Raises:
            TypeMismatchError: If a cell does not match its column type
        """
        self._check_positioned()
        values = [self._convert(column, self._current[column.index]) for column in self._table.columns]
        return FeatureRow(self._table, values, self._settings)

    def __iter__(self) -> Iterator[FeatureRow]:
        while self.move_to_next():
            yield self.get_row()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Release the statement. Safe to call more than once."""
        if self._state is CursorState.CLOSED:
            return
        self._state = CursorState.CLOSED
        self._current = None
        cursor, self._cursor = self._cursor, None
        try:
            cursor.close()
        except sqlite3.ProgrammingError:
            # connection already closed, statement released with it
            logger.debug("Cursor closed after its connection")

    def __del__(self):
        if getattr(self, "_state", CursorState.CLOSED) is not CursorState.CLOSED:
            self.close()
