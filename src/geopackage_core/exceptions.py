"""
Exceptions raised by the GeoPackage feature access layer.

SQLite driver errors (sqlite3.Error) are not wrapped and propagate as-is.
"""

from typing import Optional


class GeoPackageError(Exception):
    """Base class of all errors raised by this package."""


class UnexpectedEndError(GeoPackageError):
    """A byte reader ran off the end of its buffer."""

    def __init__(self, requested: int, remaining: int):
        super().__init__(
            f"Unexpected end of buffer: {requested} bytes requested, {remaining} remaining"
        )
        self.requested = requested
        self.remaining = remaining


class MalformedWkbError(GeoPackageError, ValueError):
    """Well-Known Binary input cannot be decoded."""


class MalformedHeaderError(GeoPackageError, ValueError):
    """A GeoPackage binary header is invalid or truncated."""


class InvalidGeometryError(GeoPackageError, ValueError):
    """A geometry is structurally invalid or of an unsupported type."""


class InvalidSchemaError(GeoPackageError):
    """A feature table or column definition cannot be used."""


class TypeMismatchError(GeoPackageError):
    """A cell value does not match the logical type of its column."""

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        row: Optional[int] = None,
        row_id: Optional[int] = None,
    ):
        location = []
        if column is not None:
            location.append(f"column '{column}'")
        if row is not None:
            location.append(f"row {row}")
        if row_id is not None:
            location.append(f"id {row_id}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)
        self.column = column
        self.row = row
        self.row_id = row_id


class OutOfRangeError(GeoPackageError, ValueError):
    """A number does not fit the range of its column type."""


class ValueTooLongError(GeoPackageError, ValueError):
    """A text or blob value exceeds the declared column length."""


class PrimaryKeySetError(GeoPackageError):
    """A row to be created already carries a primary key."""


class NoPrimaryKeyError(GeoPackageError):
    """A row to be updated or deleted has no primary key."""


class UnsupportedSQLiteFeatureError(GeoPackageError):
    """The SQLite library lacks a module or function a statement requires."""

    def __init__(self, feature: str, message: Optional[str] = None):
        super().__init__(message or f"SQLite feature not available: {feature}")
        self.feature = feature
