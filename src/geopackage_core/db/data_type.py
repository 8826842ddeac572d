"""
GeoPackage column data types and their SQLite storage rules.

Values read from SQLite are classified by storage kind and converted to host
values according to the column's logical type:

    BOOLEAN                     INTEGER -> bool
    TINYINT/SMALLINT/MEDIUMINT  INTEGER -> int (8/16/32-bit range)
    INT/INTEGER                 INTEGER -> int (64-bit range)
    FLOAT                       FLOAT   -> float (32-bit precision)
    DOUBLE/REAL                 FLOAT   -> float
    TEXT                        TEXT    -> str
    BLOB                        BLOB    -> bytes
    GEOMETRY                    BLOB    -> GeometryData
    DATE                        TEXT    -> datetime.date
    DATETIME                    TEXT    -> datetime.datetime (UTC)
"""

import re
import struct
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidSchemaError, OutOfRangeError, TypeMismatchError
from ..geom import GeometryData, GeometryType


class StorageKind(Enum):
    """SQLite storage class of a cell value."""
    NULL = "NULL"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    TEXT = "TEXT"
    BLOB = "BLOB"

    @classmethod
    def of(cls, value: Any) -> "StorageKind":
        """Classify a value as returned by the sqlite3 module."""
        if value is None:
            return cls.NULL
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, str):
            return cls.TEXT
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.BLOB
        raise TypeError(f"Not a SQLite value: {type(value).__name__}")


class GeoPackageDataType(Enum):
    """Logical column types allowed in GeoPackage user tables."""
    BOOLEAN = "BOOLEAN"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    MEDIUMINT = "MEDIUMINT"
    INT = "INT"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"
    DATE = "DATE"
    DATETIME = "DATETIME"
    GEOMETRY = "GEOMETRY"

    @property
    def storage(self) -> StorageKind:
        return _STORAGE[self]

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_RANGES

    @property
    def is_float(self) -> bool:
        return self in (GeoPackageDataType.FLOAT, GeoPackageDataType.DOUBLE, GeoPackageDataType.REAL)

    @classmethod
    def from_name(cls, name: str) -> "GeoPackageDataType":
        """Look up a type by name; geometry type names map to GEOMETRY."""
        key = name.strip().upper()
        if key in cls.__members__:
            return cls[key]
        if key in GeometryType.__members__:
            return cls.GEOMETRY
        raise InvalidSchemaError(f"Unsupported GeoPackage data type: {name}")


_STORAGE = {
    GeoPackageDataType.BOOLEAN: StorageKind.INTEGER,
    GeoPackageDataType.TINYINT: StorageKind.INTEGER,
    GeoPackageDataType.SMALLINT: StorageKind.INTEGER,
    GeoPackageDataType.MEDIUMINT: StorageKind.INTEGER,
    GeoPackageDataType.INT: StorageKind.INTEGER,
    GeoPackageDataType.INTEGER: StorageKind.INTEGER,
    GeoPackageDataType.FLOAT: StorageKind.FLOAT,
    GeoPackageDataType.DOUBLE: StorageKind.FLOAT,
    GeoPackageDataType.REAL: StorageKind.FLOAT,
    GeoPackageDataType.TEXT: StorageKind.TEXT,
    GeoPackageDataType.BLOB: StorageKind.BLOB,
    GeoPackageDataType.DATE: StorageKind.TEXT,
    GeoPackageDataType.DATETIME: StorageKind.TEXT,
    GeoPackageDataType.GEOMETRY: StorageKind.BLOB,
}

INTEGER_RANGES = {
    GeoPackageDataType.TINYINT: (-(2 ** 7), 2 ** 7 - 1),
    GeoPackageDataType.SMALLINT: (-(2 ** 15), 2 ** 15 - 1),
    GeoPackageDataType.MEDIUMINT: (-(2 ** 31), 2 ** 31 - 1),
    GeoPackageDataType.INT: (-(2 ** 63), 2 ** 63 - 1),
    GeoPackageDataType.INTEGER: (-(2 ** 63), 2 ** 63 - 1),
}

# e.g. "TEXT", "TEXT(50)", "MULTIPOLYGON"
DECLARED_TYPE_PATTERN = re.compile(r"^\s*([A-Za-z]+)\s*(?:\(\s*(\d+)\s*\))?\s*$")


def parse_declared_type(declared: str) -> tuple[GeoPackageDataType, Optional[int]]:
    """
    Parse a column type as reported by PRAGMA table_info.

    Args:
        declared: Declared type, optionally with a maximum length

    Returns:
        (data type, maximum length or None)
    """
    match = DECLARED_TYPE_PATTERN.match(declared or "")
    if not match:
        raise InvalidSchemaError(f"Unsupported column type declaration: {declared!r}")
    data_type = GeoPackageDataType.from_name(match.group(1))
    max_length = int(match.group(2)) if match.group(2) else None
    return data_type, max_length


def _to_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def parse_datetime(text: str) -> datetime:
    """Parse an ISO 8601 timestamp; values without an offset are taken as UTC."""
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_datetime(value: datetime) -> str:
    """Format as the GeoPackage timestamp 'YYYY-MM-DDTHH:MM:SS.SSSZ'."""
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def to_host(data_type: GeoPackageDataType, raw: Any) -> Any:
    """
    Convert a value read from SQLite into its host value.

    Raises:
        TypeMismatchError: If the storage kind or content does not fit the type
        MalformedHeaderError, MalformedWkbError: For undecodable geometry blobs
    """
    kind = StorageKind.of(raw)
    if kind is StorageKind.NULL:
        return None
    if kind is not data_type.storage:
        raise TypeMismatchError(f"{kind.name} value found for {data_type.name} column")

    if data_type is GeoPackageDataType.BOOLEAN:
        return raw != 0
    if data_type in INTEGER_RANGES:
        low, high = INTEGER_RANGES[data_type]
        if not low <= raw <= high:
            raise TypeMismatchError(f"{raw} does not fit a {data_type.name} column")
        return raw
    if data_type is GeoPackageDataType.FLOAT:
        try:
            return _to_float32(raw)
        except OverflowError:
            raise TypeMismatchError(f"{raw} does not fit a FLOAT column") from None
    if data_type.is_float:
        return float(raw)
    if data_type is GeoPackageDataType.DATE:
        try:
            return date.fromisoformat(raw.strip())
        except ValueError:
            raise TypeMismatchError(f"{raw!r} is not a DATE") from None
    if data_type is GeoPackageDataType.DATETIME:
        try:
            return parse_datetime(raw)
        except ValueError:
            raise TypeMismatchError(f"{raw!r} is not a DATETIME") from None
    if data_type is GeoPackageDataType.GEOMETRY:
        return GeometryData.from_bytes(bytes(raw))
    if data_type is GeoPackageDataType.BLOB:
        return bytes(raw)
    return raw


def coerce(data_type: GeoPackageDataType, value: Any) -> Any:
    """
    Validate and normalise a host value about to be stored in a column.

    Raises:
        TypeMismatchError: If the value is of the wrong kind
        OutOfRangeError: If a numeric value does not fit the column type
    """
    if value is None:
        return None

    if data_type is GeoPackageDataType.BOOLEAN:
        if isinstance(value, int):
            return bool(value)
    elif data_type in INTEGER_RANGES:
        if isinstance(value, int) and not isinstance(value, bool):
            low, high = INTEGER_RANGES[data_type]
            if not low <= value <= high:
                raise OutOfRangeError(f"{value} is outside the {data_type.name} range [{low}, {high}]")
            return value
    elif data_type is GeoPackageDataType.FLOAT:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return _to_float32(value)
            except OverflowError:
                raise OutOfRangeError(f"{value} is outside the FLOAT range") from None
    elif data_type.is_float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif data_type is GeoPackageDataType.TEXT:
        if isinstance(value, str):
            return value
    elif data_type is GeoPackageDataType.BLOB:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
    elif data_type is GeoPackageDataType.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError:
                pass
    elif data_type is GeoPackageDataType.DATETIME:
        if isinstance(value, str):
            try:
                value = parse_datetime(value)
            except ValueError:
                pass
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            # stored with millisecond precision
            return value.astimezone(timezone.utc).replace(microsecond=value.microsecond // 1000 * 1000)
    elif data_type is GeoPackageDataType.GEOMETRY:
        if isinstance(value, GeometryData):
            return value

    raise TypeMismatchError(f"{type(value).__name__} value {value!r} cannot be stored in a {data_type.name} column")


def to_storage(data_type: GeoPackageDataType, value: Any) -> Any:
    """Convert a (coerced) host value into the value bound to SQLite."""
    if value is None:
        return None
    if data_type is GeoPackageDataType.BOOLEAN:
        return 1 if value else 0
    if data_type is GeoPackageDataType.DATE:
        return value.isoformat()
    if data_type is GeoPackageDataType.DATETIME:
        return format_datetime(value)
    if data_type is GeoPackageDataType.GEOMETRY:
        return value.to_bytes()
    return value
