"""
Typed read/write access to GeoPackage feature tables.
"""

from .config import FeatureSettings, get_settings
from .db import GeoPackage, GeoPackageConnection, GeoPackageDataType, GeometryColumns
from .exceptions import (
    GeoPackageError,
    InvalidGeometryError,
    InvalidSchemaError,
    MalformedHeaderError,
    MalformedWkbError,
    NoPrimaryKeyError,
    OutOfRangeError,
    PrimaryKeySetError,
    TypeMismatchError,
    UnexpectedEndError,
    UnsupportedSQLiteFeatureError,
    ValueTooLongError,
)
from .features import ColumnValue, FeatureColumn, FeatureCursor, FeatureDao, FeatureRow, FeatureTable
from .geom import GeometryData, GeometryType

__version__ = "0.1.0"

__all__ = [
    "ColumnValue",
    "FeatureColumn",
    "FeatureCursor",
    "FeatureDao",
    "FeatureRow",
    "FeatureSettings",
    "FeatureTable",
    "GeoPackage",
    "GeoPackageConnection",
    "GeoPackageDataType",
    "GeoPackageError",
    "GeometryColumns",
    "GeometryData",
    "GeometryType",
    "InvalidGeometryError",
    "InvalidSchemaError",
    "MalformedHeaderError",
    "MalformedWkbError",
    "NoPrimaryKeyError",
    "OutOfRangeError",
    "PrimaryKeySetError",
    "TypeMismatchError",
    "UnexpectedEndError",
    "UnsupportedSQLiteFeatureError",
    "ValueTooLongError",
    "get_settings",
]
