# SQLite access, data types and GeoPackage metadata
from .connection import GeoPackageConnection, TableColumnInfo, quote_wrap
from .data_type import GeoPackageDataType, StorageKind
from .geometry_columns import Dimension, GeometryColumns, GeometryColumnsDao
from .geopackage import GeoPackage

__all__ = [
    "Dimension",
    "GeoPackage",
    "GeoPackageConnection",
    "GeoPackageDataType",
    "GeometryColumns",
    "GeometryColumnsDao",
    "StorageKind",
    "TableColumnInfo",
    "quote_wrap",
]
