"""
GeoPackage accessor using Python stdlib sqlite3.

Opens an existing GeoPackage and hands out feature DAOs for the tables
registered in its metadata. Creating, validating or registering tables is
left to other tools.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..config import FeatureSettings
from ..exceptions import GeoPackageError
from ..geom import build_envelope
from .connection import GeoPackageConnection
from .geometry_columns import GeometryColumns, GeometryColumnsDao


class GeoPackage:
    """
    Read and write GeoPackage feature tables.

    GeoPackage is an OGC standard that uses SQLite as a container format.
    """

    def __init__(self, path: Path, settings: Optional[FeatureSettings] = None):
        """
        Initialize with a GeoPackage file path.

        Args:
            path: Path to the .gpkg file
            settings: Settings handed to every feature DAO
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"GeoPackage not found: {path}")

        self.settings = settings
        self._db: Optional[GeoPackageConnection] = None

    @classmethod
    def from_connection(
        cls,
        conn: sqlite3.Connection,
        settings: Optional[FeatureSettings] = None,
    ) -> "GeoPackage":
        """Wrap an already open connection; closing the GeoPackage leaves it open."""
        geopackage = cls.__new__(cls)
        geopackage.path = None
        geopackage.settings = settings
        geopackage._db = GeoPackageConnection(conn)
        return geopackage

    def __enter__(self):
        self._get_db()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _get_db(self) -> GeoPackageConnection:
        """Get connection, opening it if needed."""
        if self._db is None:
            if self.path is None:
                raise GeoPackageError("GeoPackage is closed")
            self._db = GeoPackageConnection.open(self.path)
        return self._db

    @property
    def db(self) -> GeoPackageConnection:
        return self._get_db()

    def feature_tables(self) -> list[str]:
        """
        List all feature tables in the GeoPackage.

        Returns:
            List of table names, sorted
        """
        return self._get_db().query_single_column_results("""
            SELECT table_name
            FROM gpkg_contents
            WHERE data_type = 'features'
            ORDER BY table_name
        """)

    def get_geometry_columns_dao(self) -> GeometryColumnsDao:
        return GeometryColumnsDao(self._get_db())

    def get_feature_dao(self, table: Union[str, GeometryColumns]):
        """
        Get the DAO of a feature table.

        Args:
            table: Table name or its geometry columns descriptor

        Returns:
            FeatureDao bound to this GeoPackage's connection
        """
        from ..features.dao import FeatureDao

        if isinstance(table, GeometryColumns):
            return FeatureDao(self._get_db(), table, settings=self.settings)
        return FeatureDao.for_table(self._get_db(), table, settings=self.settings)

    def get_extent(self, table_name: str) -> Optional[tuple[float, float, float, float]]:
        """
        Get the bounding box extent of a feature table.

        Args:
            table_name: Feature table name

        Returns:
            Tuple of (min_x, min_y, max_x, max_y), or None for a table without geometries
        """
        db = self._get_db()

        # Try gpkg_contents first (faster)
        row = db.query_single_row_results("""
            SELECT min_x, min_y, max_x, max_y
            FROM gpkg_contents
            WHERE table_name = ?
        """, (table_name,))
        if row is None:
            raise GeoPackageError(f"Table not found in gpkg_contents: {table_name}")
        if all(v is not None for v in row):
            return (row[0], row[1], row[2], row[3])

        # Fall back to the envelopes of the stored geometries
        extent = None
        with self.get_feature_dao(table_name).query_for_all() as cursor:
            while cursor.move_to_next():
                data = cursor.get_geometry()
                if data is None or data.geometry is None:
                    continue
                envelope = data.envelope or build_envelope(data.geometry)
                if envelope is None:
                    continue
                if extent is None:
                    extent = [envelope.min_x, envelope.min_y, envelope.max_x, envelope.max_y]
                else:
                    extent = [
                        min(extent[0], envelope.min_x),
                        min(extent[1], envelope.min_y),
                        max(extent[2], envelope.max_x),
                        max(extent[3], envelope.max_y),
                    ]
        return tuple(extent) if extent else None

    def close(self):
        """Close the database connection."""
        if self._db:
            self._db.close()
            self._db = None
