"""Tests for the file-level GeoPackage accessor."""

from __future__ import annotations

import sqlite3

import pytest

from geopackage_core.config import FeatureSettings
from geopackage_core.db import GeoPackage, GeometryColumns
from geopackage_core.exceptions import GeoPackageError
from geopackage_core.geom import GeometryData, GeometryType, Point

from conftest import create_geopackage


@pytest.fixture
def gpkg_path(tmp_path):
    path = tmp_path / "features.gpkg"
    conn = sqlite3.connect(str(path))
    create_geopackage(conn)
    conn.close()
    return path


def test_missing_file(tmp_path) -> None:
    """Test opening a path that does not exist."""
    with pytest.raises(FileNotFoundError):
        GeoPackage(tmp_path / "missing.gpkg")


def test_feature_tables(gpkg_path) -> None:
    """Test feature tables are listed from gpkg_contents."""
    with GeoPackage(gpkg_path) as gpkg:
        assert gpkg.feature_tables() == ["lines", "point_features"]
        assert gpkg.get_geometry_columns_dao().feature_table_names() == ["lines", "point_features"]


def test_get_feature_dao(gpkg_path) -> None:
    """Test DAOs by table name or descriptor share the settings."""
    settings = FeatureSettings(strict_truncation=True)
    with GeoPackage(gpkg_path, settings=settings) as gpkg:
        dao = gpkg.get_feature_dao("point_features")
        assert dao.count() == 3
        assert dao.settings.strict_truncation
        lines = gpkg.get_feature_dao(GeometryColumns("lines", "geom", GeometryType.LINESTRING, 4326))
        assert lines.query_for_id(1)["label"] == "diagonal"
        with pytest.raises(GeoPackageError):
            gpkg.get_feature_dao("roads")


def test_extent_from_contents(gpkg_path) -> None:
    """Test the extent recorded in gpkg_contents is used when present."""
    with GeoPackage(gpkg_path) as gpkg:
        assert gpkg.get_extent("lines") == (0.0, 0.0, 4.0, 3.0)


def test_extent_from_geometries(gpkg_path) -> None:
    """Test the extent falls back to the stored geometries."""
    with GeoPackage(gpkg_path) as gpkg:
        assert gpkg.get_extent("point_features") == (1.0, 2.0, 10.0, 30.0)
        with pytest.raises(GeoPackageError):
            gpkg.get_extent("roads")


def test_extent_of_table_without_geometries(gpkg_path) -> None:
    """Test a table whose geometries are all NULL has no extent."""
    with GeoPackage(gpkg_path) as gpkg:
        gpkg.get_feature_dao("point_features").delete_where('"geom" IS NOT NULL')
        assert gpkg.get_extent("point_features") is None


def test_changes_persist_after_commit(gpkg_path) -> None:
    """Test rows written through the DAO are visible after reopening."""
    with GeoPackage(gpkg_path) as gpkg:
        dao = gpkg.get_feature_dao("point_features")
        row = dao.new_row()
        row["name"] = "delta"
        row.set_geometry(GeometryData.create(Point(7.0, 8.0), dao.srs_id))
        dao.create(row)
        gpkg.db.connection.commit()

    with GeoPackage(gpkg_path) as gpkg:
        dao = gpkg.get_feature_dao("point_features")
        with dao.query_for_eq("name", "delta") as cursor:
            rows = list(cursor)
        assert len(rows) == 1
        assert rows[0].get_geometry().geometry == Point(7.0, 8.0)


def test_from_connection(conn) -> None:
    """Test wrapping an open connection and closing the accessor."""
    gpkg = GeoPackage.from_connection(conn)
    assert gpkg.feature_tables() == ["lines", "point_features"]
    gpkg.close()
    assert conn.execute("SELECT COUNT(*) FROM lines").fetchone() == (1,)
    with pytest.raises(GeoPackageError):
        gpkg.feature_tables()
