"""Tests for the GeoPackage connection wrapper and metadata DAO."""

from __future__ import annotations

import sqlite3

import pytest

from geopackage_core.db import Dimension, GeoPackageConnection, GeometryColumnsDao, quote_wrap
from geopackage_core.exceptions import UnsupportedSQLiteFeatureError
from geopackage_core.geom import GeometryType


def test_quote_wrap() -> None:
    """Test identifiers are double quoted with embedded quotes escaped."""
    assert quote_wrap("name") == '"name"'
    assert quote_wrap('odd"name') == '"odd""name"'


def test_aggregates(db) -> None:
    """Test count, min and max with and without a WHERE clause."""
    assert db.count("point_features") == 3
    assert db.count("point_features", '"flag" = ?', [1]) == 1
    assert db.min("point_features", "tiny") == -5
    assert db.max("point_features", "tiny") == 5
    assert db.max("point_features", "tiny", '"tiny" < ?', [0]) == -5
    assert db.min("point_features", "whole", '"whole" > 100') is None


def test_delete(db) -> None:
    """Test delete returns the number of removed rows."""
    assert db.delete("point_features", '"name" = ?', ["gamma"]) == 1
    assert db.delete("point_features", '"name" = ?', ["gamma"]) == 0
    assert db.count("point_features") == 2


def test_table_and_column_exists(db) -> None:
    """Test schema existence checks."""
    assert db.table_exists("lines")
    assert not db.table_exists("roads")
    assert db.column_exists("lines", "label")
    assert not db.column_exists("lines", "colour")


def test_table_info(db) -> None:
    """Test PRAGMA table_info rows."""
    info = db.table_info("lines")
    assert [column.name for column in info] == ["fid", "geom", "label", "weight"]
    assert info[0].pk and not info[1].pk
    assert info[2].notnull
    assert info[2].dflt_value == "'unnamed'"
    assert info[1].type == "LINESTRING"


def test_query_helpers(db) -> None:
    """Test the single value, row and column query helpers."""
    assert db.query_single_result("SELECT name FROM point_features WHERE id = ?", [2]) == "beta"
    assert db.query_single_result("SELECT name FROM point_features WHERE id = 99") is None
    assert db.query_single_row_results("SELECT tiny, small FROM point_features WHERE id = 1") == (5, 300)
    assert db.query_single_column_results("SELECT name FROM point_features ORDER BY id") == [
        "alpha", "beta", "gamma",
    ]
    assert len(db.query_results("SELECT * FROM point_features", limit=2)) == 2


def test_execute_and_last_insert_rowid(db) -> None:
    """Test statements run on the wrapped connection."""
    db.exec_sql("CREATE TABLE scratch (id INTEGER PRIMARY KEY, value TEXT)")
    db.execute("INSERT INTO scratch (value) VALUES (?)", ["a"]).close()
    assert db.last_insert_rowid() == 1


def test_capability_checks(db) -> None:
    """Test SQLite capability checks are answered and cached."""
    assert db.supports_function("abs")
    assert not db.supports_function("ST_IsEmpty")
    assert not db.supports_function("ST_IsEmpty")
    with pytest.raises(ValueError):
        db.supports_function("abs(1); DROP TABLE lines; --")
    assert isinstance(db.supports_rtree(), bool)
    assert not db.table_exists("gpkg_rtree_check")


def test_require_rtree(db, monkeypatch) -> None:
    """Test require_rtree raises when the module is missing."""
    monkeypatch.setattr(db, "supports_rtree", lambda: False)
    with pytest.raises(UnsupportedSQLiteFeatureError) as exc_info:
        db.require_rtree()
    assert exc_info.value.feature == "rtree"


def test_missing_trigger_features(conn, db) -> None:
    """Test trigger SQL is scanned for unavailable functions."""
    assert db.missing_trigger_features("lines") == []
    conn.execute(
        """CREATE TRIGGER lines_bounds AFTER UPDATE OF geom ON lines
           BEGIN
               SELECT ST_MinX(NEW.geom), ST_MaxY(NEW.geom);
           END"""
    )
    assert db.missing_trigger_features("lines") == ["ST_MinX", "ST_MaxY"]


def test_close_only_owned_connection(tmp_path) -> None:
    """Test close() leaves borrowed connections open."""
    conn = sqlite3.connect(":memory:")
    GeoPackageConnection(conn).close()
    assert conn.execute("SELECT 1").fetchone() == (1,)
    conn.close()

    path = tmp_path / "empty.gpkg"
    sqlite3.connect(str(path)).close()
    with GeoPackageConnection.open(path) as db:
        owned = db.connection
    with pytest.raises(sqlite3.ProgrammingError):
        owned.execute("SELECT 1")
    with pytest.raises(FileNotFoundError):
        GeoPackageConnection.open(tmp_path / "missing.gpkg")


def test_geometry_columns_dao(db) -> None:
    """Test reading gpkg_geometry_columns descriptors."""
    dao = GeometryColumnsDao(db)
    assert dao.is_table_exists()
    assert dao.feature_table_names() == ["lines", "point_features"]
    lines = dao.query_for_table_name("lines")
    assert lines.column_name == "geom"
    assert lines.geometry_type is GeometryType.LINESTRING
    assert lines.z is Dimension.PROHIBITED
    assert [columns.table_name for columns in dao.query_for_all()] == ["lines", "point_features"]
    assert dao.query_for_table_name("roads") is None
