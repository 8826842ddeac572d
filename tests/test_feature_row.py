"""Tests for FeatureRow value access and validation."""

from __future__ import annotations

from datetime import date

import pytest

from geopackage_core.config import FeatureSettings
from geopackage_core.db import StorageKind
from geopackage_core.exceptions import (
    OutOfRangeError,
    PrimaryKeySetError,
    TypeMismatchError,
    ValueTooLongError,
)
from geopackage_core.features import FeatureDao, FeatureRow
from geopackage_core.geom import GeometryData, LineString, MultiPoint, Point


def test_new_row_is_transient(dao) -> None:
    """Test a new row has no id and only NULL cells."""
    row = dao.new_row()
    assert row.id is None
    assert not row.is_persisted
    assert row.column_count == 17
    assert row.get_row_column_type("name") is StorageKind.NULL
    assert all(row.get_value(i) is None for i in range(row.column_count))


def test_set_and_get_by_name_and_index(dao) -> None:
    """Test cells are addressable by name and by index."""
    row = dao.new_row()
    row["name"] = "delta"
    row.set_value(row.get_column_index("tiny"), -7)
    assert row.get_value(11) == "delta"
    assert row["TINY"] == -7
    assert row.get_column_name(3) == "tiny"
    assert row.get_row_column_type("tiny") is StorageKind.INTEGER
    assert row.pk_column_index == 0
    assert row.geometry_column_index == 1


def test_primary_key_assignable_only_once(dao) -> None:
    """Test the primary key of a persisted row cannot be changed."""
    row = dao.new_row()
    row.set_value("id", 42)
    assert row.id == 42 and row.is_persisted
    with pytest.raises(PrimaryKeySetError):
        row.set_value("id", 43)
    assert row.id == 42


def test_values_are_type_checked(dao) -> None:
    """Test values of the wrong kind or range are refused."""
    row = dao.new_row()
    with pytest.raises(TypeMismatchError) as exc_info:
        row["whole"] = "one"
    assert exc_info.value.column == "whole"
    with pytest.raises(OutOfRangeError):
        row["tiny"] = 200
    with pytest.raises(TypeMismatchError):
        row["data"] = "not bytes"
    assert row["whole"] is None and row["tiny"] is None


def test_text_and_blob_truncation(dao) -> None:
    """Test values longer than the column maximum are truncated."""
    row = dao.new_row()
    row["code"] = "ABCDEFGHIJ"
    row["short_data"] = b"\x00\x01\x02\x03\x04\x05"
    row["name"] = "x" * 1000
    assert row["code"] == "ABCDEFGH"
    assert row["short_data"] == b"\x00\x01\x02\x03"
    assert len(row["name"]) == 1000


def test_truncation_counts_code_points(dao) -> None:
    """Test strings are truncated by code point."""
    row = dao.new_row()
    row["code"] = "é" * 10
    assert row["code"] == "é" * 8


def test_strict_truncation(db) -> None:
    """Test strict mode rejects oversized values."""
    dao = FeatureDao.for_table(db, "point_features", settings=FeatureSettings(strict_truncation=True))
    row = dao.new_row()
    with pytest.raises(ValueTooLongError):
        row["code"] = "ABCDEFGHIJ"
    row["code"] = "ABCDEFGH"
    assert row["code"] == "ABCDEFGH"


def test_geometry_must_fit_column_type(dao) -> None:
    """Test only geometries assignable to the column type are accepted."""
    row = dao.new_row()
    row.set_geometry(GeometryData.create(Point(1.0, 2.0), 4326))
    assert row.get_geometry().geometry == Point(1.0, 2.0)
    with pytest.raises(TypeMismatchError):
        row.set_geometry(GeometryData.create(LineString([Point(0.0, 0.0), Point(1.0, 1.0)]), 4326))
    with pytest.raises(TypeMismatchError):
        row.set_geometry(GeometryData.create(MultiPoint([Point(0.0, 0.0)]), 4326))
    assert row.get_geometry().geometry == Point(1.0, 2.0)
    row.set_geometry(None)
    assert row.get_geometry() is None


def test_copy(dao) -> None:
    """Test copies are deep and optionally drop the primary key."""
    row = dao.query_for_id(1)
    same = row.copy()
    assert same == row
    transient = row.copy(keep_id=False)
    assert transient.id is None
    assert transient["name"] == "alpha"
    transient.get_geometry().geometry.x = 99.0
    assert row.get_geometry().geometry.x == 10.0


def test_to_storage_values(dao) -> None:
    """Test row values convert to the values bound to SQLite."""
    row = dao.new_row()
    row["flag"] = True
    row["day"] = date(2022, 5, 6)
    values = row.to_storage_values()
    assert "id" not in values
    assert values["flag"] == 1
    assert values["day"] == "2022-05-06"
    assert row.to_storage_values(include_pk=True)["id"] is None


def test_row_requires_matching_value_count(dao) -> None:
    """Test a row built from values must cover every column."""
    with pytest.raises(ValueError):
        FeatureRow(dao.table, [None, None])
