"""Pytest fixtures building small in-memory GeoPackages."""

from __future__ import annotations

import sqlite3

import pytest

from geopackage_core.db import GeoPackageConnection
from geopackage_core.features import FeatureDao
from geopackage_core.geom import GeometryData, GeometryEnvelope, LineString, Point
from geopackage_core.io import ByteOrder

# S1: little-endian WKB Point(10 30)
POINT_WKB_HEX = "0101000000" + "0000000000002440" + "0000000000003e40"
# S3: GP header, version 0, flags 0x01 (little-endian, no envelope), srs_id 4326
POINT_GPB_HEX = "47500001" + "e6100000" + POINT_WKB_HEX

METADATA_SQL = """
CREATE TABLE gpkg_spatial_ref_sys (
    srs_name TEXT NOT NULL,
    srs_id INTEGER PRIMARY KEY,
    organization TEXT NOT NULL,
    organization_coordsys_id INTEGER NOT NULL,
    definition TEXT NOT NULL,
    description TEXT
);
CREATE TABLE gpkg_contents (
    table_name TEXT NOT NULL PRIMARY KEY,
    data_type TEXT NOT NULL,
    identifier TEXT UNIQUE,
    description TEXT DEFAULT '',
    last_change DATETIME NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now')),
    min_x DOUBLE,
    min_y DOUBLE,
    max_x DOUBLE,
    max_y DOUBLE,
    srs_id INTEGER
);
CREATE TABLE gpkg_geometry_columns (
    table_name TEXT NOT NULL,
    column_name TEXT NOT NULL,
    geometry_type_name TEXT NOT NULL,
    srs_id INTEGER NOT NULL,
    z TINYINT NOT NULL,
    m TINYINT NOT NULL,
    CONSTRAINT pk_geom_cols PRIMARY KEY (table_name, column_name)
);
INSERT INTO gpkg_spatial_ref_sys VALUES
    ('WGS 84 geodetic', 4326, 'EPSG', 4326, 'GEOGCS["WGS 84"]', 'longitude/latitude');

CREATE TABLE point_features (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    geom POINT,
    flag BOOLEAN,
    tiny TINYINT,
    small SMALLINT,
    medium MEDIUMINT,
    whole INT,
    big INTEGER,
    ratio FLOAT,
    amount DOUBLE,
    real_value REAL,
    name TEXT,
    code TEXT(8),
    data BLOB,
    short_data BLOB(4),
    day DATE,
    stamp DATETIME
);
CREATE TABLE lines (
    fid INTEGER PRIMARY KEY AUTOINCREMENT,
    geom LINESTRING,
    label TEXT NOT NULL DEFAULT 'unnamed',
    weight DOUBLE
);
INSERT INTO gpkg_contents (table_name, data_type, identifier, min_x, min_y, max_x, max_y, srs_id) VALUES
    ('point_features', 'features', 'point_features', NULL, NULL, NULL, NULL, 4326),
    ('lines', 'features', 'lines', 0.0, 0.0, 4.0, 3.0, 4326);
INSERT INTO gpkg_geometry_columns VALUES
    ('point_features', 'geom', 'POINT', 4326, 0, 0),
    ('lines', 'geom', 'LINESTRING', 4326, 0, 0);
"""


def big_endian_point_gpb() -> bytes:
    """Point(1 2) with a big-endian header, XY envelope and big-endian WKB."""
    return GeometryData(
        srs_id=4326,
        geometry=Point(1.0, 2.0),
        envelope=GeometryEnvelope(1.0, 1.0, 2.0, 2.0),
        byte_order=ByteOrder.BIG_ENDIAN,
        wkb_byte_order=ByteOrder.BIG_ENDIAN,
    ).to_bytes()


def create_geopackage(conn: sqlite3.Connection) -> None:
    """Create the metadata tables and two populated feature tables."""
    conn.executescript(METADATA_SQL)
    conn.execute(
        """INSERT INTO point_features
           (geom, flag, tiny, small, medium, whole, big, ratio, amount, real_value,
            name, code, data, short_data, day, stamp)
           VALUES (?, 1, 5, 300, 70000, 1, ?, 1.5, 2.25, 3.5,
                   'alpha', 'A1', ?, ?, '2020-01-02', '2020-01-02T03:04:05.678Z')""",
        (bytes.fromhex(POINT_GPB_HEX), 2 ** 40, b"\x00\x01", b"ab"),
    )
    conn.execute(
        """INSERT INTO point_features
           (geom, flag, tiny, small, medium, whole, big, ratio, amount, real_value,
            name, code, data, short_data, day, stamp)
           VALUES (?, 0, -5, -300, -70000, 2, 7, -0.25, 8.125, -1.0,
                   'beta', 'B2', NULL, NULL, '2021-12-31', '2021-12-31T23:59:59.000Z')""",
        (big_endian_point_gpb(),),
    )
    conn.execute("INSERT INTO point_features (name) VALUES ('gamma')")

    line = LineString([Point(0.0, 0.0), Point(4.0, 3.0)])
    conn.execute(
        "INSERT INTO lines (geom, label, weight) VALUES (?, 'diagonal', 5.0)",
        (GeometryData.create(line, 4326).to_bytes(),),
    )
    conn.commit()


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_geopackage(connection)
    yield connection
    connection.close()


@pytest.fixture
def db(conn) -> GeoPackageConnection:
    return GeoPackageConnection(conn)


@pytest.fixture
def dao(db) -> FeatureDao:
    return FeatureDao.for_table(db, "point_features")


@pytest.fixture
def lines_dao(db) -> FeatureDao:
    return FeatureDao.for_table(db, "lines")
