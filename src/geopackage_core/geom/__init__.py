# Geometry model and binary codecs
from .envelope import GeometryEnvelope, build_envelope
from .geometry_data import GeometryData, gpb_to_wkb
from .model import (
    Geometry,
    GeometryCollection,
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from .wkb import from_wkb, read_geometry, to_wkb, write_geometry

__all__ = [
    "Geometry",
    "GeometryCollection",
    "GeometryData",
    "GeometryEnvelope",
    "GeometryType",
    "LineString",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "build_envelope",
    "from_wkb",
    "gpb_to_wkb",
    "read_geometry",
    "to_wkb",
    "write_geometry",
]
