"""
OGC Well-Known Binary reader and writer.

Handles the ISO type codes for Z, M and ZM variants (1000/2000/3000 offsets).
Every tagged geometry carries its own byte order byte, which the reader
honours independently for nested geometries. The writer emits a single byte
order throughout.
"""

from typing import Optional

from ..exceptions import MalformedWkbError, UnexpectedEndError
from ..io import ByteOrder, ByteReader, ByteWriter
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


# WKB geometry type codes
WKB_POINT = 1
WKB_LINESTRING = 2
WKB_POLYGON = 3
WKB_MULTIPOINT = 4
WKB_MULTILINESTRING = 5
WKB_MULTIPOLYGON = 6
WKB_GEOMETRYCOLLECTION = 7

# byte order + type code + count of an empty geometry
MIN_TAGGED_SIZE = 9


def decode_type_code(type_code: int) -> tuple[GeometryType, bool, bool]:
    """
    Split an ISO WKB type code into base type and Z/M flags.

    Raises:
        MalformedWkbError: If the base type or dimension offset is unknown
    """
    base = type_code % 1000
    dims = type_code // 1000
    if dims > 3 or not WKB_POINT <= base <= WKB_GEOMETRYCOLLECTION:
        raise MalformedWkbError(f"Unsupported WKB geometry type: {type_code}")
    return GeometryType(base), dims in (1, 3), dims in (2, 3)


def encode_type_code(geometry: Geometry) -> int:
    dims = 0
    if geometry.has_z:
        dims += 1
    if geometry.has_m:
        dims += 2
    return geometry.geometry_type.wkb_code + 1000 * dims


def _coordinate_size(has_z: bool, has_m: bool) -> int:
    return 8 * (2 + has_z + has_m)


def _read_count(reader: ByteReader, min_size: int, what: str) -> int:
    count = reader.read_u32()
    if count * min_size > reader.remaining:
        raise MalformedWkbError(
            f"WKB {what} count {count} exceeds the {reader.remaining} remaining bytes"
        )
    return count


def read_geometry(reader: ByteReader) -> Geometry:
    """
    Read one tagged WKB geometry from the reader.

    Args:
        reader: ByteReader positioned at a WKB byte order byte

    Returns:
        The decoded geometry

    Raises:
        MalformedWkbError: If the WKB is invalid or truncated
    """
    try:
        return _read_tagged(reader, None)
    except UnexpectedEndError as e:
        raise MalformedWkbError(f"Truncated WKB: {e}") from e


def _read_tagged(
    reader: ByteReader,
    parent: Optional[Geometry],
    element_type: type = Geometry,
) -> Geometry:
    reader.set_byte_order(ByteOrder.from_wkb_code(reader.read_u8()))
    geometry_type, has_z, has_m = decode_type_code(reader.read_u32())

    if parent is not None:
        if has_z != parent.has_z or has_m != parent.has_m:
            raise MalformedWkbError(
                f"WKB {geometry_type.name} has_z={has_z} has_m={has_m} does not match "
                f"containing {parent.geometry_type.name} has_z={parent.has_z} has_m={parent.has_m}"
            )

    if geometry_type == GeometryType.POINT:
        geometry = _read_point(reader, has_z, has_m)
    elif geometry_type == GeometryType.LINESTRING:
        geometry = _read_linestring(reader, has_z, has_m)
    elif geometry_type == GeometryType.POLYGON:
        geometry = _read_polygon(reader, has_z, has_m)
    elif geometry_type == GeometryType.MULTIPOINT:
        geometry = _read_collection(reader, MultiPoint(has_z=has_z, has_m=has_m))
    elif geometry_type == GeometryType.MULTILINESTRING:
        geometry = _read_collection(reader, MultiLineString(has_z=has_z, has_m=has_m))
    elif geometry_type == GeometryType.MULTIPOLYGON:
        geometry = _read_collection(reader, MultiPolygon(has_z=has_z, has_m=has_m))
    else:
        geometry = _read_collection(reader, GeometryCollection(has_z=has_z, has_m=has_m))

    if not isinstance(geometry, element_type):
        raise MalformedWkbError(
            f"WKB {geometry_type.name} not allowed in {parent.geometry_type.name}"
        )
    return geometry


def _read_point(reader: ByteReader, has_z: bool, has_m: bool) -> Point:
    x = reader.read_f64()
    y = reader.read_f64()
    z = reader.read_f64() if has_z else None
    m = reader.read_f64() if has_m else None
    return Point(x, y, z, m, has_z=has_z, has_m=has_m)


def _read_linestring(reader: ByteReader, has_z: bool, has_m: bool) -> LineString:
    num_points = _read_count(reader, _coordinate_size(has_z, has_m), "point")
    line = LineString(has_z=has_z, has_m=has_m)
    for _ in range(num_points):
        line.points.append(_read_point(reader, has_z, has_m))
    return line


def _read_polygon(reader: ByteReader, has_z: bool, has_m: bool) -> Polygon:
    num_rings = _read_count(reader, 4, "ring")
    polygon = Polygon(has_z=has_z, has_m=has_m)
    for _ in range(num_rings):
        polygon.rings.append(_read_linestring(reader, has_z, has_m))
    return polygon


def _read_collection(reader: ByteReader, collection: GeometryCollection) -> GeometryCollection:
    byte_order = reader.byte_order
    if collection.element_type is Point:
        min_size = 5 + _coordinate_size(collection.has_z, collection.has_m)
    else:
        min_size = MIN_TAGGED_SIZE
    num_geoms = _read_count(reader, min_size, "geometry")
    for _ in range(num_geoms):
        # Each sub-geometry has its own header
        child = _read_tagged(reader, collection, collection.element_type)
        collection.geometries.append(child)
        reader.set_byte_order(byte_order)
    return collection


def write_geometry(writer: ByteWriter, geometry: Geometry):
    """Write a tagged WKB geometry in the writer's byte order."""
    writer.write_u8(writer.byte_order.wkb_code)
    writer.write_u32(encode_type_code(geometry))

    if isinstance(geometry, Point):
        _write_point(writer, geometry)
    elif isinstance(geometry, LineString):
        _write_linestring(writer, geometry)
    elif isinstance(geometry, Polygon):
        writer.write_u32(len(geometry.rings))
        for ring in geometry.rings:
            _write_linestring(writer, ring)
    elif isinstance(geometry, GeometryCollection):
        writer.write_u32(len(geometry.geometries))
        for child in geometry.geometries:
            write_geometry(writer, child)
    else:
        raise MalformedWkbError(f"Cannot write geometry: {type(geometry).__name__}")


def _write_point(writer: ByteWriter, point: Point):
    writer.write_f64(point.x)
    writer.write_f64(point.y)
    if point.has_z:
        writer.write_f64(point.z)
    if point.has_m:
        writer.write_f64(point.m)


def _write_linestring(writer: ByteWriter, line: LineString):
    writer.write_u32(len(line.points))
    for point in line.points:
        _write_point(writer, point)


def from_wkb(wkb: bytes) -> Geometry:
    """
    Decode WKB bytes into a geometry.

    Args:
        wkb: WKB bytes (can be little or big endian)

    Returns:
        The decoded geometry

    Raises:
        MalformedWkbError: If WKB is invalid or unsupported
    """
    if not wkb:
        raise MalformedWkbError("Invalid WKB: empty")
    return read_geometry(ByteReader(wkb))


def to_wkb(geometry: Geometry, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> bytes:
    """Encode a geometry as WKB in the given byte order."""
    writer = ByteWriter(byte_order)
    write_geometry(writer, geometry)
    return writer.finish()
