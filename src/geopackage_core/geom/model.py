"""
Geometry model for GeoPackage features.

Point, LineString, Polygon and the GeometryCollection family, each carrying
explicit has_z / has_m flags. Nested geometries must share the flags of the
geometry that contains them; construction fails otherwise.
"""

import math
from enum import Enum
from typing import Iterator, Optional

from ..exceptions import InvalidGeometryError


class GeometryType(Enum):
    """OGC geometry types, valued by their WKB base type code."""
    GEOMETRY = 0
    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOINT = 4
    MULTILINESTRING = 5
    MULTIPOLYGON = 6
    GEOMETRYCOLLECTION = 7

    @property
    def wkb_code(self) -> int:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "GeometryType":
        """Look up a type by the name stored in gpkg_geometry_columns."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise InvalidGeometryError(f"Unsupported geometry type: {name}") from None

    @classmethod
    def from_code(cls, code: int) -> "GeometryType":
        try:
            return cls(code)
        except ValueError:
            raise InvalidGeometryError(f"Unsupported geometry type code: {code}") from None

    def is_assignable_to(self, other: "GeometryType") -> bool:
        """True if a value of this type may be stored where `other` is declared."""
        if other is GeometryType.GEOMETRY or other is self:
            return True
        if other is GeometryType.GEOMETRYCOLLECTION:
            return self in (
                GeometryType.MULTIPOINT,
                GeometryType.MULTILINESTRING,
                GeometryType.MULTIPOLYGON,
            )
        return False


def _close(a: Optional[float], b: Optional[float], tolerance: float) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if a == b:
        return True
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return abs(a - b) <= tolerance


class Geometry:
    """Base class of all geometries."""

    geometry_type = GeometryType.GEOMETRY

    def __init__(self, has_z: bool = False, has_m: bool = False):
        self.has_z = bool(has_z)
        self.has_m = bool(has_m)

    def _check_child(self, child: "Geometry"):
        if child.has_z != self.has_z or child.has_m != self.has_m:
            raise InvalidGeometryError(
                f"{child.geometry_type.name} has_z={child.has_z} has_m={child.has_m} "
                f"inside {self.geometry_type.name} has_z={self.has_z} has_m={self.has_m}"
            )

    def iter_points(self) -> Iterator["Point"]:
        raise NotImplementedError

    def num_points(self) -> int:
        return sum(1 for _ in self.iter_points())

    def is_empty(self) -> bool:
        raise NotImplementedError

    def equals(self, other: "Geometry", tolerance: float = 0.0) -> bool:
        """Structural equality with an absolute coordinate tolerance."""
        raise NotImplementedError

    def _same_kind(self, other) -> bool:
        return (
            isinstance(other, Geometry)
            and other.geometry_type is self.geometry_type
            and other.has_z == self.has_z
            and other.has_m == self.has_m
        )

    def __eq__(self, other):
        if not isinstance(other, Geometry):
            return NotImplemented
        return self.equals(other)

    __hash__ = None


def _infer_flags(children: list, has_z: Optional[bool], has_m: Optional[bool]):
    if children:
        if has_z is None:
            has_z = children[0].has_z
        if has_m is None:
            has_m = children[0].has_m
    return bool(has_z), bool(has_m)


class Point(Geometry):
    geometry_type = GeometryType.POINT

    def __init__(
        self,
        x: float,
        y: float,
        z: Optional[float] = None,
        m: Optional[float] = None,
        has_z: Optional[bool] = None,
        has_m: Optional[bool] = None,
    ):
        if has_z is None:
            has_z = z is not None
        if has_m is None:
            has_m = m is not None
        if has_z != (z is not None):
            raise InvalidGeometryError(f"Point has_z={has_z} but z={z}")
        if has_m != (m is not None):
            raise InvalidGeometryError(f"Point has_m={has_m} but m={m}")
        super().__init__(has_z, has_m)
        self.x = float(x)
        self.y = float(y)
        self.z = None if z is None else float(z)
        self.m = None if m is None else float(m)

    def iter_points(self) -> Iterator["Point"]:
        yield self

    def is_empty(self) -> bool:
        # WKB has no empty point; NaN coordinates stand in for it
        return math.isnan(self.x) and math.isnan(self.y)

    def equals(self, other: Geometry, tolerance: float = 0.0) -> bool:
        return (
            self._same_kind(other)
            and _close(self.x, other.x, tolerance)
            and _close(self.y, other.y, tolerance)
            and _close(self.z, other.z, tolerance)
            and _close(self.m, other.m, tolerance)
        )

    def __repr__(self):
        coords = [self.x, self.y]
        if self.has_z:
            coords.append(self.z)
        if self.has_m:
            coords.append(self.m)
        return f"Point({', '.join(repr(c) for c in coords)}, has_z={self.has_z}, has_m={self.has_m})"


class LineString(Geometry):
    geometry_type = GeometryType.LINESTRING

    def __init__(
        self,
        points: Optional[list] = None,
        has_z: Optional[bool] = None,
        has_m: Optional[bool] = None,
    ):
        points = list(points or [])
        super().__init__(*_infer_flags(points, has_z, has_m))
        self.points: list[Point] = []
        for point in points:
            self.add_point(point)

    def add_point(self, point: Point):
        if not isinstance(point, Point):
            raise InvalidGeometryError(f"LineString vertex must be a Point, got {type(point).__name__}")
        self._check_child(point)
        self.points.append(point)

    def iter_points(self) -> Iterator[Point]:
        return iter(self.points)

    def num_points(self) -> int:
        return len(self.points)

    def is_empty(self) -> bool:
        return not self.points

    def equals(self, other: Geometry, tolerance: float = 0.0) -> bool:
        return (
            self._same_kind(other)
            and len(self.points) == len(other.points)
            and all(a.equals(b, tolerance) for a, b in zip(self.points, other.points))
        )

    def __repr__(self):
        return f"LineString({self.points!r}, has_z={self.has_z}, has_m={self.has_m})"


class Polygon(Geometry):
    """Polygon made of rings; the first ring is the exterior, the rest are holes."""

    geometry_type = GeometryType.POLYGON

    def __init__(
        self,
        rings: Optional[list] = None,
        has_z: Optional[bool] = None,
        has_m: Optional[bool] = None,
    ):
        rings = list(rings or [])
        super().__init__(*_infer_flags(rings, has_z, has_m))
        self.rings: list[LineString] = []
        for ring in rings:
            self.add_ring(ring)

    def add_ring(self, ring: LineString):
        if not isinstance(ring, LineString):
            raise InvalidGeometryError(f"Polygon ring must be a LineString, got {type(ring).__name__}")
        self._check_child(ring)
        self.rings.append(ring)

    @property
    def exterior_ring(self) -> Optional[LineString]:
        return self.rings[0] if self.rings else None

    @property
    def interior_rings(self) -> list[LineString]:
        return self.rings[1:]

    def num_rings(self) -> int:
        return len(self.rings)

    def iter_points(self) -> Iterator[Point]:
        for ring in self.rings:
            yield from ring.points

    def is_empty(self) -> bool:
        return not self.rings

    def equals(self, other: Geometry, tolerance: float = 0.0) -> bool:
        return (
            self._same_kind(other)
            and len(self.rings) == len(other.rings)
            and all(a.equals(b, tolerance) for a, b in zip(self.rings, other.rings))
        )

    def __repr__(self):
        return f"Polygon({self.rings!r}, has_z={self.has_z}, has_m={self.has_m})"


class GeometryCollection(Geometry):
    """Ordered collection of geometries, possibly nested collections."""

    geometry_type = GeometryType.GEOMETRYCOLLECTION
    element_type: type = Geometry

    def __init__(
        self,
        geometries: Optional[list] = None,
        has_z: Optional[bool] = None,
        has_m: Optional[bool] = None,
    ):
        geometries = list(geometries or [])
        super().__init__(*_infer_flags(geometries, has_z, has_m))
        self.geometries: list[Geometry] = []
        for geometry in geometries:
            self.add_geometry(geometry)

    def add_geometry(self, geometry: Geometry):
        if not isinstance(geometry, self.element_type):
            raise InvalidGeometryError(
                f"{self.geometry_type.name} cannot hold {type(geometry).__name__}"
            )
        self._check_child(geometry)
        self.geometries.append(geometry)

    def num_geometries(self) -> int:
        return len(self.geometries)

    def iter_points(self) -> Iterator[Point]:
        for geometry in self.geometries:
            yield from geometry.iter_points()

    def is_empty(self) -> bool:
        return not self.geometries

    def equals(self, other: Geometry, tolerance: float = 0.0) -> bool:
        return (
            self._same_kind(other)
            and len(self.geometries) == len(other.geometries)
            and all(a.equals(b, tolerance) for a, b in zip(self.geometries, other.geometries))
        )

    def __repr__(self):
        return (
            f"{type(self).__name__}({self.geometries!r}, "
            f"has_z={self.has_z}, has_m={self.has_m})"
        )


class MultiPoint(GeometryCollection):
    geometry_type = GeometryType.MULTIPOINT
    element_type = Point

    @property
    def points(self) -> list[Point]:
        return self.geometries


class MultiLineString(GeometryCollection):
    geometry_type = GeometryType.MULTILINESTRING
    element_type = LineString

    @property
    def line_strings(self) -> list[LineString]:
        return self.geometries


class MultiPolygon(GeometryCollection):
    geometry_type = GeometryType.MULTIPOLYGON
    element_type = Polygon

    @property
    def polygons(self) -> list[Polygon]:
        return self.geometries


GEOMETRY_CLASSES = {
    GeometryType.POINT: Point,
    GeometryType.LINESTRING: LineString,
    GeometryType.POLYGON: Polygon,
    GeometryType.MULTIPOINT: MultiPoint,
    GeometryType.MULTILINESTRING: MultiLineString,
    GeometryType.MULTIPOLYGON: MultiPolygon,
    GeometryType.GEOMETRYCOLLECTION: GeometryCollection,
}
