"""
Bounding envelopes embedded in GeoPackage geometry headers.
"""

import math
from dataclasses import dataclass
from typing import Optional

from ..exceptions import MalformedHeaderError
from .model import Geometry


# Envelope indicator -> number of doubles stored in the header
ENVELOPE_SIZES = {0: 0, 1: 4, 2: 6, 3: 6, 4: 8}


@dataclass
class GeometryEnvelope:
    """Axis-aligned bounding box, with optional Z and M ranges."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: Optional[float] = None
    max_z: Optional[float] = None
    min_m: Optional[float] = None
    max_m: Optional[float] = None

    @property
    def has_z(self) -> bool:
        return self.min_z is not None

    @property
    def has_m(self) -> bool:
        return self.min_m is not None

    @property
    def indicator(self) -> int:
        """Envelope contents indicator: 1 xy, 2 xyz, 3 xym, 4 xyzm."""
        if self.has_z and self.has_m:
            return 4
        elif self.has_z:
            return 2
        elif self.has_m:
            return 3
        return 1

    def to_values(self) -> list[float]:
        """Envelope doubles in header order."""
        values = [self.min_x, self.max_x, self.min_y, self.max_y]
        if self.has_z:
            values += [self.min_z, self.max_z]
        if self.has_m:
            values += [self.min_m, self.max_m]
        return values

    @classmethod
    def from_values(cls, indicator: int, values: list[float]) -> "GeometryEnvelope":
        if ENVELOPE_SIZES.get(indicator) != len(values) or indicator == 0:
            raise MalformedHeaderError(
                f"Envelope indicator {indicator} does not match {len(values)} values"
            )
        envelope = cls(*values[:4])
        rest = values[4:]
        if indicator in (2, 4):
            envelope.min_z, envelope.max_z = rest[0], rest[1]
            rest = rest[2:]
        if indicator in (3, 4):
            envelope.min_m, envelope.max_m = rest[0], rest[1]
        return envelope


def build_envelope(geometry: Geometry) -> Optional[GeometryEnvelope]:
    """
    Compute the envelope spanning every point of a geometry.

    Args:
        geometry: Any geometry

    Returns:
        GeometryEnvelope with Z/M ranges when the geometry has them,
        or None for empty geometries
    """
    envelope = None
    for point in geometry.iter_points():
        if math.isnan(point.x) or math.isnan(point.y):
            continue
        if envelope is None:
            envelope = GeometryEnvelope(point.x, point.x, point.y, point.y)
            if geometry.has_z:
                envelope.min_z = envelope.max_z = point.z
            if geometry.has_m:
                envelope.min_m = envelope.max_m = point.m
            continue
        envelope.min_x = min(envelope.min_x, point.x)
        envelope.max_x = max(envelope.max_x, point.x)
        envelope.min_y = min(envelope.min_y, point.y)
        envelope.max_y = max(envelope.max_y, point.y)
        if geometry.has_z:
            envelope.min_z = min(envelope.min_z, point.z)
            envelope.max_z = max(envelope.max_z, point.z)
        if geometry.has_m:
            envelope.min_m = min(envelope.min_m, point.m)
            envelope.max_m = max(envelope.max_m, point.m)
    return envelope
