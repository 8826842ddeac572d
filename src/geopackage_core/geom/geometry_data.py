"""
GeoPackage Binary (GPB) geometry cells.

GPB format:
- 2 bytes: Magic 'GP' (0x47, 0x50)
- 1 byte: Version (0)
- 1 byte: Flags
    bit 0: byte order of srs_id and envelope (0 big, 1 little)
    bits 1-3: envelope indicator (0 none, 1 xy, 2 xyz, 3 xym, 4 xyzm)
    bit 4: empty geometry
    bit 5: extended GeoPackage binary
    bits 6-7: reserved
- 4 bytes: SRS ID
- Variable: Envelope (0/32/48/64 bytes based on flags)
- Rest: WKB payload, with its own byte order
"""

from typing import Optional

from ..config import FeatureSettings, get_settings
from ..exceptions import MalformedHeaderError, UnexpectedEndError
from ..io import ByteOrder, ByteReader, ByteWriter
from .envelope import ENVELOPE_SIZES, GeometryEnvelope, build_envelope
from .model import Geometry, GeometryType
from .wkb import from_wkb, to_wkb


MAGIC = b"GP"
VERSION = 0
HEADER_SIZE = 8

FLAG_LITTLE_ENDIAN = 0x01
FLAG_EMPTY = 0x10
FLAG_EXTENDED = 0x20


def _parse_header(data: bytes) -> tuple[ByteReader, int, int]:
    if len(data) < HEADER_SIZE:
        raise MalformedHeaderError(f"GPB too short: {len(data)} bytes")

    reader = ByteReader(data)
    magic = reader.read_bytes(2)
    if magic != MAGIC:
        raise MalformedHeaderError(f"Invalid GPB magic: {magic!r}")
    version = reader.read_u8()
    if version != VERSION:
        raise MalformedHeaderError(f"Unsupported GPB version: {version}")

    flags = reader.read_u8()
    indicator = (flags >> 1) & 0x07
    if indicator not in ENVELOPE_SIZES:
        raise MalformedHeaderError(f"Invalid envelope indicator: {indicator}")
    reader.set_byte_order(ByteOrder.LITTLE_ENDIAN if flags & FLAG_LITTLE_ENDIAN else ByteOrder.BIG_ENDIAN)
    return reader, flags, indicator


def gpb_to_wkb(gpb: bytes) -> bytes:
    """
    Convert GeoPackage Binary (GPB) to Well-Known Binary (WKB).

    The WKB payload is returned without being decoded.

    Args:
        gpb: GeoPackage Binary geometry bytes

    Returns:
        WKB geometry bytes

    Raises:
        MalformedHeaderError: If the GPB header is invalid
    """
    _, _, indicator = _parse_header(gpb)
    wkb_offset = HEADER_SIZE + 8 * ENVELOPE_SIZES[indicator]
    if wkb_offset > len(gpb):
        raise MalformedHeaderError(f"GPB truncated inside envelope: {len(gpb)} bytes")
    return gpb[wkb_offset:]


class GeometryData:
    """
    A decoded geometry cell: header fields plus the geometry it wraps.

    The WKB body read from storage is written back unchanged while the
    geometry still equals what it decodes to. Once the geometry is replaced
    or mutated in place it is re-encoded, in the byte order of the decoded
    body's root geometry.
    """

    def __init__(
        self,
        srs_id: int = 0,
        geometry: Optional[Geometry] = None,
        envelope: Optional[GeometryEnvelope] = None,
        byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN,
        empty: Optional[bool] = None,
        extended: bool = False,
        wkb_byte_order: Optional[ByteOrder] = None,
    ):
        self.srs_id = srs_id
        self.geometry = geometry
        self.envelope = envelope
        self.byte_order = byte_order
        self.extended = extended
        self.wkb_byte_order = wkb_byte_order or byte_order
        if empty is None:
            empty = geometry is None or geometry.is_empty()
        self.empty = empty
        self._stored_wkb: Optional[bytes] = None

    @classmethod
    def create(
        cls,
        geometry: Geometry,
        srs_id: int,
        settings: Optional[FeatureSettings] = None,
    ) -> "GeometryData":
        """Build a new cell for a geometry using the configured byte order and envelope policy."""
        settings = settings or get_settings()
        envelope = build_envelope(geometry) if settings.write_envelope else None
        return cls(
            srs_id=srs_id,
            geometry=geometry,
            envelope=envelope,
            byte_order=settings.geometry_byte_order,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "GeometryData":
        """
        Decode a GPB blob.

        Raises:
            MalformedHeaderError: On bad magic, version, envelope indicator or truncation
            MalformedWkbError: If the WKB payload is invalid
        """
        reader, flags, indicator = _parse_header(data)
        srs_id = reader.read_i32()
        try:
            values = [reader.read_f64() for _ in range(ENVELOPE_SIZES[indicator])]
        except UnexpectedEndError as e:
            raise MalformedHeaderError(f"GPB truncated inside envelope: {e}") from e
        envelope = GeometryEnvelope.from_values(indicator, values) if indicator else None

        wkb = bytes(data[reader.position:])
        geometry = None
        wkb_byte_order = None
        if wkb:
            wkb_byte_order = ByteOrder.from_wkb_code(wkb[0])
            geometry = from_wkb(wkb)

        cell = cls(
            srs_id=srs_id,
            geometry=geometry,
            envelope=envelope,
            byte_order=reader.byte_order,
            empty=bool(flags & FLAG_EMPTY),
            extended=bool(flags & FLAG_EXTENDED),
            wkb_byte_order=wkb_byte_order,
        )
        if wkb:
            cell._stored_wkb = wkb
        return cell

    @property
    def geometry_type(self) -> Optional[GeometryType]:
        return self.geometry.geometry_type if self.geometry is not None else None

    def set_geometry(self, geometry: Optional[Geometry]):
        self.geometry = geometry
        self._stored_wkb = None
        self.empty = geometry is None or geometry.is_empty()

    def refresh_envelope(self):
        """Recompute an embedded envelope after the geometry changed."""
        if self.envelope is not None and self.geometry is not None:
            self.envelope = build_envelope(self.geometry)

    @property
    def flags(self) -> int:
        flags = self.byte_order.wkb_code
        if self.envelope is not None:
            flags |= self.envelope.indicator << 1
        if self.empty:
            flags |= FLAG_EMPTY
        if self.extended:
            flags |= FLAG_EXTENDED
        return flags

    @property
    def header_bytes(self) -> bytes:
        writer = ByteWriter(self.byte_order)
        writer.write_bytes(MAGIC)
        writer.write_u8(VERSION)
        writer.write_u8(self.flags)
        writer.write_i32(self.srs_id)
        if self.envelope is not None:
            for value in self.envelope.to_values():
                writer.write_f64(value)
        return writer.finish()

    @property
    def wkb_bytes(self) -> bytes:
        if self.geometry is None:
            return b""
        if self._stored_wkb is not None and from_wkb(self._stored_wkb) == self.geometry:
            return self._stored_wkb
        return to_wkb(self.geometry, self.wkb_byte_order)

    def to_bytes(self) -> bytes:
        return self.header_bytes + self.wkb_bytes

    def __eq__(self, other):
        if not isinstance(other, GeometryData):
            return NotImplemented
        return (
            self.srs_id == other.srs_id
            and self.envelope == other.envelope
            and self.byte_order == other.byte_order
            and self.empty == other.empty
            and self.extended == other.extended
            and self.geometry == other.geometry
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"GeometryData(srs_id={self.srs_id}, geometry={self.geometry!r}, "
            f"envelope={self.envelope!r}, byte_order={self.byte_order.name})"
        )
