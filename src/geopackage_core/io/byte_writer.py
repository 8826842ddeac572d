import struct
from typing import Optional

from .byte_order import ByteOrder


class ByteWriter:
    """Accumulate fixed-width values into a growing buffer."""

    def __init__(self, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN):
        self._buffer = bytearray()
        self._byte_order = byte_order

    @property
    def byte_order(self) -> ByteOrder:
        return self._byte_order

    def set_byte_order(self, byte_order: ByteOrder):
        self._byte_order = byte_order

    @property
    def size(self) -> int:
        return len(self._buffer)

    def _pack(self, fmt: str, value, byte_order: Optional[ByteOrder]):
        order = byte_order or self._byte_order
        self._buffer += struct.pack(f"{order.value}{fmt}", value)

    def write_bytes(self, data: bytes):
        self._buffer += data

    def write_string(self, value: str):
        self._buffer += value.encode("utf-8")

    def write_u8(self, value: int):
        self._pack("B", value, None)

    def write_i8(self, value: int):
        self._pack("b", value, None)

    def write_u16(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("H", value, byte_order)

    def write_i16(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("h", value, byte_order)

    def write_u32(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("I", value, byte_order)

    def write_i32(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("i", value, byte_order)

    def write_u64(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("Q", value, byte_order)

    def write_i64(self, value: int, byte_order: Optional[ByteOrder] = None):
        self._pack("q", value, byte_order)

    def write_f32(self, value: float, byte_order: Optional[ByteOrder] = None):
        self._pack("f", value, byte_order)

    def write_f64(self, value: float, byte_order: Optional[ByteOrder] = None):
        self._pack("d", value, byte_order)

    def finish(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buffer)
