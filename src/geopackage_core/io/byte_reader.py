"""
Endian-aware reader over a bounded byte buffer.

Uses the stdlib struct module for all fixed-width decoding.
"""

import struct
from typing import Optional

from ..exceptions import UnexpectedEndError
from .byte_order import ByteOrder


class ByteReader:
    """
    Read fixed-width integers and IEEE-754 floats from a byte buffer.

    The cursor only moves forward. A read that needs more bytes than remain
    raises UnexpectedEndError and leaves the cursor where it was.
    """

    def __init__(self, data: bytes, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN):
        self._data = bytes(data)
        self._position = 0
        self._byte_order = byte_order

    @property
    def byte_order(self) -> ByteOrder:
        return self._byte_order

    def set_byte_order(self, byte_order: ByteOrder):
        self._byte_order = byte_order

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise UnexpectedEndError(size, self.remaining)
        chunk = self._data[self._position:self._position + size]
        self._position += size
        return chunk

    def _unpack(self, fmt: str, byte_order: Optional[ByteOrder]):
        fmt = f"{(byte_order or self._byte_order).value}{fmt}"
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_bytes(self, size: int) -> bytes:
        return self._take(size)

    def read_string(self, size: int) -> str:
        return self._take(size).decode("utf-8")

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_i8(self) -> int:
        return self._unpack("b", None)

    def read_u16(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("H", byte_order)

    def read_i16(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("h", byte_order)

    def read_u32(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("I", byte_order)

    def read_i32(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("i", byte_order)

    def read_u64(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("Q", byte_order)

    def read_i64(self, byte_order: Optional[ByteOrder] = None) -> int:
        return self._unpack("q", byte_order)

    def read_f32(self, byte_order: Optional[ByteOrder] = None) -> float:
        return self._unpack("f", byte_order)

    def read_f64(self, byte_order: Optional[ByteOrder] = None) -> float:
        return self._unpack("d", byte_order)
