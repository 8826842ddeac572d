# Endian-aware byte readers and writers
from .byte_order import ByteOrder
from .byte_reader import ByteReader
from .byte_writer import ByteWriter

__all__ = [
    "ByteOrder",
    "ByteReader",
    "ByteWriter",
]
