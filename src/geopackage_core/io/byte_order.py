from enum import Enum

from ..exceptions import MalformedWkbError


class ByteOrder(Enum):
    """Byte order of multi-byte values, valued by its struct format prefix."""
    BIG_ENDIAN = ">"
    LITTLE_ENDIAN = "<"

    @property
    def wkb_code(self) -> int:
        """Byte order marker used by WKB and the GeoPackage header flags."""
        return 1 if self is ByteOrder.LITTLE_ENDIAN else 0

    @classmethod
    def from_wkb_code(cls, code: int) -> "ByteOrder":
        if code == 0:
            return cls.BIG_ENDIAN
        elif code == 1:
            return cls.LITTLE_ENDIAN
        raise MalformedWkbError(f"Invalid WKB byte order: {code}")
