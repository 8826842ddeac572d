"""Settings for encoding geometries and binding feature values.

Settings are plain pydantic models; nothing is read from the environment.
Callers pass a FeatureSettings instance to FeatureDao or GeometryData.create,
or rely on the cached defaults from get_settings().

Example:
    Refuse oversized TEXT/BLOB values instead of truncating them:
        >>> settings = FeatureSettings(strict_truncation=True)
        >>> dao = FeatureDao.for_table(db, "roads", settings=settings)
"""

import functools
from typing import Optional

import pydantic

from .io.byte_order import ByteOrder


class FeatureSettings(pydantic.BaseModel):
    """Behaviour switches for feature access.

    Attributes:
        strict_truncation: Raise ValueTooLongError for TEXT/BLOB values longer
            than the column maximum instead of silently truncating them.
        geometry_byte_order: Byte order of newly created geometry cells.
        write_envelope: Embed an envelope in newly created geometry cells.
        float_tolerance: Default tolerance of equality queries on
            FLOAT/DOUBLE/REAL columns. None means exact comparison.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    strict_truncation: bool = False
    geometry_byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN
    write_envelope: bool = True
    float_tolerance: Optional[float] = pydantic.Field(default=None, ge=0)


@functools.lru_cache
def get_settings() -> FeatureSettings:
    """Get the cached default settings instance."""
    return FeatureSettings()
