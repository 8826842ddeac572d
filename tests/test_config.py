"""Tests for feature settings."""

from __future__ import annotations

import pydantic
import pytest

from geopackage_core.config import FeatureSettings, get_settings
from geopackage_core.io import ByteOrder


def test_defaults() -> None:
    """Test the default settings."""
    settings = FeatureSettings()
    assert not settings.strict_truncation
    assert settings.geometry_byte_order is ByteOrder.LITTLE_ENDIAN
    assert settings.write_envelope
    assert settings.float_tolerance is None


def test_settings_are_frozen() -> None:
    """Test settings cannot be changed after creation."""
    settings = FeatureSettings()
    with pytest.raises(pydantic.ValidationError):
        settings.strict_truncation = True


def test_validation() -> None:
    """Test invalid values are rejected."""
    with pytest.raises(pydantic.ValidationError):
        FeatureSettings(float_tolerance=-1.0)
    assert FeatureSettings(geometry_byte_order=">").geometry_byte_order is ByteOrder.BIG_ENDIAN


def test_get_settings_is_cached() -> None:
    """Test the default settings instance is shared."""
    assert get_settings() is get_settings()
    assert get_settings() == FeatureSettings()
