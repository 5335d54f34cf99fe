"""Tests for configuration."""

import pytest
from pydantic import ValidationError

from sparklet.core import Settings, get_settings


@pytest.mark.unit
def test_defaults():
    """Test default settings values."""
    settings = Settings()
    assert settings.max_steps == 10_000
    assert settings.max_call_depth == 32
    assert settings.enable_cache is True
    assert settings.persist_state is True


@pytest.mark.unit
def test_env_override(monkeypatch):
    """Test SPARKLET_ prefixed environment variables."""
    monkeypatch.setenv("SPARKLET_MAX_STEPS", "500")
    monkeypatch.setenv("SPARKLET_ENABLE_CACHE", "false")

    settings = Settings()
    assert settings.max_steps == 500
    assert settings.enable_cache is False


@pytest.mark.unit
def test_rejects_non_positive_budget():
    with pytest.raises(Exception):
        Settings(max_steps=0)


@pytest.mark.unit
def test_get_settings_cached():
    assert get_settings() is get_settings()


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [
    ("max_json_depth", 65),
    ("max_definition_size", 2 * 1024 * 1024),
])
def test_rejects_limits_past_value_bounds(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})
