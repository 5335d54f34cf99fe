"""Pytest configuration and fixtures."""

import os

import pytest

from sparklet.core import Settings, create_container, safe_json_dumps
from sparklet.engine import SparkletInstance


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["SPARKLET_LOG_LEVEL"] = "DEBUG"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings (independent of the cached global instance)."""
    return Settings()


@pytest.fixture
def di_container(settings):
    """Dependency injection container for testing."""
    return create_container(settings)


class RecordingHaptics:
    def __init__(self):
        self.presses = 0

    def light(self):
        self.presses += 1


@pytest.fixture
def haptics():
    return RecordingHaptics()


# ============================================================================
# Definition Fixtures
# ============================================================================

@pytest.fixture
def counter_definition():
    """Minimal counter: one button, one action."""
    return safe_json_dumps({
        "initialState": {"count": 0},
        "actions": {"increment": "return {count: state.count + 1};"},
        "view": {
            "elements": [
                {"type": "button", "label": "Count: {{state.count}}", "onPress": "increment"},
            ],
        },
    })


@pytest.fixture
def grid_definition():
    """Nine-cell grid marking X on press."""
    return safe_json_dumps({
        "initialState": {"cells": ["", "", "", "", "", "", "", "", ""]},
        "actions": {
            "mark": 'return {cells: state.cells.map((c, i) => i === params.index ? "X" : c)};',
        },
        "view": {
            "elements": [
                {"type": "grid", "dataSource": "state.cells", "onPress": "mark"},
            ],
        },
    })


@pytest.fixture
def make_instance(settings, haptics):
    """Factory building an instance from a definition dict or text."""

    def _make(definition, **kwargs):
        text = definition if isinstance(definition, str) or definition is None else safe_json_dumps(definition)
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("haptics", haptics)
        return SparkletInstance.from_text(text, **kwargs)

    return _make
