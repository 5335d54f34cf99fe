"""Tests for the helper registry."""

import pytest

from sparklet.engine import HelperRegistry, ScriptRuntime
from sparklet.script import UNDEFINED


@pytest.fixture
def registry(settings):
    return HelperRegistry({
        "winner": """
            const c = state.cells;
            return c[0] !== '' && c[0] === c[1] && c[1] === c[2] ? c[0] : '';
        """,
        "scaled": "return state.count * (params?.factor ?? 1);",
        "broken": "return state.nope.deeper;",
        "viaOther": "return helpers.scaled({factor: 10}) + 1;",
    }, ScriptRuntime(settings))


@pytest.mark.unit
def test_invoke_reads_state(registry):
    assert registry.invoke("winner", {"cells": ["X", "X", "X"]}) == "X"
    assert registry.invoke("winner", {"cells": ["X", "", "X"]}) == ""


@pytest.mark.unit
def test_invoke_with_params(registry):
    assert registry.invoke("scaled", {"count": 2}, {"factor": 3}) == 6
    assert registry.invoke("scaled", {"count": 2}) == 2


@pytest.mark.unit
def test_unknown_and_failing_helpers_are_undefined(registry):
    assert registry.invoke("nope", {}) is UNDEFINED
    assert registry.invoke("broken", {}) is UNDEFINED


@pytest.mark.unit
def test_helpers_call_each_other(registry):
    assert registry.invoke("viaOther", {"count": 2}) == 21


@pytest.mark.unit
def test_proxy_members(registry):
    proxy = registry.proxy({"count": 5})
    assert proxy.get_member("missing") is UNDEFINED
    assert proxy.get_member("scaled")({"factor": 2}) == 10


@pytest.mark.unit
def test_helper_cannot_touch_state(settings):
    registry = HelperRegistry({"sneaky": "state = {}; return 1;"}, ScriptRuntime(settings))
    state = {"count": 1}
    assert registry.invoke("sneaky", state) is UNDEFINED
    assert state == {"count": 1}


@pytest.mark.unit
def test_names(registry):
    assert registry.names() == ["broken", "scaled", "viaOther", "winner"]
