"""Tests for action dispatch."""

import pytest
from hypothesis import given, strategies as st

from sparklet.engine import ActionDispatcher, HelperRegistry, ScriptRuntime


def make_dispatcher(actions, helpers=None, settings=None):
    runtime = ScriptRuntime(settings)
    return ActionDispatcher(actions, runtime, HelperRegistry(helpers or {}, runtime))


@pytest.fixture
def dispatcher(settings):
    return make_dispatcher({
        "increment": "return {count: state.count + 1};",
        "add": "return {count: state.count + params.amount};",
        "noop": "return {};",
        "throws": "return {count: state.missing.value};",
        "notObject": "return 42;",
        "nothing": "const x = 1;",
        "returnsFunction": "return {count: () => 1};",
        "clears": "return {label: undefined, ratio: 1 / 0};",
        "useHelper": "return {count: helpers.next()};",
    }, helpers={"next": "return state.count + 10;"}, settings=settings)


@pytest.mark.unit
def test_result_is_shallow_merged(dispatcher):
    state = {"count": 1, "name": "keep"}
    result = dispatcher.dispatch("increment", state)

    assert result == {"count": 2, "name": "keep"}
    assert state == {"count": 1, "name": "keep"}


@pytest.mark.unit
def test_params_bound(dispatcher):
    assert dispatcher.dispatch("add", {"count": 1}, {"amount": 5}) == {"count": 6}


@pytest.mark.unit
def test_missing_params_default_to_empty_object(settings):
    d = make_dispatcher({"peek": "return {seen: typeof params, n: Object.keys(params).length};"}, settings=settings)
    assert d.dispatch("peek", {}) == {"seen": "object", "n": 0}


@pytest.mark.unit
@pytest.mark.parametrize("name", [None, "", "unknown"])
def test_unknown_action_returns_same_state(dispatcher, name):
    state = {"count": 1}
    assert dispatcher.dispatch(name, state) is state


@pytest.mark.unit
@pytest.mark.parametrize("name", ["throws", "notObject", "nothing", "returnsFunction"])
def test_unusable_actions_leave_state_unchanged(dispatcher, name):
    state = {"count": 1}
    assert dispatcher.dispatch(name, state) is state


@pytest.mark.unit
def test_result_converted_to_json_values(dispatcher):
    result = dispatcher.dispatch("clears", {"label": "x", "ratio": 0.5})
    assert result == {"label": None, "ratio": None}


@pytest.mark.unit
def test_actions_can_call_helpers(dispatcher):
    assert dispatcher.dispatch("useHelper", {"count": 1}) == {"count": 11}


@pytest.mark.unit
def test_has(dispatcher):
    assert dispatcher.has("increment")
    assert not dispatcher.has("decrement")


@pytest.mark.unit
@given(st.dictionaries(st.text(min_size=1, max_size=8), st.integers(), max_size=8))
def test_empty_result_is_idempotent(state):
    """Property: an action returning ``{}`` never changes State."""
    d = make_dispatcher({"noop": "return {};"})
    once = d.dispatch("noop", state)
    twice = d.dispatch("noop", once)
    assert once == state
    assert twice == state


@pytest.mark.unit
@given(
    st.dictionaries(st.sampled_from(["a", "b", "c", "d"]), st.integers()),
    st.integers(),
)
def test_merge_keeps_untouched_keys(state, value):
    """Property: keys the action does not return keep their values."""
    d = make_dispatcher({"setA": "return {a: params.value};"})
    result = d.dispatch("setA", state, {"value": value})
    assert result["a"] == value
    assert {k: v for k, v in result.items() if k != "a"} == {k: v for k, v in state.items() if k != "a"}


HOSTILE_BODIES = {
    "deepParens": "return {count: " + "(" * 3000 + "1" + ")" * 3000 + "};",
    "deepBlocks": "if (true) { " * 500 + "return {count: 2};" + " }" * 500,
    "hugePad": "return {count: 'a'.padStart(Infinity)};",
    "deepResult": "return {count: 'x'.repeat(70).split('').reduce(acc => ({a: acc}), 0)};",
    "wideResult": "const s = 'x'.repeat(10000).repeat(100); return {a: [s, s, s, s, s, s, s, s, s, s, s]};",
}


@pytest.mark.unit
@pytest.mark.parametrize("name", sorted(HOSTILE_BODIES))
def test_hostile_actions_leave_state_unchanged(settings, name):
    d = make_dispatcher(HOSTILE_BODIES, settings=settings)
    state = {"count": 1}
    assert d.dispatch(name, state) is state


@pytest.mark.unit
def test_overflowing_arithmetic_stores_null(settings):
    d = make_dispatcher({"blowUp": "return {count: state.count * 1" + "0" * 400 + " / 3};"}, settings=settings)
    assert d.dispatch("blowUp", {"count": 1}) == {"count": None}
