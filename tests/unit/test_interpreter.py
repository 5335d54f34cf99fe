"""Tests for script evaluation semantics."""

import math

import pytest

from sparklet.core import EvaluationError, StepLimitExceeded
from sparklet.script import UNDEFINED, Interpreter, parse_expression, parse_program, to_js_string, to_json_value
from sparklet.script.values import MAX_VALUE_DEPTH


def evaluate(source, **bindings):
    return Interpreter().evaluate(parse_expression(source), bindings)


def run(source, **bindings):
    return Interpreter().run(parse_program(source), bindings)


@pytest.mark.unit
@pytest.mark.parametrize("source,expected", [
    ("1 + 2", 3),
    ("6 / 2", 3),
    ("7 % 3", 1),
    ("2 ** 10", 1024),
    ("'a' + 1", "a1"),
    ("1 + '1'", "11"),
    ("'3' * '4'", 12),
    ("1 / 0", math.inf),
    ("[1, 2] + ''", "1,2"),
    ("`n=${1 + 1}`", "n=2"),
    ("typeof missing", "undefined"),
    ("typeof 'x'", "string"),
    ("null ?? 'd'", "d"),
    ("0 || 'd'", "d"),
    ("0 ?? 'd'", 0),
    ("1 && 2", 2),
    ("!''", True),
    ("true ? 'y' : 'n'", "y"),
])
def test_expression_values(source, expected):
    assert evaluate(source) == expected


@pytest.mark.unit
def test_equality_semantics():
    assert evaluate("1 === 1.0") is True
    assert evaluate("1 === '1'") is False
    assert evaluate("1 == '1'") is True
    assert evaluate("null == undefined") is True
    assert evaluate("null === undefined") is False
    assert evaluate("true === 1") is False
    assert evaluate("NaN === NaN") is False


@pytest.mark.unit
def test_state_access():
    state = {"count": 2, "cells": ["", "X"], "user": None}
    assert evaluate("state.count * 2", state=state) == 4
    assert evaluate("state.cells[1]", state=state) == "X"
    assert evaluate("state.cells.length", state=state) == 2
    assert evaluate("state.missing", state=state) is UNDEFINED
    assert evaluate("state.user?.name", state=state) is UNDEFINED


@pytest.mark.unit
def test_reading_property_of_null_fails():
    with pytest.raises(EvaluationError, match="Cannot read properties of null"):
        evaluate("state.user.name", state={"user": None})


@pytest.mark.unit
def test_calling_non_function_fails():
    with pytest.raises(EvaluationError, match="is not a function"):
        evaluate("state.count()", state={"count": 1})


@pytest.mark.unit
def test_array_methods():
    cells = ["", "X", ""]
    assert evaluate("cells.map((c, i) => i === 2 ? 'O' : c)", cells=cells) == ["", "X", "O"]
    assert evaluate("cells.filter(c => c)", cells=cells) == ["X"]
    assert evaluate("cells.every(c => c === '')", cells=cells) is False
    assert evaluate("cells.findIndex(c => c === 'X')", cells=cells) == 1
    assert evaluate("[3, 1, 2].sort()") == [1, 2, 3]
    assert evaluate("[1, 2, 3].reduce((a, b) => a + b, 0)") == 6
    assert evaluate("[1, 2, 3].join('-')") == "1-2-3"
    assert evaluate("[1, 2, 3].slice(-2)") == [2, 3]


@pytest.mark.unit
def test_methods_do_not_mutate_receiver():
    items = [3, 1, 2]
    evaluate("items.sort()", items=items)
    evaluate("items.reverse()", items=items)
    assert items == [3, 1, 2]


@pytest.mark.unit
def test_string_and_number_methods():
    assert evaluate("'Hello'.toUpperCase()") == "HELLO"
    assert evaluate("'a,b'.split(',')") == ["a", "b"]
    assert evaluate("'7'.padStart(3, '0')") == "007"
    assert evaluate("(1.5).toFixed(2)") == "1.50"
    assert evaluate("(6 / 2).toString()") == "3"
    assert evaluate("Math.max(1, 5, 3)") == 5
    assert evaluate("parseInt('42px')") == 42
    assert evaluate("String(12)") == "12"
    assert evaluate("Object.keys({a: 1, b: 2})") == ["a", "b"]


@pytest.mark.unit
def test_program_locals_and_branches():
    result = run("""
        let total = 0;
        const step = params.step;
        if (step > 0) {
            total = state.count + step;
        } else {
            total = state.count;
        }
        return {count: total};
    """, state={"count": 1}, params={"step": 2})
    assert result == {"count": 3}


@pytest.mark.unit
def test_program_without_return():
    assert run("const a = 1;") is UNDEFINED


@pytest.mark.unit
def test_spread_builds_new_objects():
    state = {"a": 1, "b": 2}
    result = run("return {...state, b: 3};", state=state)
    assert result == {"a": 1, "b": 3}
    assert state == {"a": 1, "b": 2}


@pytest.mark.unit
def test_const_and_bindings_are_read_only():
    with pytest.raises(EvaluationError, match="constant"):
        run("const a = 1; a = 2;")
    with pytest.raises(EvaluationError, match="constant"):
        run("state = {};", state={})


@pytest.mark.unit
def test_undeclared_assignment_fails():
    with pytest.raises(EvaluationError, match="not defined"):
        run("x = 1;")


@pytest.mark.unit
def test_step_budget():
    """A runaway computation is cut off by the operation budget."""
    interpreter = Interpreter(max_steps=200)
    program = parse_program("return [1,2,3,4,5,6,7,8,9,10].map(a => [1,2,3,4,5,6,7,8,9,10].map(b => a * b));")
    with pytest.raises(StepLimitExceeded):
        interpreter.run(program, {})


@pytest.mark.unit
def test_budget_resets_per_invocation():
    interpreter = Interpreter(max_steps=50)
    expr = parse_expression("1 + 2 + 3")
    for _ in range(100):
        assert interpreter.evaluate(expr, {}) == 6


@pytest.mark.unit
def test_unbounded_recursion_is_stopped():
    program = parse_program("const f = n => f(n + 1); return f(0);")
    with pytest.raises(StepLimitExceeded):
        Interpreter(max_steps=1_000_000, max_call_depth=16).run(program, {})


# ============================================================================
# Resource limits
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("source,expected", [
    ("1" + "0" * 400 + " / 3", math.inf),
    ("-1" + "0" * 400 + " / 3", -math.inf),
    ("1" + "0" * 400 + " % 7", math.nan),
    ("parseInt('1' + '0'.repeat(5000)) / 3", math.inf),
    ("Number('1_000')", math.nan),
])
def test_huge_numbers_follow_float_range(source, expected):
    result = evaluate(source)
    if math.isnan(expected):
        assert math.isnan(result)
    else:
        assert result == expected


@pytest.mark.unit
def test_integers_past_safe_range_become_floats():
    assert isinstance(evaluate("99999999999 * 99999999999"), float)
    assert evaluate("state.n / 3", state={"n": 10**400}) == math.inf
    assert evaluate("`${state.n}`", state={"n": 10**400}) == "Infinity"


@pytest.mark.unit
@pytest.mark.parametrize("source", [
    "'a'.padStart(Infinity)",
    "'a'.padEnd(2000000, 'xy')",
    "'ab'.repeat(10000).repeat(10000)",
    "'x'.repeat(10000).repeat(11).split('')",
    "'x'.repeat(10000).repeat(11).split('').concat([1])",
])
def test_oversized_values_are_rejected(source):
    with pytest.raises(EvaluationError, match="Invalid (string|array) length|Invalid count"):
        evaluate(source)


@pytest.mark.unit
@pytest.mark.parametrize("body", [
    "return s + s;",
    "return `${s}${s}`;",
    "return [s, s].join('');",
])
def test_string_building_is_capped(body):
    with pytest.raises(EvaluationError, match="Invalid string length"):
        run("const s = 'x'.repeat(10000).repeat(60);" + body)


@pytest.mark.unit
def test_shared_arrays_stringify_within_cap():
    program = "const deep = 'x'.repeat(40).split('').reduce(acc => [acc, acc], 'ab'); return deep + '';"
    with pytest.raises(EvaluationError, match="Invalid string length"):
        run(program)


@pytest.mark.unit
def test_deeply_nested_arrays_stringify():
    value = 0
    for _ in range(5000):
        value = [value]
    assert to_js_string(value) == "0"
    assert to_js_string([1, [2, [3, None]], []]) == "1,2,3,,"


@pytest.mark.unit
def test_json_conversion_limits():
    deep = 0
    for _ in range(MAX_VALUE_DEPTH + 2):
        deep = {"a": deep}
    with pytest.raises(EvaluationError, match="deeper"):
        to_json_value(deep)

    big = "x" * 1_000_000
    with pytest.raises(EvaluationError, match="larger"):
        to_json_value([big] * 11)
    assert to_json_value([big] * 2) == [big, big]
