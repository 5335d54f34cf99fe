"""Whitelisted globals and methods available to scripts.

Nothing here mutates its receiver: ``sort`` and ``reverse`` return copies.
Callbacks (closures passed to ``map`` etc.) are plain callables.
"""

import functools
import math
import random
import re
from typing import Any, Callable

from ..core.errors import EvaluationError
from ..core.json import safe_json_dumps
from .values import (
    MAX_STRING_LENGTH,
    UNDEFINED,
    Namespace,
    NativeFunction,
    check_array_length,
    check_string_length,
    format_number,
    is_callable,
    is_nullish,
    is_number,
    is_truthy,
    normalize_number,
    same_value_zero,
    strict_equals,
    to_integer,
    to_js_string,
    to_json_value,
    to_number,
)


def _callback(fn: Any, method: str) -> Callable[..., Any]:
    if not is_callable(fn):
        raise EvaluationError(f"{to_js_string(fn)} is not a function (in {method})")
    return fn


def _relative_index(value: Any, length: int, default: int) -> int:
    idx = to_integer(value, default)
    if idx < 0:
        return max(length + idx, 0)
    return min(idx, length)


# ============================================================================
# Array methods
# ============================================================================

def _array_reduce(arr: list, fn: Any = UNDEFINED, *initial: Any) -> Any:
    fn = _callback(fn, "reduce")
    items = list(enumerate(arr))
    if initial:
        acc = initial[0]
    elif items:
        acc = items.pop(0)[1]
    else:
        raise EvaluationError("Reduce of empty array with no initial value")
    for i, item in items:
        acc = fn(acc, item, i, arr)
    return acc


def _array_sort(arr: list, fn: Any = UNDEFINED) -> list:
    defined = [x for x in arr if x is not UNDEFINED]
    missing = [x for x in arr if x is UNDEFINED]
    if fn is UNDEFINED:
        ordered = sorted(defined, key=to_js_string)
    else:
        compare = _callback(fn, "sort")

        def cmp(a: Any, b: Any) -> int:
            result = to_number(compare(a, b))
            if isinstance(result, float) and math.isnan(result):
                return 0
            return -1 if result < 0 else (1 if result > 0 else 0)

        ordered = sorted(defined, key=functools.cmp_to_key(cmp))
    return ordered + missing


def _array_concat(arr: list, *others: Any) -> list:
    result = list(arr)
    for other in others:
        if isinstance(other, list):
            result.extend(other)
        else:
            result.append(other)
    return check_array_length(result)


def _array_index_of(arr: list, target: Any = UNDEFINED) -> int:
    for i, item in enumerate(arr):
        if strict_equals(item, target):
            return i
    return -1


def _array_find(arr: list, fn: Any = UNDEFINED) -> Any:
    fn = _callback(fn, "find")
    for i, item in enumerate(arr):
        if is_truthy(fn(item, i, arr)):
            return item
    return UNDEFINED


def _array_find_index(arr: list, fn: Any = UNDEFINED) -> int:
    fn = _callback(fn, "findIndex")
    for i, item in enumerate(arr):
        if is_truthy(fn(item, i, arr)):
            return i
    return -1


ARRAY_METHODS: dict[str, Callable[..., Any]] = {
    "map": lambda arr, fn=UNDEFINED: [
        _callback(fn, "map")(item, i, arr) for i, item in enumerate(arr)
    ],
    "filter": lambda arr, fn=UNDEFINED: [
        item for i, item in enumerate(arr) if is_truthy(_callback(fn, "filter")(item, i, arr))
    ],
    "some": lambda arr, fn=UNDEFINED: any(
        is_truthy(_callback(fn, "some")(item, i, arr)) for i, item in enumerate(arr)
    ),
    "every": lambda arr, fn=UNDEFINED: all(
        is_truthy(_callback(fn, "every")(item, i, arr)) for i, item in enumerate(arr)
    ),
    "find": _array_find,
    "findIndex": _array_find_index,
    "reduce": _array_reduce,
    "join": lambda arr, sep=UNDEFINED: check_string_length((
        "," if sep is UNDEFINED else to_js_string(sep)
    ).join("" if is_nullish(x) else to_js_string(x) for x in arr)),
    "includes": lambda arr, target=UNDEFINED: any(same_value_zero(x, target) for x in arr),
    "indexOf": _array_index_of,
    "slice": lambda arr, start=UNDEFINED, end=UNDEFINED: arr[
        _relative_index(start, len(arr), 0):_relative_index(end, len(arr), len(arr))
    ],
    "concat": _array_concat,
    "reverse": lambda arr: list(reversed(arr)),
    "sort": _array_sort,
}


# ============================================================================
# String methods
# ============================================================================

def _string_split(s: str, sep: Any = UNDEFINED, limit: Any = UNDEFINED) -> list[str]:
    if sep is UNDEFINED:
        parts = [s]
    elif to_js_string(sep) == "":
        parts = list(s)
    else:
        parts = s.split(to_js_string(sep))
    if limit is not UNDEFINED:
        parts = parts[:max(to_integer(limit), 0)]
    return check_array_length(parts)


def _string_pad(s: str, length: Any, fill: Any, at_start: bool) -> str:
    target = to_integer(length)
    filler = " " if fill is UNDEFINED else to_js_string(fill)
    if target <= len(s) or not filler:
        return s
    if target > MAX_STRING_LENGTH:
        raise EvaluationError(f"Invalid string length: {to_js_string(length)}")
    needed = target - len(s)
    padding = (filler * (needed // len(filler) + 1))[:needed]
    return padding + s if at_start else s + padding


def _string_index_of(s: str, target: Any = UNDEFINED, start: Any = UNDEFINED) -> int:
    return s.find(to_js_string(target), max(to_integer(start), 0))


def _string_repeat(s: str, count: Any = UNDEFINED) -> str:
    n = to_integer(count)
    if n < 0 or n > 10_000:
        raise EvaluationError(f"Invalid count value: {to_js_string(count)}")
    if len(s) * n > MAX_STRING_LENGTH:
        raise EvaluationError("Invalid string length: repeat result too long")
    return s * n


def _string_substring(s: str, start: Any = UNDEFINED, end: Any = UNDEFINED) -> str:
    a = min(max(to_integer(start), 0), len(s))
    b = len(s) if end is UNDEFINED else min(max(to_integer(end), 0), len(s))
    return s[min(a, b):max(a, b)]


STRING_METHODS: dict[str, Callable[..., Any]] = {
    "toUpperCase": lambda s: s.upper(),
    "toLowerCase": lambda s: s.lower(),
    "trim": lambda s: s.strip(),
    "split": _string_split,
    "includes": lambda s, target=UNDEFINED: to_js_string(target) in s,
    "indexOf": _string_index_of,
    "startsWith": lambda s, prefix=UNDEFINED: s.startswith(to_js_string(prefix)),
    "endsWith": lambda s, suffix=UNDEFINED: s.endswith(to_js_string(suffix)),
    "slice": lambda s, start=UNDEFINED, end=UNDEFINED: s[
        _relative_index(start, len(s), 0):_relative_index(end, len(s), len(s))
    ],
    "substring": _string_substring,
    "replace": lambda s, old=UNDEFINED, new=UNDEFINED: s.replace(
        to_js_string(old), to_js_string(new), 1
    ),
    "padStart": lambda s, length=UNDEFINED, fill=UNDEFINED: _string_pad(s, length, fill, True),
    "padEnd": lambda s, length=UNDEFINED, fill=UNDEFINED: _string_pad(s, length, fill, False),
    "repeat": _string_repeat,
    "charAt": lambda s, i=UNDEFINED: s[to_integer(i)] if 0 <= to_integer(i) < len(s) else "",
}


# ============================================================================
# Number methods
# ============================================================================

def _number_to_fixed(x: float | int, digits: Any = UNDEFINED) -> str:
    d = to_integer(digits)
    if not 0 <= d <= 100:
        raise EvaluationError("toFixed() digits argument must be between 0 and 100")
    if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
        return format_number(x)
    return f"{x:.{d}f}"


NUMBER_METHODS: dict[str, Callable[..., Any]] = {
    "toFixed": _number_to_fixed,
    "toString": lambda x: format_number(x),
}


def get_method(receiver: Any, name: str) -> NativeFunction | None:
    """Bind a whitelisted method to its receiver, or None if there is none."""
    if isinstance(receiver, list):
        table = ARRAY_METHODS
    elif isinstance(receiver, str):
        table = STRING_METHODS
    elif is_number(receiver):
        table = NUMBER_METHODS
    else:
        return None

    method = table.get(name)
    if method is None:
        return None
    return NativeFunction(name, functools.partial(method, receiver))


# ============================================================================
# Globals
# ============================================================================

def _math_round(x: Any = UNDEFINED) -> float | int:
    value = to_number(x)
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return value
    return math.floor(value + 0.5)


def _math_extreme(pick: Callable[..., Any], empty: float) -> Callable[..., Any]:
    def extreme(*args: Any) -> float | int:
        numbers = [to_number(a) for a in args]
        if any(isinstance(v, float) and math.isnan(v) for v in numbers):
            return math.nan
        return pick(numbers) if numbers else empty
    return extreme


def _math_unary(fn: Callable[[float], Any]) -> Callable[..., Any]:
    def apply(x: Any = UNDEFINED) -> float | int:
        value = to_number(x)
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return value
        try:
            return normalize_number(fn(value))
        except ValueError:
            return math.nan
    return apply


def _math_pow(base: Any = UNDEFINED, exponent: Any = UNDEFINED) -> float | int:
    try:
        return normalize_number(math.pow(to_number(base), to_number(exponent)))
    except (OverflowError, ValueError):
        return math.nan


def _parse_int(value: Any = UNDEFINED, radix: Any = UNDEFINED) -> float | int:
    text = to_js_string(value).strip()
    base = 10 if radix is UNDEFINED else to_integer(radix)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"[:base] if 2 <= base <= 36 else ""
    match = re.match(r"[+-]?", text)
    sign_len = match.end() if match else 0
    end = sign_len
    while end < len(text) and text[end].lower() in digits:
        end += 1
    if end == sign_len:
        return math.nan
    try:
        return normalize_number(int(text[:end], base))
    except ValueError:
        # Past the interpreter's digit limit, far beyond float range
        return -math.inf if text.startswith("-") else math.inf


def _parse_float(value: Any = UNDEFINED) -> float | int:
    match = re.match(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", to_js_string(value))
    if not match:
        return math.nan
    return normalize_number(float(match.group(0)))


def _json_stringify(value: Any = UNDEFINED) -> Any:
    if value is UNDEFINED or is_callable(value):
        return UNDEFINED
    return safe_json_dumps(to_json_value(value))


def _object_keys(obj: Any = UNDEFINED) -> list[str]:
    if isinstance(obj, dict):
        return list(obj.keys())
    if isinstance(obj, (list, str)):
        return [str(i) for i in range(len(obj))]
    return []


GLOBALS: dict[str, Any] = {
    "undefined": UNDEFINED,
    "NaN": math.nan,
    "Infinity": math.inf,
    "Math": Namespace("Math", {
        "PI": math.pi,
        "E": math.e,
        "abs": NativeFunction("abs", _math_unary(abs)),
        "floor": NativeFunction("floor", _math_unary(math.floor)),
        "ceil": NativeFunction("ceil", _math_unary(math.ceil)),
        "trunc": NativeFunction("trunc", _math_unary(math.trunc)),
        "sqrt": NativeFunction("sqrt", _math_unary(math.sqrt)),
        "sign": NativeFunction("sign", _math_unary(lambda v: (v > 0) - (v < 0))),
        "round": NativeFunction("round", _math_round),
        "min": NativeFunction("min", _math_extreme(min, math.inf)),
        "max": NativeFunction("max", _math_extreme(max, -math.inf)),
        "pow": NativeFunction("pow", _math_pow),
        "random": NativeFunction("random", lambda: random.random()),
    }),
    "String": NativeFunction("String", lambda value="": to_js_string(value)),
    "Number": NativeFunction("Number", lambda value=0: to_number(value)),
    "Boolean": NativeFunction("Boolean", lambda value=UNDEFINED: is_truthy(value)),
    "parseInt": NativeFunction("parseInt", _parse_int),
    "parseFloat": NativeFunction("parseFloat", _parse_float),
    "isNaN": NativeFunction(
        "isNaN", lambda value=UNDEFINED: isinstance(to_number(value), float) and math.isnan(to_number(value))
    ),
    "Array": Namespace("Array", {
        "isArray": NativeFunction("isArray", lambda value=UNDEFINED: isinstance(value, list)),
    }),
    "Object": Namespace("Object", {
        "keys": NativeFunction("keys", _object_keys),
        "values": NativeFunction(
            "values", lambda obj=UNDEFINED: list(obj.values()) if isinstance(obj, dict) else []
        ),
        "entries": NativeFunction(
            "entries", lambda obj=UNDEFINED: [[k, v] for k, v in obj.items()] if isinstance(obj, dict) else []
        ),
    }),
    "JSON": Namespace("JSON", {
        "stringify": NativeFunction("stringify", _json_stringify),
    }),
}
