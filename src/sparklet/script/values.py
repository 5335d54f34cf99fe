"""Value model: JS-compatible semantics over plain Python JSON values.

Scripts operate on ``dict``/``list``/``str``/``int``/``float``/``bool``/``None``
plus the ``UNDEFINED`` sentinel, closures and native functions.
"""

import math
from typing import Any, Callable

from ..core.errors import EvaluationError


class _Undefined:
    """The JS ``undefined`` value (distinct from ``null``/``None``)."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()

MAX_SAFE_INTEGER = 2**53

# Limits on values scripts can build
MAX_STRING_LENGTH = 1_000_000
MAX_ARRAY_LENGTH = 100_000
MAX_VALUE_DEPTH = 64
# Members plus string characters in one converted value
MAX_VALUE_SIZE = 10_000_000


class NativeFunction:
    """A Python callable exposed to scripts."""

    __slots__ = ("name", "fn")

    def __init__(self, name: str, fn: Callable[..., Any]):
        self.name = name
        self.fn = fn

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"<native {self.name}>"


class ScriptObject:
    """Base for host objects whose members are resolved lazily (Math, helpers)."""

    def get_member(self, name: str) -> Any:
        return UNDEFINED


class Namespace(ScriptObject):
    """Read-only bag of members, e.g. ``Math`` or ``Object``."""

    def __init__(self, name: str, members: dict[str, Any]):
        self.name = name
        self.members = members

    def get_member(self, name: str) -> Any:
        return self.members.get(name, UNDEFINED)

    def __repr__(self) -> str:
        return f"<namespace {self.name}>"


def check_string_length(text: str) -> str:
    if len(text) > MAX_STRING_LENGTH:
        raise EvaluationError(f"Invalid string length: exceeds {MAX_STRING_LENGTH} characters")
    return text


def check_array_length(items: list) -> list:
    if len(items) > MAX_ARRAY_LENGTH:
        raise EvaluationError(f"Invalid array length: exceeds {MAX_ARRAY_LENGTH} items")
    return items


def is_nullish(value: Any) -> bool:
    return value is None or value is UNDEFINED


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_callable(value: Any) -> bool:
    return callable(value) and not isinstance(value, type) and not isinstance(value, ScriptObject)


def normalize_number(value: float | int) -> float | int:
    """
    Keep numbers in the range JS represents.

    Integral floats collapse to int so ``6 / 2`` displays as ``3``; ints past
    the safe-integer range become floats (``Infinity`` when out of range).
    """
    if isinstance(value, float):
        if value.is_integer() and abs(value) < MAX_SAFE_INTEGER:
            return int(value)
        return value
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) >= MAX_SAFE_INTEGER:
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    return value


def is_truthy(value: Any) -> bool:
    if is_nullish(value) or value is False:
        return False
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def to_number(value: Any) -> float | int:
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return normalize_number(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if "_" in text:
            return math.nan
        try:
            return normalize_number(int(text))
        except ValueError:
            pass
        try:
            if text in ("Infinity", "+Infinity", "-Infinity"):
                return float(text.replace("Infinity", "inf"))
            if text.lower().lstrip("+-") in ("inf", "infinity", "nan"):
                return math.nan
            return normalize_number(float(text))
        except ValueError:
            return math.nan
    if isinstance(value, list):
        if not value:
            return 0
        if len(value) == 1:
            return to_number(to_js_string(value[0]))
    return math.nan


def to_integer(value: Any, default: int = 0) -> int:
    """ToIntegerOrInfinity, clamped to Python ints (infinities become huge)."""
    if value is UNDEFINED:
        return default
    number = to_number(value)
    if isinstance(number, float):
        if math.isnan(number):
            return 0
        if math.isinf(number):
            return 2**53 if number > 0 else -(2**53)
    return int(number)


def format_number(value: float | int) -> str:
    value = normalize_number(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        exp = int(exponent)
        text = f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return text


def to_js_string(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return value
    if is_number(value):
        return format_number(value)
    if isinstance(value, list):
        return _array_to_string(value)
    if isinstance(value, dict):
        return "[object Object]"
    if is_callable(value):
        return "function"
    return str(value)


_END = object()


def _array_to_string(items: list) -> str:
    # Walks nested arrays with an explicit stack; shared sub-arrays can make
    # the flattened text far longer than the value itself
    parts: list[str] = []
    length = 0
    stack = [(iter(items), True)]
    while stack:
        it, first = stack.pop()
        item = next(it, _END)
        if item is _END:
            continue
        stack.append((it, False))
        if not first:
            parts.append(",")
            length += 1
        if isinstance(item, list):
            stack.append((iter(item), True))
        elif not is_nullish(item):
            text = to_js_string(item)
            parts.append(text)
            length += len(text)
        if length > MAX_STRING_LENGTH:
            raise EvaluationError(f"Invalid string length: exceeds {MAX_STRING_LENGTH} characters")
    return "".join(parts)


def to_primitive(value: Any) -> Any:
    if isinstance(value, (list, dict)) or is_callable(value):
        return to_js_string(value)
    return value


def type_of(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if is_callable(value):
        return "function"
    return "object"


def strict_equals(a: Any, b: Any) -> bool:
    if is_nullish(a) or is_nullish(b):
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if isinstance(a, (str, int, float)) or isinstance(b, (str, int, float)):
        return False
    return a is b


def loose_equals(a: Any, b: Any) -> bool:
    if is_nullish(a) and is_nullish(b):
        return True
    if is_nullish(a) or is_nullish(b):
        return False
    if isinstance(a, bool):
        return loose_equals(int(a), b)
    if isinstance(b, bool):
        return loose_equals(a, int(b))
    if is_number(a) and isinstance(b, str):
        return a == to_number(b)
    if isinstance(a, str) and is_number(b):
        return to_number(a) == b
    if isinstance(a, (list, dict)) and not isinstance(b, (list, dict)):
        return loose_equals(to_primitive(a), b)
    if isinstance(b, (list, dict)) and not isinstance(a, (list, dict)):
        return loose_equals(a, to_primitive(b))
    return strict_equals(a, b)


def same_value_zero(a: Any, b: Any) -> bool:
    """Equality used by ``includes``: like ``===`` but NaN equals NaN."""
    if is_number(a) and is_number(b) and math.isnan(a) and math.isnan(b):
        return True
    return strict_equals(a, b)


def to_json_value(value: Any) -> Any:
    """
    Convert a script value into a plain JSON value.

    ``undefined``, ``NaN`` and the infinities become ``null``.

    Raises:
        EvaluationError: If the value contains a function or host object, or
            nests deeper than ``MAX_VALUE_DEPTH`` or is larger than
            ``MAX_VALUE_SIZE``
    """
    return _to_json(value, 0, [MAX_VALUE_SIZE])


def _to_json(value: Any, depth: int, budget: list[int]) -> Any:
    if depth > MAX_VALUE_DEPTH:
        raise EvaluationError(f"Value nests deeper than {MAX_VALUE_DEPTH} levels")
    budget[0] -= 1 + (len(value) if isinstance(value, str) else 0)
    if budget[0] < 0:
        raise EvaluationError(f"Value is larger than {MAX_VALUE_SIZE} units")
    if value is UNDEFINED or value is None:
        return None
    if isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        return None if (math.isnan(value) or math.isinf(value)) else normalize_number(value)
    if isinstance(value, list):
        return [_to_json(item, depth + 1, budget) for item in value]
    if isinstance(value, dict):
        return {str(k): _to_json(v, depth + 1, budget) for k, v in value.items()}
    raise EvaluationError(f"Value of type {type_of(value)} is not JSON-serializable")
