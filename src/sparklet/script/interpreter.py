"""Tree-walking interpreter with an operation budget.

Every evaluated node and executed statement costs one step. A top-level
invocation (one expression, helper or action) gets ``max_steps`` steps; nested
helper calls made from inside it share the same budget.
"""

import math
from contextlib import contextmanager
from typing import Any, Iterator

from ..core.errors import EvaluationError, ScriptError, StepLimitExceeded
from . import nodes as n
from .builtins import GLOBALS, get_method
from .values import (
    UNDEFINED,
    ScriptObject,
    check_array_length,
    check_string_length,
    is_callable,
    is_nullish,
    is_number,
    is_truthy,
    loose_equals,
    normalize_number,
    strict_equals,
    to_js_string,
    to_number,
    to_primitive,
    type_of,
)


class _Return(Exception):
    def __init__(self, value: Any):
        self.value = value


class Scope:
    """Lexical scope: a chain of name → value maps."""

    __slots__ = ("vars", "consts", "parent")

    def __init__(self, parent: "Scope | None" = None, bindings: dict[str, Any] | None = None,
                 const: bool = False):
        self.vars: dict[str, Any] = dict(bindings or {})
        self.consts: set[str] = set(self.vars) if const else set()
        self.parent = parent

    def _owner(self, name: str) -> "Scope | None":
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                return scope
            scope = scope.parent
        return None

    def has(self, name: str) -> bool:
        return self._owner(name) is not None

    def lookup(self, name: str) -> Any:
        owner = self._owner(name)
        if owner is None:
            raise EvaluationError(f"{name} is not defined")
        return owner.vars[name]

    def declare(self, name: str, value: Any, const: bool = False) -> None:
        if name in self.vars:
            raise EvaluationError(f"Identifier '{name}' has already been declared")
        self.vars[name] = value
        if const:
            self.consts.add(name)

    def assign(self, name: str, value: Any) -> None:
        owner = self._owner(name)
        if owner is None:
            raise EvaluationError(f"{name} is not defined")
        if name in owner.consts:
            raise EvaluationError(f"Assignment to constant variable '{name}'")
        owner.vars[name] = value


class Closure:
    """An arrow function value."""

    __slots__ = ("params", "body", "scope", "interpreter")

    def __init__(self, params: tuple[str, ...], body: Any, scope: Scope, interpreter: "Interpreter"):
        self.params = params
        self.body = body
        self.scope = scope
        self.interpreter = interpreter

    def __call__(self, *args: Any) -> Any:
        return self.interpreter.call_closure(self, args)

    def __repr__(self) -> str:
        return f"<closure ({', '.join(self.params)})>"


GLOBAL_SCOPE = Scope(bindings=GLOBALS, const=True)


class Interpreter:
    """Evaluates parsed expressions and statement blocks."""

    def __init__(self, max_steps: int = 10_000, max_call_depth: int = 32):
        self.max_steps = max_steps
        self.max_call_depth = max_call_depth
        self.steps = 0
        self._depth = 0
        self._active = 0
        self._evaluators = {
            n.Literal: self._eval_literal,
            n.TemplateLiteral: self._eval_template,
            n.Identifier: self._eval_identifier,
            n.ArrayLiteral: self._eval_array,
            n.ObjectLiteral: self._eval_object,
            n.Member: self._eval_member,
            n.Index: self._eval_index,
            n.Call: self._eval_call,
            n.Unary: self._eval_unary,
            n.Binary: self._eval_binary,
            n.Logical: self._eval_logical,
            n.Conditional: self._eval_conditional,
            n.Arrow: self._eval_arrow,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    @contextmanager
    def _invocation(self) -> Iterator[None]:
        nested = self._active > 0
        if nested:
            # Helper called from inside another script counts as a call
            if self._depth >= self.max_call_depth:
                raise StepLimitExceeded(f"Maximum call depth {self.max_call_depth} exceeded")
            self._depth += 1
        else:
            self.steps = 0
            self._depth = 0
        self._active += 1
        try:
            yield
        except RecursionError:
            raise StepLimitExceeded("Maximum call depth exceeded") from None
        finally:
            self._active -= 1
            if nested:
                self._depth -= 1

    def evaluate(self, node: n.Node, bindings: dict[str, Any]) -> Any:
        """Evaluate an expression with the given names bound."""
        with self._invocation():
            return self.eval(node, Scope(GLOBAL_SCOPE, bindings, const=True))

    def run(self, program: n.Block, bindings: dict[str, Any]) -> Any:
        """Run a statement block; returns the ``return`` value or undefined."""
        with self._invocation():
            scope = Scope(GLOBAL_SCOPE, bindings, const=True)
            try:
                self._exec_block(program, scope)
            except _Return as r:
                return r.value
            return UNDEFINED

    def call_closure(self, closure: Closure, args: tuple[Any, ...]) -> Any:
        if self._depth >= self.max_call_depth:
            raise StepLimitExceeded(f"Maximum call depth {self.max_call_depth} exceeded")
        self._depth += 1
        try:
            scope = Scope(closure.scope)
            for i, name in enumerate(closure.params):
                scope.vars[name] = args[i] if i < len(args) else UNDEFINED
            if isinstance(closure.body, n.Block):
                try:
                    self._exec_block(closure.body, scope)
                except _Return as r:
                    return r.value
                return UNDEFINED
            return self.eval(closure.body, scope)
        finally:
            self._depth -= 1

    def _tick(self) -> None:
        self.steps += 1
        if self.steps > self.max_steps:
            raise StepLimitExceeded(f"Operation budget of {self.max_steps} steps exhausted")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _exec_block(self, block: n.Block, scope: Scope) -> None:
        for stmt in block.body:
            self._exec(stmt, scope)

    def _exec(self, stmt: Any, scope: Scope) -> None:
        self._tick()
        if isinstance(stmt, n.ExprStmt):
            self.eval(stmt.expr, scope)
        elif isinstance(stmt, n.Return):
            raise _Return(UNDEFINED if stmt.value is None else self.eval(stmt.value, scope))
        elif isinstance(stmt, n.VarDecl):
            value = UNDEFINED if stmt.init is None else self.eval(stmt.init, scope)
            scope.declare(stmt.name, value, const=stmt.kind == "const")
        elif isinstance(stmt, n.Assign):
            scope.assign(stmt.name, self.eval(stmt.value, scope))
        elif isinstance(stmt, n.If):
            if is_truthy(self.eval(stmt.test, scope)):
                self._exec(stmt.consequent, Scope(scope))
            elif stmt.alternate is not None:
                self._exec(stmt.alternate, Scope(scope))
        elif isinstance(stmt, n.Block):
            self._exec_block(stmt, Scope(scope))
        else:
            raise EvaluationError(f"Unsupported statement {type(stmt).__name__}")

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def eval(self, node: Any, scope: Scope) -> Any:
        self._tick()
        evaluator = self._evaluators.get(type(node))
        if evaluator is None:
            raise EvaluationError(f"Unsupported expression {type(node).__name__}")
        return evaluator(node, scope)

    def _eval_literal(self, node: n.Literal, scope: Scope) -> Any:
        return node.value

    def _eval_template(self, node: n.TemplateLiteral, scope: Scope) -> str:
        return check_string_length("".join(
            part if isinstance(part, str) else to_js_string(self.eval(part, scope))
            for part in node.parts
        ))

    def _eval_identifier(self, node: n.Identifier, scope: Scope) -> Any:
        return scope.lookup(node.name)

    def _spread_items(self, value: Any) -> list[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return list(value)
        raise EvaluationError(f"{to_js_string(value)} is not iterable")

    def _eval_array(self, node: n.ArrayLiteral, scope: Scope) -> list[Any]:
        items: list[Any] = []
        for item in node.items:
            if isinstance(item, n.Spread):
                items.extend(self._spread_items(self.eval(item.argument, scope)))
            else:
                items.append(self.eval(item, scope))
        return check_array_length(items)

    def _eval_object(self, node: n.ObjectLiteral, scope: Scope) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for prop in node.properties:
            if isinstance(prop, n.Spread):
                value = self.eval(prop.argument, scope)
                if isinstance(value, dict):
                    result.update(value)
                elif isinstance(value, (list, str)):
                    result.update({str(i): v for i, v in enumerate(value)})
            else:
                key = prop.key if isinstance(prop.key, str) else to_js_string(self.eval(prop.key, scope))
                result[key] = self.eval(prop.value, scope)
        return result

    def _eval_member(self, node: n.Member, scope: Scope) -> Any:
        obj = self.eval(node.obj, scope)
        if node.optional and is_nullish(obj):
            return UNDEFINED
        return get_member(obj, node.name)

    def _eval_index(self, node: n.Index, scope: Scope) -> Any:
        obj = self.eval(node.obj, scope)
        if node.optional and is_nullish(obj):
            return UNDEFINED
        return get_index(obj, self.eval(node.index, scope))

    def _eval_call(self, node: n.Call, scope: Scope) -> Any:
        fn = self.eval(node.callee, scope)
        if node.optional and is_nullish(fn):
            return UNDEFINED
        if not is_callable(fn):
            raise EvaluationError(f"{_describe(node.callee)} is not a function")

        args: list[Any] = []
        for arg in node.args:
            if isinstance(arg, n.Spread):
                args.extend(self._spread_items(self.eval(arg.argument, scope)))
            else:
                args.append(self.eval(arg, scope))

        try:
            return fn(*args)
        except ScriptError:
            raise
        except (TypeError, ValueError, ArithmeticError, IndexError, KeyError) as e:
            raise EvaluationError(f"{_describe(node.callee)} failed: {e}") from e

    def _eval_unary(self, node: n.Unary, scope: Scope) -> Any:
        if node.op == "typeof":
            if isinstance(node.operand, n.Identifier) and not scope.has(node.operand.name):
                return "undefined"
            return type_of(self.eval(node.operand, scope))

        value = self.eval(node.operand, scope)
        if node.op == "!":
            return not is_truthy(value)
        number = to_number(value)
        return normalize_number(-number) if node.op == "-" else number

    def _eval_binary(self, node: n.Binary, scope: Scope) -> Any:
        left = self.eval(node.left, scope)
        right = self.eval(node.right, scope)
        try:
            return binary_op(node.op, left, right)
        except (ArithmeticError, ValueError) as e:
            raise EvaluationError(f"Operator {node.op} failed: {e}") from e

    def _eval_logical(self, node: n.Logical, scope: Scope) -> Any:
        left = self.eval(node.left, scope)
        if node.op == "&&":
            return self.eval(node.right, scope) if is_truthy(left) else left
        if node.op == "||":
            return left if is_truthy(left) else self.eval(node.right, scope)
        return self.eval(node.right, scope) if is_nullish(left) else left

    def _eval_conditional(self, node: n.Conditional, scope: Scope) -> Any:
        if is_truthy(self.eval(node.test, scope)):
            return self.eval(node.consequent, scope)
        return self.eval(node.alternate, scope)

    def _eval_arrow(self, node: n.Arrow, scope: Scope) -> Closure:
        return Closure(node.params, node.body, scope, self)


# ============================================================================
# Operators and property access
# ============================================================================

def _describe(node: Any) -> str:
    if isinstance(node, n.Identifier):
        return node.name
    if isinstance(node, n.Member):
        return f"{_describe(node.obj)}.{node.name}"
    if isinstance(node, n.Index):
        return f"{_describe(node.obj)}[...]"
    return "expression"


def _divide(a: float | int, b: float | int) -> float | int:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1, b)
    return a / b


def _remainder(a: float | int, b: float | int) -> float | int:
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    if math.isinf(b):
        return a
    return math.fmod(a, b)


def _power(a: float | int, b: float | int) -> float | int:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _compare(op: str, a: Any, b: Any) -> bool:
    a, b = to_primitive(a), to_primitive(b)
    if not (isinstance(a, str) and isinstance(b, str)):
        a, b = to_number(a), to_number(b)
        if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
            return False
    if op == "<":
        return a < b
    if op == ">":
        return a > b
    if op == "<=":
        return a <= b
    return a >= b


def binary_op(op: str, a: Any, b: Any) -> Any:
    if op == "===":
        return strict_equals(a, b)
    if op == "!==":
        return not strict_equals(a, b)
    if op == "==":
        return loose_equals(a, b)
    if op == "!=":
        return not loose_equals(a, b)
    if op in ("<", ">", "<=", ">="):
        return _compare(op, a, b)

    if op == "+":
        a, b = to_primitive(a), to_primitive(b)
        if isinstance(a, str) or isinstance(b, str):
            return check_string_length(to_js_string(a) + to_js_string(b))

    x, y = to_number(a), to_number(b)
    if op == "+":
        result = x + y
    elif op == "-":
        result = x - y
    elif op == "*":
        result = x * y
    elif op == "/":
        result = _divide(x, y)
    elif op == "%":
        result = _remainder(x, y)
    elif op == "**":
        result = _power(x, y)
    else:
        raise EvaluationError(f"Unsupported operator {op}")
    return normalize_number(result)


def get_member(obj: Any, name: str) -> Any:
    """Property read with JS semantics (``undefined`` for missing keys)."""
    if is_nullish(obj):
        raise EvaluationError(f"Cannot read properties of {to_js_string(obj)} (reading '{name}')")
    if isinstance(obj, ScriptObject):
        return obj.get_member(name)
    if isinstance(obj, dict):
        return obj.get(name, UNDEFINED)
    if isinstance(obj, (list, str)):
        if name == "length":
            return len(obj)
        if name.isascii() and name.isdigit():
            idx = int(name)
            return obj[idx] if idx < len(obj) else UNDEFINED
    method = get_method(obj, name)
    return UNDEFINED if method is None else method


def get_index(obj: Any, key: Any) -> Any:
    """Computed property read: ``obj[key]``."""
    if is_nullish(obj):
        raise EvaluationError(f"Cannot read properties of {to_js_string(obj)} (reading '{to_js_string(key)}')")
    if isinstance(obj, (list, str)) and is_number(key):
        if isinstance(key, float) and not key.is_integer():
            return UNDEFINED
        idx = int(key)
        return obj[idx] if 0 <= idx < len(obj) else UNDEFINED
    return get_member(obj, to_js_string(key))
