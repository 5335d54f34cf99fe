"""Expression Evaluator - ``{{...}}`` bindings and interpolation."""

import re
from typing import Any, Mapping

from ..core import ScriptError, get_logger
from ..script import UNDEFINED, Namespace, to_js_string
from .helpers import HelperRegistry
from .runtime import ScriptRuntime

logger = get_logger(__name__)

FULL_EXPRESSION = re.compile(r"^\{\{([^}]+)\}\}\Z")
FRAGMENT = re.compile(r"\{\{([^}]+)\}\}")

_NO_HELPERS = Namespace("helpers", {})


class ExpressionEvaluator:
    """
    Evaluates binding strings against State.

    Two modes:
    - A string that is exactly one ``{{expr}}`` returns the native value.
    - Otherwise every ``{{expr}}`` fragment is stringified and spliced back
      into the literal text (``undefined`` becomes an empty string).

    Strings without ``{{`` and non-string values are returned unchanged.
    """

    def __init__(self, runtime: ScriptRuntime, helpers: HelperRegistry | None = None):
        self.runtime = runtime
        self.helpers = helpers

    def evaluate(self, expr: Any, state: Mapping[str, Any]) -> Any:
        if not isinstance(expr, str) or "{{" not in expr:
            return expr

        full = FULL_EXPRESSION.match(expr)
        if full:
            return self._evaluate_fragment(full.group(1), state)

        def substitute(match: re.Match) -> str:
            return self._evaluate_fragment(match.group(1), state, as_text=True)

        return FRAGMENT.sub(substitute, expr)

    def _evaluate_fragment(self, source: str, state: Mapping[str, Any], as_text: bool = False) -> Any:
        try:
            node = self.runtime.compile_expression(source.strip())
            value = self.runtime.interpreter.evaluate(node, {
                "state": state,
                "helpers": self.helpers.proxy(state) if self.helpers else _NO_HELPERS,
            })
            if as_text:
                return "" if value is UNDEFINED else to_js_string(value)
            return value
        except ScriptError as e:
            logger.warning("expression_failed", expression=source.strip(), error=str(e))
            return "" if as_text else UNDEFINED
