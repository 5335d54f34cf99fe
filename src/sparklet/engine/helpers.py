"""Helper Registry - named, state-reading, side-effect-free functions."""

from typing import Any, Mapping

from ..core import ScriptError, get_logger
from ..script import UNDEFINED, NativeFunction, ScriptObject
from .runtime import ScriptRuntime

logger = get_logger(__name__)


class HelperProxy(ScriptObject):
    """
    The ``helpers`` object seen by scripts.

    Each declared helper is exposed as a one-argument function taking
    ``params``; the State it reads is the one the proxy was created for.
    """

    def __init__(self, registry: "HelperRegistry", state: Mapping[str, Any]):
        self._registry = registry
        self._state = state

    def get_member(self, name: str) -> Any:
        if not self._registry.has(name):
            return UNDEFINED
        return NativeFunction(
            name, lambda params=UNDEFINED: self._registry.invoke(name, self._state, params)
        )

    def __repr__(self) -> str:
        return f"<helpers {', '.join(self._registry.names())}>"


class HelperRegistry:
    """Holds a definition's helper bodies and runs them on demand."""

    def __init__(self, helpers: Mapping[str, str], runtime: ScriptRuntime):
        self._helpers = dict(helpers)
        self.runtime = runtime

    def has(self, name: str) -> bool:
        return name in self._helpers

    def names(self) -> list[str]:
        return sorted(self._helpers)

    def proxy(self, state: Mapping[str, Any]) -> HelperProxy:
        return HelperProxy(self, state)

    def invoke(self, name: str, state: Mapping[str, Any], params: Any = UNDEFINED) -> Any:
        """
        Run a helper against ``state``.

        Unknown names and failing helpers both yield ``undefined``; whatever
        the helper returns is handed to the caller and never stored.
        """
        body = self._helpers.get(name)
        if body is None:
            logger.debug("unknown_helper", helper=name)
            return UNDEFINED

        try:
            program = self.runtime.compile_program(body)
            return self.runtime.interpreter.run(program, {
                "state": state,
                "params": params,
                "helpers": self.proxy(state),
            })
        except ScriptError as e:
            logger.warning("helper_failed", helper=name, error=str(e))
            return UNDEFINED
