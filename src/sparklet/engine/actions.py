"""Action Dispatcher - named state transitions merged into State."""

from typing import Any, Mapping

from ..core import ActionError, ScriptError, get_logger
from ..script import to_json_value
from .helpers import HelperRegistry
from .runtime import ScriptRuntime

logger = get_logger(__name__)


class ActionDispatcher:
    """
    Runs action bodies with ``(state, params, helpers)`` bound.

    A body that returns an object has it shallow-merged over State; any other
    return value, an unknown action name or a failing body leaves State as it
    was. The input State is never modified.
    """

    def __init__(self, actions: Mapping[str, str], runtime: ScriptRuntime, helpers: HelperRegistry):
        self._actions = dict(actions)
        self.runtime = runtime
        self.helpers = helpers

    def has(self, name: str) -> bool:
        return name in self._actions

    def dispatch(
        self,
        name: str | None,
        state: Mapping[str, Any],
        params: Any = None,
        helpers: HelperRegistry | None = None,
    ) -> Mapping[str, Any]:
        """
        Execute an action and return the resulting State.

        Args:
            name: Action name from the definition
            state: State at the moment of the event
            params: Already-resolved parameters (defaults to ``{}``)
            helpers: Registry exposed as ``helpers`` (defaults to this dispatcher's)

        Returns:
            ``{**state, **returned}`` or ``state`` itself when nothing changes
        """
        if not name or name not in self._actions:
            logger.debug("unknown_action", action=name)
            return state

        try:
            partial = self._execute(name, state, {} if params is None else params, helpers or self.helpers)
        except ActionError as e:
            logger.error("action_failed", action=name, error=str(e))
            return state

        if partial is None:
            return state
        return {**state, **partial}

    def _execute(
        self, name: str, state: Mapping[str, Any], params: Any, helpers: HelperRegistry
    ) -> dict[str, Any] | None:
        try:
            program = self.runtime.compile_program(self._actions[name])
            result = self.runtime.interpreter.run(program, {
                "state": state,
                "params": params,
                "helpers": helpers.proxy(state),
            })
        except ScriptError as e:
            raise ActionError(f"{name}: {e}") from e

        if not isinstance(result, dict):
            return None
        try:
            return to_json_value(result)
        except ScriptError as e:
            raise ActionError(f"{name} returned an unusable result: {e}") from e
