"""State Store - the single mutable State of one sparklet instance."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from ..core import get_logger
from ..script import to_json_value

logger = get_logger(__name__)


class MutationKind(str, Enum):
    """How State last changed."""
    INITIAL = "initial"        # Seeded from initialState
    ACTION = "action"          # Merged result of a named action
    DIRECT_SET = "direct_set"  # Two-way input binding
    RESTORE = "restore"        # Host overlaid a persisted snapshot
    RESET = "reset"            # Back to initialState


@dataclass(frozen=True)
class Mutation:
    kind: MutationKind
    keys: tuple[str, ...]
    version: int


Listener = Callable[[Mapping[str, Any], Mutation], None]


class StateStore:
    """
    Owns the current State.

    Every commit replaces the State mapping with a new one, so a mapping
    handed to a render pass is never modified afterwards.
    """

    def __init__(self, initial_state: Mapping[str, Any] | None = None):
        self._initial: dict[str, Any] = to_json_value(dict(initial_state or {}))
        self._state: dict[str, Any] = dict(self._initial)
        self.version = 0
        self.last_mutation = Mutation(MutationKind.INITIAL, tuple(self._state), 0)
        self._listeners: list[Listener] = []

    @property
    def state(self) -> Mapping[str, Any]:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every commit; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit_action(self, new_state: Mapping[str, Any]) -> bool:
        """
        Adopt the State computed by the Action Dispatcher.

        Returns:
            False when the dispatcher handed back the current State (no-op)
        """
        if new_state is self._state:
            return False
        changed = tuple(
            k for k in new_state if k not in self._state or self._state[k] != new_state[k]
        )
        self._commit(dict(new_state), MutationKind.ACTION, changed)
        return True

    def direct_set(self, field: str, value: Any) -> None:
        """Set one field directly (input binding); bypasses the action path."""
        self._commit({**self._state, field: to_json_value(value)}, MutationKind.DIRECT_SET, (field,))

    def restore(self, snapshot: Mapping[str, Any]) -> None:
        """Overlay a persisted snapshot on the current State."""
        partial = to_json_value(dict(snapshot))
        self._commit({**self._state, **partial}, MutationKind.RESTORE, tuple(partial))

    def reset(self) -> None:
        self._commit(dict(self._initial), MutationKind.RESET, tuple(self._initial))

    def _commit(self, state: dict[str, Any], kind: MutationKind, keys: tuple[str, ...]) -> None:
        self._state = state
        self.version += 1
        self.last_mutation = Mutation(kind, keys, self.version)
        logger.debug("state_committed", kind=kind.value, keys=list(keys), version=self.version)

        for listener in list(self._listeners):
            try:
                listener(self._state, self.last_mutation)
            except Exception as e:
                logger.error("state_listener_failed", error=str(e), exc_info=True)
