"""In-memory State persistence (snapshots stored as JSON text)."""

from typing import Any

from ..core import JSONParseError, get_logger, json_loads, safe_json_dumps

logger = get_logger(__name__)


class InMemoryStatePersistence:
    """
    Key/value store of JSON snapshots.

    Values are serialized on write so a stored snapshot never aliases live
    State, and a later mutation of State cannot leak into it.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get_persisted_state(self, key: str) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return json_loads(raw)
        except JSONParseError as e:
            logger.warning("persisted_state_unreadable", key=key, error=str(e))
            return None

    def set_persisted_state(self, key: str, value: Any) -> None:
        self._store[key] = safe_json_dumps(value)
        logger.debug("state_persisted", key=key)

    def keys(self) -> list[str]:
        return sorted(self._store)
