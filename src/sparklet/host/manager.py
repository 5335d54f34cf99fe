"""
Sparklet Manager
Opens sparklets from the catalog and keeps their State persisted.
"""

from typing import Any, Callable, Mapping

from ..core import ProgramCache, Settings, get_logger, get_settings
from ..engine import Mutation, SparkletInstance
from .types import Haptics, NullHaptics, SparkletCatalog, SparkletMetadata, StatePersistence

logger = get_logger(__name__)

# Persistence key holding the id of the open sparklet
ACTIVE_SPARKLET_KEY = "infinite"


class SparkletManager:
    """
    Host-side lifecycle for sparklet instances.

    At most one sparklet is open at a time. Its State is snapshotted to
    persistence after every commit (when ``persist_state`` is on) and
    overlaid again the next time the same sparklet is opened.
    """

    def __init__(
        self,
        catalog: SparkletCatalog,
        persistence: StatePersistence,
        settings: Settings | None = None,
        haptics: Haptics | None = None,
        cache: ProgramCache | None = None,
    ):
        self.catalog = catalog
        self.persistence = persistence
        self.settings = settings or get_settings()
        self.haptics = haptics or NullHaptics()
        self.cache = cache
        self.active: SparkletInstance | None = None
        self.active_id: str | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def list_sparklets(self) -> list[SparkletMetadata]:
        return self.catalog.list_sparklets()

    def open(self, sparklet_id: str) -> SparkletInstance:
        """
        Open a sparklet, closing the current one first.

        A sparklet with no definition opens as an Invalid instance.
        """
        self.close()

        instance = SparkletInstance.from_text(
            self.catalog.get_sparklet_definition(sparklet_id),
            settings=self.settings,
            haptics=self.haptics,
            cache=self.cache,
            sparklet_id=sparklet_id,
        )

        snapshot = self.persistence.get_persisted_state(self._state_key(sparklet_id))
        if isinstance(snapshot, dict):
            instance.restore(snapshot)

        if self.settings.persist_state:
            self._unsubscribe = instance.subscribe(self._snapshot_listener(sparklet_id))

        self.active = instance
        self.active_id = sparklet_id
        self.persistence.set_persisted_state(ACTIVE_SPARKLET_KEY, sparklet_id)
        logger.info("sparklet_opened", sparklet_id=sparklet_id, status=instance.status.value)
        return instance

    def close(self) -> None:
        """Close the open sparklet, if any."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.active_id is not None:
            logger.info("sparklet_closed", sparklet_id=self.active_id)
            self.persistence.set_persisted_state(ACTIVE_SPARKLET_KEY, None)
        self.active = None
        self.active_id = None

    def resume(self) -> SparkletInstance | None:
        """Reopen the sparklet that was open when the host last stopped."""
        sparklet_id = self.persistence.get_persisted_state(ACTIVE_SPARKLET_KEY)
        if not isinstance(sparklet_id, str) or not sparklet_id:
            return None
        return self.open(sparklet_id)

    def _snapshot_listener(self, sparklet_id: str) -> Callable[[Mapping[str, Any], Mutation], None]:
        key = self._state_key(sparklet_id)

        def persist(state: Mapping[str, Any], mutation: Mutation) -> None:
            self.persistence.set_persisted_state(key, dict(state))

        return persist

    @staticmethod
    def _state_key(sparklet_id: str) -> str:
        return f"sparklet:{sparklet_id}"
