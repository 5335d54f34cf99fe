"""Host services: catalog, persistence, haptics and the sparklet manager."""

from .types import (
    SparkletMetadata,
    SparkletRecord,
    SparkletCatalog,
    StatePersistence,
    Haptics,
    NullHaptics,
)
from .catalog import InMemorySparkletCatalog, CANONICAL_IDS
from .persistence import InMemoryStatePersistence
from .manager import SparkletManager, ACTIVE_SPARKLET_KEY

__all__ = [
    "SparkletMetadata",
    "SparkletRecord",
    "SparkletCatalog",
    "StatePersistence",
    "Haptics",
    "NullHaptics",
    "InMemorySparkletCatalog",
    "CANONICAL_IDS",
    "InMemoryStatePersistence",
    "SparkletManager",
    "ACTIVE_SPARKLET_KEY",
]
