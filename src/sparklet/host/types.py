"""Host-side data models and service protocols."""

from typing import Any, Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..engine.renderer import Haptics


class SparkletMetadata(BaseModel):
    """Catalog entry describing a sparklet."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    icon: str | None = None
    is_beta: bool = Field(default=False, alias="isBeta")


class SparkletRecord(BaseModel):
    """Metadata plus the definition text (None when the host has none)."""

    model_config = ConfigDict(frozen=True)

    metadata: SparkletMetadata
    definition: str | None = None


class SparkletCatalog(Protocol):
    def list_sparklets(self) -> list[SparkletMetadata]:
        ...

    def get_sparklet_definition(self, sparklet_id: str) -> str | None:
        ...


class StatePersistence(Protocol):
    def get_persisted_state(self, key: str) -> Any:
        ...

    def set_persisted_state(self, key: str, value: Any) -> None:
        ...


class NullHaptics:
    """Haptics for hosts without a vibration motor."""

    def __init__(self) -> None:
        self.presses = 0

    def light(self) -> None:
        self.presses += 1


__all__ = [
    "SparkletMetadata",
    "SparkletRecord",
    "SparkletCatalog",
    "StatePersistence",
    "Haptics",
    "NullHaptics",
]
