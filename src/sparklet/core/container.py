"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from .cache import ProgramCache
from .config import Settings, get_settings
from ..host.catalog import InMemorySparkletCatalog
from ..host.manager import SparkletManager
from ..host.persistence import InMemoryStatePersistence
from ..host.types import NullHaptics


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_program_cache(self, settings: Settings) -> ProgramCache:
        """Compiled-program cache shared by every instance."""
        return ProgramCache(max_size=settings.cache_size)

    @singleton
    @provider
    def provide_catalog(self) -> InMemorySparkletCatalog:
        """Provide catalog seeded with the built-in sparklets."""
        catalog = InMemorySparkletCatalog()
        catalog.seed_initial_sparklets()
        return catalog

    @singleton
    @provider
    def provide_persistence(self) -> InMemoryStatePersistence:
        return InMemoryStatePersistence()

    @singleton
    @provider
    def provide_haptics(self) -> NullHaptics:
        return NullHaptics()

    @singleton
    @provider
    def provide_manager(
        self,
        catalog: InMemorySparkletCatalog,
        persistence: InMemoryStatePersistence,
        settings: Settings,
        haptics: NullHaptics,
        cache: ProgramCache,
    ) -> SparkletManager:
        """Provide manager with all dependencies."""
        return SparkletManager(
            catalog=catalog,
            persistence=persistence,
            settings=settings,
            haptics=haptics,
            cache=cache if settings.enable_cache else None,
        )


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings)])
