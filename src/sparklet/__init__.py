"""
Sparklet Engine
Runs small declarative mini-apps described by JSON definitions.
"""

from .core import Settings, get_settings, configure_logging, create_container
from .core.errors import SparkletError, ScriptError, ActionError, DefinitionParseError
from .engine import (
    Definition,
    DefinitionLoader,
    load_definition,
    ExpressionEvaluator,
    HelperRegistry,
    ActionDispatcher,
    StateStore,
    Renderer,
    UINode,
    SparkletInstance,
    SparkletStatus,
    create_sparklet,
)
from .host import (
    InMemorySparkletCatalog,
    InMemoryStatePersistence,
    SparkletManager,
    SparkletMetadata,
    SparkletRecord,
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "create_container",
    "SparkletError",
    "ScriptError",
    "ActionError",
    "DefinitionParseError",
    "Definition",
    "DefinitionLoader",
    "load_definition",
    "ExpressionEvaluator",
    "HelperRegistry",
    "ActionDispatcher",
    "StateStore",
    "Renderer",
    "UINode",
    "SparkletInstance",
    "SparkletStatus",
    "create_sparklet",
    "InMemorySparkletCatalog",
    "InMemoryStatePersistence",
    "SparkletManager",
    "SparkletMetadata",
    "SparkletRecord",
]
