"""
Sparklet Engine
Definition loading, expression evaluation, helpers, actions, State and rendering.
"""

from .definition import (
    Definition,
    ViewSpec,
    Element,
    TextElement,
    ButtonElement,
    GridElement,
    InputElement,
    UnknownElement,
)
from .loader import DefinitionLoader, load_definition
from .runtime import ScriptRuntime
from .evaluator import ExpressionEvaluator
from .helpers import HelperRegistry, HelperProxy
from .actions import ActionDispatcher
from .store import StateStore, Mutation, MutationKind
from .renderer import Renderer, UINode, EventSink, Haptics, binding_field, INVALID_PLACEHOLDER
from .instance import SparkletInstance, SparkletStatus, create_sparklet

__all__ = [
    "Definition",
    "ViewSpec",
    "Element",
    "TextElement",
    "ButtonElement",
    "GridElement",
    "InputElement",
    "UnknownElement",
    "DefinitionLoader",
    "load_definition",
    "ScriptRuntime",
    "ExpressionEvaluator",
    "HelperRegistry",
    "HelperProxy",
    "ActionDispatcher",
    "StateStore",
    "Mutation",
    "MutationKind",
    "Renderer",
    "UINode",
    "EventSink",
    "Haptics",
    "binding_field",
    "INVALID_PLACEHOLDER",
    "SparkletInstance",
    "SparkletStatus",
    "create_sparklet",
]
