"""
Sparklet Instance - one running sparklet.
Ties loader, evaluator, helpers, dispatcher, store and renderer together.
"""

from enum import Enum
from typing import Any, Callable, Mapping

from ..core import LogContext, ProgramCache, ScriptError, Settings, get_logger, get_settings
from .actions import ActionDispatcher
from .definition import Definition
from .evaluator import ExpressionEvaluator
from .helpers import HelperRegistry
from .loader import DefinitionLoader
from .renderer import Haptics, Renderer, UINode
from .runtime import ScriptRuntime
from .store import Listener, StateStore

logger = get_logger(__name__)


class SparkletStatus(str, Enum):
    """Instance lifecycle: there is no state beyond these two."""
    LOADED = "loaded"    # Definition parsed, State seeded, renderer active
    INVALID = "invalid"  # Definition failed to load; placeholder view


class SparkletInstance:
    """
    A sparklet driven entirely by its definition.

    The host calls ``render()`` after every State change (see ``subscribe``)
    and feeds user events back through the nodes' callbacks or through
    ``press``/``type_text``.
    """

    def __init__(
        self,
        definition: Definition,
        settings: Settings | None = None,
        haptics: Haptics | None = None,
        cache: ProgramCache | None = None,
        sparklet_id: str | None = None,
    ):
        self.settings = settings or get_settings()
        self.definition = definition
        self.sparklet_id = sparklet_id or definition.fingerprint

        self.runtime = ScriptRuntime(self.settings, cache)
        self.helpers = HelperRegistry(definition.helpers, self.runtime)
        self.dispatcher = ActionDispatcher(definition.actions, self.runtime, self.helpers)
        self.evaluator = ExpressionEvaluator(self.runtime, self.helpers)
        self.store = StateStore(definition.initial_state)
        self.renderer = Renderer(self.evaluator, self, haptics)

        logger.info("sparklet_instance_created", sparklet_id=self.sparklet_id, status=self.status.value)

    @classmethod
    def from_text(
        cls,
        definition_text: str | None,
        settings: Settings | None = None,
        haptics: Haptics | None = None,
        cache: ProgramCache | None = None,
        sparklet_id: str | None = None,
    ) -> "SparkletInstance":
        """Load definition text and build an instance (Invalid if it fails to load)."""
        settings = settings or get_settings()
        with LogContext(sparklet_id=sparklet_id):
            definition = DefinitionLoader(settings).load(definition_text)
        return cls(definition, settings=settings, haptics=haptics, cache=cache, sparklet_id=sparklet_id)

    @property
    def status(self) -> SparkletStatus:
        return SparkletStatus.LOADED if self.definition.valid else SparkletStatus.INVALID

    @property
    def state(self) -> Mapping[str, Any]:
        return self.store.state

    # ------------------------------------------------------------------
    # EventSink
    # ------------------------------------------------------------------

    def current_state(self) -> Mapping[str, Any]:
        return self.store.state

    def dispatch(self, action: str | None, params: Any = None) -> Mapping[str, Any]:
        """Run an action against the current State and commit the result."""
        with LogContext(sparklet_id=self.sparklet_id):
            new_state = self.dispatcher.dispatch(action, self.store.state, params)
            self.store.commit_action(new_state)
        return self.store.state

    def set_field(self, field: str, value: Any) -> None:
        self.store.direct_set(field, value)

    # ------------------------------------------------------------------
    # Host API
    # ------------------------------------------------------------------

    def render(self) -> UINode:
        with LogContext(sparklet_id=self.sparklet_id):
            return self.renderer.render(self.definition, self.store.state)

    def evaluate(self, expr: Any) -> Any:
        return self.evaluator.evaluate(expr, self.store.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def restore(self, snapshot: Mapping[str, Any] | None) -> None:
        """Overlay persisted State (ignored for Invalid instances)."""
        if snapshot and self.status == SparkletStatus.LOADED:
            try:
                self.store.restore(snapshot)
            except ScriptError as e:
                logger.warning("snapshot_rejected", sparklet_id=self.sparklet_id, error=str(e))

    def reset(self) -> None:
        self.store.reset()

    def press(self, node: UINode) -> None:
        """Activate a button or grid cell."""
        if node.on_press is not None:
            node.on_press()

    def type_text(self, node: UINode, text: str) -> None:
        """Deliver a keystroke's full text to an input."""
        if node.on_change_text is not None:
            node.on_change_text(text)


def create_sparklet(definition_text: str | None, **kwargs: Any) -> SparkletInstance:
    """Convenience wrapper around ``SparkletInstance.from_text``."""
    return SparkletInstance.from_text(definition_text, **kwargs)
