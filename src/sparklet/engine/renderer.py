"""
Renderer
Walks a definition's element tree and produces UI nodes for the host.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Protocol

from ..core import ScriptError, get_logger
from ..script import UNDEFINED, is_truthy, to_js_string
from .definition import (
    ButtonElement,
    Definition,
    Element,
    GridElement,
    InputElement,
    TextElement,
)
from .evaluator import ExpressionEvaluator

logger = get_logger(__name__)

INVALID_PLACEHOLDER = "Empty or invalid definition."

# display: none must not occupy layout
COLLAPSED_STYLE = {"height": 0, "opacity": 0, "overflow": "hidden"}


@dataclass
class UINode:
    """One node of the rendered tree."""

    kind: str  # container, placeholder, text, button, grid, cell, input
    text: str | None = None
    style: dict[str, Any] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)
    children: list["UINode"] = field(default_factory=list)
    on_press: Callable[[], None] | None = None
    on_change_text: Callable[[str], None] | None = None

    def walk(self) -> Iterator["UINode"]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, kind: str) -> list["UINode"]:
        return [node for node in self.walk() if node.kind == kind]

    def find(self, kind: str) -> "UINode | None":
        return next((node for node in self.walk() if node.kind == kind), None)


class EventSink(Protocol):
    """What rendered nodes call back into when the user interacts."""

    def current_state(self) -> Mapping[str, Any]:
        ...

    def dispatch(self, action: str | None, params: Any = None) -> Any:
        ...

    def set_field(self, field: str, value: Any) -> None:
        ...


class Haptics(Protocol):
    def light(self) -> None:
        ...


def binding_field(path: str) -> str:
    """``state.cells`` → ``cells``; only the single-level convention is supported."""
    return re.sub(r"^state\.", "", path)


def _text(value: Any) -> str:
    try:
        return to_js_string(value)
    except ScriptError as e:
        logger.warning("value_not_displayable", error=str(e))
        return ""


class Renderer:
    """
    Produces a UINode tree from ``(definition, state)``.

    Rendering has no side effects of its own; the returned nodes carry
    callbacks that forward user events to the ``EventSink``.
    """

    def __init__(self, evaluator: ExpressionEvaluator, sink: EventSink, haptics: Haptics | None = None):
        self.evaluator = evaluator
        self.sink = sink
        self.haptics = haptics
        self._renderers: dict[type, Callable[[Any, dict[str, Any], Mapping[str, Any]], UINode]] = {
            TextElement: self._render_text,
            ButtonElement: self._render_button,
            GridElement: self._render_grid,
            InputElement: self._render_input,
        }

    def render(self, definition: Definition, state: Mapping[str, Any]) -> UINode:
        if not definition.valid:
            return UINode("container", children=[UINode("placeholder", text=INVALID_PLACEHOLDER)])

        children = []
        for element in definition.view.elements:
            node = self.render_element(definition, element, state)
            if node is not None:
                children.append(node)
        return UINode("container", children=children)

    def render_element(
        self, definition: Definition, element: Element, state: Mapping[str, Any]
    ) -> UINode | None:
        if not self.is_visible(element, state):
            return None

        render = self._renderers.get(type(element))
        if render is None:
            logger.debug("unknown_element_type", type=element.type)
            return None
        return render(element, self.resolve_style(definition, element.style, state), state)

    def is_visible(self, element: Element, state: Mapping[str, Any]) -> bool:
        if element.visible is None:
            return True
        value = self.evaluator.evaluate(element.visible, state)
        return not (value is False or value == "false")

    def resolve_style(
        self, definition: Definition, name: str | None, state: Mapping[str, Any]
    ) -> dict[str, Any]:
        style: dict[str, Any] = {}
        for key, raw in definition.style(name).items():
            value = self.evaluator.evaluate(raw, state) if isinstance(raw, str) else raw
            if value is not UNDEFINED:
                style[key] = value

        if style.get("display") == "none":
            style.update(COLLAPSED_STYLE)
        return style

    def _display(self, value: Any, state: Mapping[str, Any]) -> str:
        resolved = self.evaluator.evaluate(value, state)
        if resolved is UNDEFINED or resolved is None:
            return ""
        return _text(resolved)

    def _render_text(self, el: TextElement, style: dict[str, Any], state: Mapping[str, Any]) -> UINode:
        return UINode("text", text=self._display(el.value, state), style=style)

    def _render_button(self, el: ButtonElement, style: dict[str, Any], state: Mapping[str, Any]) -> UINode:
        def on_press() -> None:
            if self.haptics is not None:
                self.haptics.light()
            # Params see the State at the moment of the press
            current = self.sink.current_state()
            params = {key: self.evaluator.evaluate(raw, current) for key, raw in el.params.items()}
            self.sink.dispatch(el.on_press, params)

        return UINode(
            "button",
            text=self._display(el.label, state),
            style=style,
            props={"action": el.on_press},
            on_press=on_press,
        )

    def _render_grid(self, el: GridElement, style: dict[str, Any], state: Mapping[str, Any]) -> UINode:
        items = state.get(binding_field(el.data_source))
        if not isinstance(items, list):
            items = []

        def press_cell(index: int) -> Callable[[], None]:
            return lambda: self.sink.dispatch(el.on_press, {"index": index})

        cells = [
            UINode("cell", text=_text(item), props={"index": i, "item": item}, on_press=press_cell(i))
            for i, item in enumerate(items)
        ]
        return UINode("grid", style=style, props={"action": el.on_press}, children=cells)

    def _render_input(self, el: InputElement, style: dict[str, Any], state: Mapping[str, Any]) -> UINode:
        field_name = binding_field(el.binding)
        value = state.get(field_name)

        def on_change_text(text: str) -> None:
            self.sink.set_field(field_name, text)

        return UINode(
            "input",
            style=style,
            props={
                "field": field_name,
                "value": _text(value) if is_truthy(value) else "",
                "placeholder": el.placeholder,
                "secure_text_entry": el.secure_text_entry,
                "auto_capitalize": el.auto_capitalize or "none",
            },
            on_change_text=on_change_text,
        )
