"""Definition data models."""

from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core import get_logger

logger = get_logger(__name__)


class ElementBase(BaseModel):
    """Fields shared by every view element."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    type: str
    style: str | None = Field(default=None, description="Style name in view.styles")
    visible: Any = Field(default=None, description="Visibility expression; None = always visible")


class TextElement(ElementBase):
    type: Literal["text"] = "text"
    value: Any = Field(default="", description="Literal or interpolated text")


class ButtonElement(ElementBase):
    type: Literal["button"] = "button"
    label: Any = Field(default="")
    on_press: str | None = Field(default=None, alias="onPress")
    params: dict[str, Any] = Field(default_factory=dict)


class GridElement(ElementBase):
    type: Literal["grid"] = "grid"
    data_source: str = Field(..., alias="dataSource", description="state.<field> holding a list")
    on_press: str | None = Field(default=None, alias="onPress")


class InputElement(ElementBase):
    type: Literal["input"] = "input"
    binding: str = Field(..., description="state.<field> edited by this input")
    placeholder: str | None = None
    secure_text_entry: bool = Field(default=False, alias="secureTextEntry")
    auto_capitalize: str = Field(default="none", alias="autoCapitalize")


class UnknownElement(ElementBase):
    """Element of a type the renderer does not know; renders nothing."""


Element = TextElement | ButtonElement | GridElement | InputElement | UnknownElement

ELEMENT_TYPES: dict[str, type[ElementBase]] = {
    "text": TextElement,
    "button": ButtonElement,
    "grid": GridElement,
    "input": InputElement,
}


def parse_element(raw: Any, index: int) -> Element | None:
    """Build a typed element; malformed elements are dropped with a warning."""
    if not isinstance(raw, dict) or not isinstance(raw.get("type"), str):
        logger.warning("element_dropped", index=index, reason="missing type")
        return None

    cls = ELEMENT_TYPES.get(raw["type"], UnknownElement)
    try:
        return cls.model_validate(raw)
    except ValidationError as e:
        logger.warning("element_dropped", index=index, type=raw["type"], reason=str(e))
        return None


class ViewSpec(BaseModel):
    """Styles and ordered elements of a sparklet view."""

    model_config = ConfigDict(frozen=True)

    styles: dict[str, dict[str, Any]] = Field(default_factory=dict)
    elements: list[Element] = Field(default_factory=list)

    @field_validator("styles", mode="before")
    @classmethod
    def drop_malformed_styles(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return {}
        return {name: props for name, props in v.items() if isinstance(props, dict)}

    @field_validator("elements", mode="before")
    @classmethod
    def build_elements(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return []
        elements = [parse_element(raw, i) for i, raw in enumerate(v)]
        return [el for el in elements if el is not None]


class Definition(BaseModel):
    """A parsed sparklet definition. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    initial_state: dict[str, Any] = Field(default_factory=dict, alias="initialState")
    helpers: dict[str, str] = Field(default_factory=dict)
    actions: dict[str, str] = Field(default_factory=dict)
    view: ViewSpec = Field(default_factory=ViewSpec)
    valid: bool = Field(default=True, description="False when the source failed to load")
    fingerprint: str = Field(default="", description="Hash of the source text")

    @classmethod
    def empty(cls, fingerprint: str = "") -> "Definition":
        """The definition used when the source is missing or invalid."""
        return cls(valid=False, fingerprint=fingerprint)

    @property
    def is_empty(self) -> bool:
        return not self.view.elements

    def style(self, name: str | None) -> dict[str, Any]:
        if not name:
            return {}
        return self.view.styles.get(name, {})
