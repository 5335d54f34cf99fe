"""Definition document validation with the Result pattern."""

from dataclasses import dataclass
from typing import Any
from returns.result import Result, Success, Failure

from .json import JSONParseError, validate_json_depth


# Sections that must be JSON objects when present
MAPPING_SECTIONS = ("initialState", "helpers", "actions", "view")
MAX_JSON_DEPTH = 32


@dataclass(frozen=True)
class ValidationResult:
    """Validation error with details (for Result pattern)."""

    message: str
    field: str | None = None
    value: Any | None = None


def _check_script_map(doc: dict[str, Any], section: str) -> ValidationResult | None:
    for name, body in doc.get(section, {}).items():
        if not isinstance(body, str):
            return ValidationResult(
                f"{section}.{name} must be a script string",
                field=f"{section}.{name}",
                value=type(body).__name__,
            )
    return None


def validate_definition(
    doc: dict[str, Any], max_depth: int = MAX_JSON_DEPTH
) -> Result[dict[str, Any], ValidationResult]:
    """
    Validate the shape of a decoded definition document.

    Only the top-level structure is checked here; individual elements are
    validated (and dropped when malformed) by the model layer.

    Args:
        doc: Decoded JSON object
        max_depth: Maximum allowed nesting depth

    Returns:
        Success with the document, or Failure describing the first problem
    """
    try:
        validate_json_depth(doc, max_depth)
    except JSONParseError as e:
        return Failure(ValidationResult(str(e)))

    for section in MAPPING_SECTIONS:
        if section in doc and not isinstance(doc[section], dict):
            return Failure(
                ValidationResult(
                    f"'{section}' must be an object",
                    field=section,
                    value=type(doc[section]).__name__,
                )
            )

    for section in ("helpers", "actions"):
        problem = _check_script_map(doc, section)
        if problem:
            return Failure(problem)

    view = doc.get("view", {})
    if "styles" in view and not isinstance(view["styles"], dict):
        return Failure(ValidationResult("'view.styles' must be an object", field="view.styles"))
    if "elements" in view and not isinstance(view["elements"], list):
        return Failure(ValidationResult("'view.elements' must be a list", field="view.elements"))

    return Success(doc)


__all__ = ["ValidationResult", "validate_definition", "MAX_JSON_DEPTH"]
