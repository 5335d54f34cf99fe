"""Definition Loader - JSON text to Definition, never raising."""

from typing import Any

from pydantic import ValidationError
from returns.result import Failure, Result, Success

from ..core import Settings, get_logger, get_settings
from ..core.errors import DefinitionParseError
from ..core.hash import Algorithm, hash_string
from ..core.json import JSONParseError, decode_json, validate_json_size
from ..core.validate import validate_definition
from .definition import Definition

logger = get_logger(__name__)


class DefinitionLoader:
    """Parses sparklet definition JSON into a typed Definition."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def load(self, definition_text: str | None) -> Definition:
        """
        Parse definition text.

        Any failure is logged and yields ``Definition.empty()`` so that the
        host can show the invalid-definition placeholder instead of crashing.

        Args:
            definition_text: JSON content string (None when the host has none)

        Returns:
            Loaded definition, or the empty (invalid) definition
        """
        fingerprint = hash_string(definition_text or "", Algorithm.SHA256, truncate=16)
        result = self.try_load(definition_text)

        if isinstance(result, Failure):
            error = result.failure()
            logger.error("definition_invalid", fingerprint=fingerprint, error=str(error))
            return Definition.empty(fingerprint)

        definition = result.unwrap()
        logger.debug(
            "definition_loaded",
            fingerprint=definition.fingerprint,
            elements=len(definition.view.elements),
            actions=len(definition.actions),
            helpers=len(definition.helpers),
        )
        return definition

    def try_load(self, definition_text: str | None) -> Result[Definition, DefinitionParseError]:
        """Parse definition text, reporting failure as a Result."""
        if not definition_text:
            return Failure(DefinitionParseError("Definition is missing"))

        try:
            validate_json_size(definition_text, self.settings.max_definition_size, "Definition")
            doc = decode_json(definition_text)
        except JSONParseError as e:
            return Failure(DefinitionParseError(str(e)))

        validated = validate_definition(doc, self.settings.max_json_depth)
        if isinstance(validated, Failure):
            return Failure(DefinitionParseError(validated.failure().message))

        fingerprint = hash_string(definition_text, Algorithm.SHA256, truncate=16)
        return self._build(validated.unwrap(), fingerprint)

    def _build(self, doc: dict[str, Any], fingerprint: str) -> Result[Definition, DefinitionParseError]:
        view = doc.get("view", {})
        if not isinstance(view.get("elements"), list):
            return Failure(DefinitionParseError("Definition has no view.elements"))

        try:
            definition = Definition.model_validate({
                "initialState": doc.get("initialState", {}),
                "helpers": doc.get("helpers", {}),
                "actions": doc.get("actions", {}),
                "view": view,
                "fingerprint": fingerprint,
            })
        except ValidationError as e:
            return Failure(DefinitionParseError(f"Invalid definition: {e}"))
        return Success(definition)


def load_definition(definition_text: str | None, settings: Settings | None = None) -> Definition:
    """
    Convenience function to load definition text

    Args:
        definition_text: Definition JSON string

    Returns:
        Definition (empty and invalid on failure)
    """
    return DefinitionLoader(settings).load(definition_text)
