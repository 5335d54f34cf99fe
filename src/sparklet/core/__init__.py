"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    SparkletError,
    DefinitionParseError,
    ScriptError,
    TokenizeError,
    ParseError,
    EvaluationError,
    StepLimitExceeded,
    ActionError,
)
from .validate import ValidationResult, validate_definition
from .logging_config import configure_logging, get_logger, LogContext
from .json import (
    decode_json,
    json_loads,
    safe_json_dumps,
    JSONParseError,
    validate_json_size,
    validate_json_depth,
)
from .hash import Algorithm, hash_string, hash_fields
from .cache import ProgramCache, Stats


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "SparkletError",
    "DefinitionParseError",
    "ScriptError",
    "TokenizeError",
    "ParseError",
    "EvaluationError",
    "StepLimitExceeded",
    "ActionError",
    # Validation
    "ValidationResult",
    "validate_definition",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "decode_json",
    "json_loads",
    "safe_json_dumps",
    "JSONParseError",
    "validate_json_size",
    "validate_json_depth",
    # DI
    "create_container",
    # Hashing
    "Algorithm",
    "hash_string",
    "hash_fields",
    # Caching
    "ProgramCache",
    "Stats",
]
