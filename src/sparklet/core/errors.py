"""Error taxonomy for the engine.

Everything raised inside the engine derives from ``SparkletError``. The
public boundaries (loader, evaluator, registry, dispatcher, renderer) catch
these and degrade instead of letting them reach the host UI.
"""


class SparkletError(Exception):
    """Base class for engine errors."""


class DefinitionParseError(SparkletError):
    """Definition text is not a usable document."""


class ScriptError(SparkletError):
    """Base class for script compile and runtime failures."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class TokenizeError(ScriptError):
    """Source text contains a character sequence the tokenizer rejects."""


class ParseError(ScriptError):
    """Token stream does not match the grammar."""


class EvaluationError(ScriptError):
    """Runtime failure while interpreting a script."""


class StepLimitExceeded(EvaluationError):
    """Operation budget or call depth exhausted."""


class ActionError(SparkletError):
    """Action body failed or produced an unusable result."""
