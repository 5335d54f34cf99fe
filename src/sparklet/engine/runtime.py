"""Script runtime: compiled-program cache plus one interpreter per instance."""

from typing import Callable, TypeVar

from ..core import ParseError, ProgramCache, Settings, get_settings
from ..script import Interpreter, parse_expression, parse_program
from ..script import nodes

T = TypeVar("T")


def _guarded(compile_fn: Callable[[str], T]) -> Callable[[str], T]:
    def compile_source(source: str) -> T:
        try:
            return compile_fn(source)
        except RecursionError:
            raise ParseError("Source is nested too deeply") from None
    return compile_source


_compile_expression = _guarded(parse_expression)
_compile_program = _guarded(parse_program)


class ScriptRuntime:
    """
    Compiles and caches expressions and bodies for one sparklet instance.

    The cache may be shared between instances (ASTs are immutable); the
    interpreter carries per-invocation counters and is not shared.
    """

    def __init__(self, settings: Settings | None = None, cache: ProgramCache | None = None):
        self.settings = settings or get_settings()
        if not self.settings.enable_cache:
            cache = None
        elif cache is None:
            cache = ProgramCache(max_size=self.settings.cache_size)
        self.cache = cache
        self.interpreter = Interpreter(
            max_steps=self.settings.max_steps,
            max_call_depth=self.settings.max_call_depth,
        )

    def compile_expression(self, source: str) -> nodes.Node:
        if self.cache is None:
            return _compile_expression(source)
        return self.cache.get_or_compile("expression", source, _compile_expression)

    def compile_program(self, source: str) -> nodes.Block:
        if self.cache is None:
            return _compile_program(source)
        return self.cache.get_or_compile("program", source, _compile_program)
