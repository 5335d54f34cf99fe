"""LRU cache for compiled scripts and expressions.

Parsing is the expensive half of running a script, and the same bodies and
``{{...}}`` fragments are evaluated on every render pass, so compiled ASTs are
kept keyed by a hash of their kind and source text.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .hash import hash_fields, Algorithm

T = TypeVar("T")


@dataclass
class Stats:
    """Cache statistics."""

    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate (0.0 to 1.0)."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class ProgramCache(Generic[T]):
    """
    Least-recently-used cache of compiled programs.

    Examples:
        >>> cache = ProgramCache[object](max_size=2)
        >>> cache.get_or_compile("expr", "state.count", compile_fn)
    """

    def __init__(self, max_size: int = 512, algorithm: Algorithm = Algorithm.XXHASH64):
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.algorithm = algorithm
        self._entries: OrderedDict[str, T] = OrderedDict()
        self._stats = Stats(max_size=max_size)

    def _key(self, kind: str, source: str) -> str:
        return hash_fields(kind, source, algorithm=self.algorithm)

    def get(self, kind: str, source: str) -> T | None:
        """Get a compiled program, or None on miss."""
        key = self._key(kind, source)
        if key in self._entries:
            self._entries.move_to_end(key)
            self._stats.hits += 1
            return self._entries[key]

        self._stats.misses += 1
        return None

    def set(self, kind: str, source: str, program: T) -> None:
        """Store a compiled program, evicting the least recently used entry."""
        key = self._key(kind, source)
        self._entries[key] = program
        self._entries.move_to_end(key)

        if len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            self._stats.evictions += 1

        self._stats.size = len(self._entries)

    def get_or_compile(self, kind: str, source: str, compile_fn: Callable[[str], T]) -> T:
        """
        Return the cached program for ``source`` or compile and cache it.

        Compile errors propagate and nothing is cached for that source.
        """
        program = self.get(kind, source)
        if program is None:
            program = compile_fn(source)
            self.set(kind, source, program)
        return program

    def clear(self) -> None:
        """Clear entire cache."""
        self._entries.clear()
        self._stats.size = 0

    @property
    def stats(self) -> Stats:
        """Get cache statistics."""
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ProgramCache", "Stats"]
