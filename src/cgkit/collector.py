"""
Incremental collectors.

A Collector accumulates values in insertion order with amortized O(1)
append, and hands out immutable snapshots.

Snapshots are copies (tuples). The live storage is never exposed, so
later appends can never change a snapshot already returned.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Tuple, TypeVar

from cgkit.errors import DuplicateNameError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Collector(Generic[T]):
    """
    Mutable, singly-owned accumulator.

    Not safe for concurrent appends: use one collector per writer
    and merge the finalized snapshots afterwards.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[T] = []

    def append(self, value: T) -> None:
        self._items.append(value)

    def extend(self, values: Iterable[T]) -> None:
        for value in values:
            self._items.append(value)

    def finalize(self) -> Tuple[T, ...]:
        """Snapshot of everything appended so far, in order."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Collector({len(self._items)} items)"


def new_collector() -> Collector[Any]:
    """
    Create an empty collector.

    Returns:
        A Collector with nothing appended; finalize() gives ()
    """
    return Collector()


class CollectorScope:
    """
    A group of named collectors sharing one lexical scope.

    Each collector is appended to and finalized independently.

    Example:
        scope = new_collector_scope(["evens", "odds"])
        for n in range(5):
            scope.appender("evens" if n % 2 == 0 else "odds")(n)
        scope.finalize_all()  # {"evens": (0, 2, 4), "odds": (1, 3)}
    """

    def __init__(self, names: Iterable[str]):
        self._collectors: Dict[str, Collector] = {}
        for name in names:
            if name in self._collectors:
                raise DuplicateNameError(name, where="collector scope")
            self._collectors[name] = Collector()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Created collector scope %s", list(self._collectors))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._collectors)

    def __getitem__(self, name: str) -> Collector:
        return self._collectors[name]

    def __contains__(self, name: object) -> bool:
        return name in self._collectors

    def appender(self, name: str) -> Callable[[Any], None]:
        """Return the bound append of the named collector."""
        return self._collectors[name].append

    def finalize_all(self) -> Dict[str, Tuple[Any, ...]]:
        return {name: c.finalize() for name, c in self._collectors.items()}


def new_collector_scope(names: Iterable[str]) -> CollectorScope:
    """
    Create a scope of independent collectors.

    Raises:
        DuplicateNameError: If a name appears more than once
    """
    return CollectorScope(names)


@contextmanager
def collecting(*names: str) -> Iterator[CollectorScope]:
    """
    Context manager form of new_collector_scope().

    with collecting("keys", "values") as scope:
        ...
    result = scope.finalize_all()
    """
    yield CollectorScope(names)
