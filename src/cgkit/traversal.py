"""
Bounded traversal over heterogeneous containers.

One contract, two container shapes:

    index-addressable:  supports len() and target[i]
                        (list, tuple, str, range, ...)
    link-sequential:    reached element by element through "rest"
                        (Cons chains ending in None, iterators)

Both shapes visit the same elements, in the same order, for the same
half-open interval [start, end).
"""

import operator
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from itertools import islice
from typing import Any, Callable, Iterable, Iterator as IteratorT, Optional

from cgkit.errors import RangeError, UnsupportedTargetError


@dataclass(frozen=True)
class Cons:
    """
    A link-sequential cell. A chain ends with rest=None.

    None on its own is the empty chain.
    """

    first: Any
    rest: Optional["Cons"] = None

    @classmethod
    def from_iterable(cls, values: Iterable[Any]) -> Optional["Cons"]:
        chain = None
        for value in reversed(list(values)):
            chain = cls(value, chain)
        return chain

    def __iter__(self) -> IteratorT[Any]:
        node: Optional[Cons] = self
        while node is not None:
            yield node.first
            node = node.rest


def _is_indexable(target: Any) -> bool:
    if isinstance(target, Sequence):
        return True
    if isinstance(target, Mapping):
        return False
    return hasattr(target, "__len__") and hasattr(target, "__getitem__")


def _check_bounds(start: int, end: Optional[int]) -> None:
    if start < 0:
        raise RangeError(f"start must be non-negative, got {start}")
    if end is not None and end < 0:
        raise RangeError(f"end must be non-negative, got {end}")


def _indexed(target: Any, start: int, end: Optional[int]) -> IteratorT[Any]:
    length = len(target)
    if start > length:
        raise RangeError(f"start {start} is beyond the target's length {length}")
    stop = length if end is None else min(end, length)
    return (target[i] for i in range(start, stop))


def _count(start: int, end: Optional[int]) -> Optional[int]:
    return None if end is None else max(0, end - start)


def _chain(node: Optional[Cons], start: int, end: Optional[int]) -> IteratorT[Any]:
    for skipped in range(start):
        if node is None:
            raise RangeError(f"start {start} is beyond the chain's length {skipped}")
        node = node.rest

    def walk(node: Optional[Cons], remaining: Optional[int]) -> IteratorT[Any]:
        while node is not None and remaining != 0:
            yield node.first
            node = node.rest
            if remaining is not None:
                remaining -= 1

    return walk(node, _count(start, end))


def _stream(target: IteratorT[Any], start: int, end: Optional[int]) -> IteratorT[Any]:
    skipped = sum(1 for _ in islice(target, start))
    if skipped < start:
        raise RangeError(f"start {start} is beyond the iterator's length {skipped}")
    return islice(target, _count(start, end))


def iter_range(target: Any, start: int = 0, end: Optional[int] = None) -> IteratorT[Any]:
    """
    Return an iterator over the elements of target in [start, end).

    Bounds and the target's shape are checked before this returns.
    For link-sequential targets, the first start elements are skipped
    eagerly.

    Raises:
        RangeError: If a bound is negative or start lies beyond the target
        UnsupportedTargetError: If target is neither indexable nor linked
    """
    start = operator.index(start)
    end = None if end is None else operator.index(end)
    _check_bounds(start, end)

    if _is_indexable(target):
        return _indexed(target, start, end)
    if target is None or isinstance(target, Cons):
        return _chain(target, start, end)
    if isinstance(target, Iterator):
        return _stream(target, start, end)
    raise UnsupportedTargetError(target)


def traverse(
    target: Any,
    start: int = 0,
    end: Optional[int] = None,
    visit: Optional[Callable[[Any], Any]] = None,
) -> None:
    """
    Call visit once per element of target in [start, end), in order.

    Args:
        target: Index-addressable or link-sequential container
        start: First offset visited (non-negative, default 0)
        end: Offset after the last one visited; omitted or None means the
            natural end of the target.
            end < start visits nothing.
        visit: Called with each element; its return value is ignored

    Raises:
        TypeError: If visit is missing
        RangeError: If a bound is negative or start lies beyond the target
        UnsupportedTargetError: If target is neither indexable nor linked
    """
    if visit is None:
        raise TypeError("traverse() requires a visit callable")
    for element in iter_range(target, start, end):
        visit(element)
