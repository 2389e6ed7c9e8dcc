"""
Bounded list helpers.

Token lists on the user record keep at most N entries; appending past the
cap evicts the oldest entries first.
"""

from typing import Callable, Sequence, TypeVar


T = TypeVar("T")


def append_bounded(items: Sequence[T], item: T, capacity: int) -> list[T]:
    """
    Return a new list with `item` appended and at most `capacity` entries.

    Entries are kept in insertion order; when the cap is exceeded the
    oldest entries are dropped.
    """
    if capacity <= 0:
        return []
    combined = [*items, item]
    return combined[-capacity:]


def remove_where(items: Sequence[T], predicate: Callable[[T], bool]) -> list[T]:
    """Return a new list without the entries matching `predicate`."""
    return [item for item in items if not predicate(item)]
