"""Collection — a lazily populated, keyed factory cache.

Items are built by a single creator function and memoized per key. The
cache is not reactive and never evicts; creators usually return reactive
objects (Values, AsyncContexts) so each key gets its own state.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
V = TypeVar("V")

# creator(id, initial=None, prev=None) -> item
Creator = Callable[..., Any]


class Collection(Generic[T, V]):
    """Keyed items constructed on demand by a creator function."""

    def __init__(self, creator: Callable[..., T]) -> None:
        self._creator = creator
        self._items: dict[str, T] = {}

    def get(self, id: str, initial: V | None = None) -> T:
        """The item for id, constructing it with creator(id, initial) if missing."""
        if id not in self._items:
            self._items[id] = self._creator(id, initial)
        return self._items[id]

    def upget(self, id: str, value: V) -> T:
        """Rebuild the item for id with creator(id, value, previous) and store it."""
        item = self._creator(id, value, self._items.get(id))
        self._items[id] = item
        return item

    def has(self, id: str) -> bool:
        return id in self._items

    def map(self, fn: Callable[[T, str, int, dict[str, T]], Any]) -> list[Any]:
        """fn(item, key, index, items) over a snapshot of entries, in insertion order."""
        return [fn(item, key, i, self._items) for i, (key, item) in enumerate(list(self._items.items()))]

    def __contains__(self, id: object) -> bool:
        return id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Collection({list(self._items)!r})"
