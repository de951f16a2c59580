"""Value — a reactive cell that remembers which hooks read it.

Reading a Value while a hook is current registers that hook as a dependent.
Writing it schedules one debounced notification pass: every dependent's
trigger() is called once per turn, however many writes happened.

Dependents accumulate. A hook that read a Value once keeps being notified
on every later write, whether or not it reads the Value again.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Callable, Generic, TypeVar, Union

from hookstate._debounce import debounce

if TYPE_CHECKING:
    from hookstate.hooks import Hook
    from hookstate.provider import Provider

T = TypeVar("T")

ValueOrFactory = Union[T, Callable[[], T]]


def _resolve(value):
    return value() if callable(value) else value


class Value(Generic[T]):
    """A single reactive storage cell with debounced change notification."""

    __slots__ = ("value", "trigger", "_provider", "_hooks")

    def __init__(self, provider: Provider, initial: ValueOrFactory[T]) -> None:
        # Non-owning: the provider's slot table is what keeps Values alive.
        self._provider = weakref.ref(provider)
        # id(hook) -> hook; hooks need not be hashable.
        self._hooks: dict[int, Hook] = {}
        self.value: T = _resolve(initial)
        self.trigger = debounce(self._notify)

    def get(self) -> T:
        """Read the value. If a hook is current, it becomes a dependent."""
        provider = self._provider()
        hook = provider.hook if provider is not None else None
        if hook is not None:
            self._hooks.setdefault(id(hook), hook)
        return self.value

    def set(self, value: ValueOrFactory[T]) -> None:
        """Store value (or the result of calling it) and schedule notification.

        There is no equality check: every set() notifies.
        """
        self.value = _resolve(value)
        self.trigger()

    @property
    def current(self) -> T:
        return self.get()

    @current.setter
    def current(self, value: ValueOrFactory[T]) -> None:
        self.set(value)

    @property
    def dependents(self) -> list[Hook]:
        return list(self._hooks.values())

    def _notify(self) -> None:
        hooks = list(self._hooks.values())
        provider = self._provider()
        if provider is None:
            for hook in hooks:
                hook.trigger()
            return
        with provider.running(None):
            for hook in hooks:
                hook.trigger()

    def __repr__(self) -> str:
        return f"Value({self.value!r})"
