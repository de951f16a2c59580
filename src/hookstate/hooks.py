"""Hook capability and per-hook slot storage.

A Hook is any host object with a trigger() method. The core never builds
or inspects hooks beyond that; it only sets an onunmount attribute on them.

HookValues holds one hook's Values in allocation order. Every run of the
hook walks its slots from the start, so the Nth use_state() call of a run
gets the same Value as the Nth call of every other run.

Call order must be stable across runs of the same hook. The core cannot
verify that; Provider(debug=True) logs the mismatches it can see.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hookstate.provider import Provider
    from hookstate.value import Value

logger = logging.getLogger("hookstate.hooks")

Cleanup = Callable[[], None]


@runtime_checkable
class Hook(Protocol):
    """Host-owned unit of state ownership.

    trigger() is called when a Value the hook read has changed; the host
    decides how and when to run the hook again. onmount and onunmount are
    optional attributes.
    """

    def trigger(self) -> None: ...


class HookValues:
    """Ordered slots and cleanups of a single hook."""

    def __init__(self, provider: Provider, *, debug: bool = False) -> None:
        self._provider = weakref.ref(provider)
        self._values: list[Value[Any]] = []
        self._cleanups: list[Cleanup] = []
        self._count = 0
        self._runs = 0
        self._debug = debug

    def __len__(self) -> int:
        return len(self._values)

    def init_count(self) -> None:
        """Rewind the slot cursor for a new run of the hook."""
        if self._debug and self._runs and self._count != len(self._values):
            logger.warning(
                "Hook run consumed %d of %d state slots; call order must be stable",
                self._count, len(self._values),
            )
        self._count = 0
        self._runs += 1

    def get_next(self, initial: Any, cleanup: Cleanup | None = None) -> Value[Any]:
        """Return the slot at the cursor, allocating it on first use."""
        if self._count < len(self._values):
            value = self._values[self._count]
            self._count += 1
            return value

        if self._debug and self._runs > 1:
            logger.warning(
                "Hook allocated new state slot #%d on run %d; call order must be stable",
                self._count, self._runs,
            )
        value = self._provider().use_value(initial)
        if cleanup is not None:
            self._cleanups.append(cleanup)
        self._values.append(value)
        self._count += 1
        return value

    def cleanup(self) -> int:
        """Run every registered cleanup once. Returns how many ran.

        A failing cleanup does not stop the others; the first error is
        raised after all of them have run.
        """
        cleanups = list(self._cleanups)
        self._cleanups.clear()
        first_error: Exception | None = None
        for fn in cleanups:
            try:
                fn()
            except Exception as error:
                logger.debug("Cleanup %r failed: %s", fn, error)
                if first_error is None:
                    first_error = error
        if first_error is not None:
            raise first_error
        return len(cleanups)
