"""AsyncContext — load/error/value state for an asynchronous producer.

States:
    idle     has_loaded=False, is_loading=False
    loading  is_loading=True
    loaded   has_loaded=True, value set
    errored  is_loading=False, error set, has_loaded=False

get() starts a load when idle (errored counts as idle, so reading again
retries) and registers the current hook on an internal Value, which is
set again when a load completes. Hooks that read the context are therefore
re-triggered once the value arrives.

Producer failures never propagate out of load(): they land in `error`
and in the `future` of the first load cycle.

Loads run as asyncio tasks, so load()/get() need a running event loop.
Called without one they raise asyncio's RuntimeError. That is the one
exception to "load() never throws": a missing loop is a calling-context
error, not a load failure, and it is raised before any state changes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from hookstate.provider import Provider
    from hookstate.value import Value

logger = logging.getLogger("hookstate.async_context")

T = TypeVar("T")


class AsyncContext(Generic[T]):
    """Adapts an awaitable producer into the reactive model."""

    def __init__(self, provider: Provider, initializer: Callable[[], Awaitable[T]]) -> None:
        self.has_loaded = False
        self.is_loading = False
        self.error: BaseException | None = None
        self.value: T | None = None
        self._initializer = initializer
        self._value: Value[AsyncContext[T]] = provider.use_value(self)
        self._future: asyncio.Future[T] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def future(self) -> asyncio.Future[T]:
        """Settled by the first load cycle only; later cycles leave it alone."""
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    def get(self) -> AsyncContext[T]:
        """Start loading if idle, register the current hook, return self."""
        self.load()
        return self._value.get()

    def set(self, value: T) -> None:
        """Replace the value directly, bypassing the initializer, and notify."""
        self.value = value
        self._value.set(self)

    def load(self) -> None:
        if self.has_loaded or self.is_loading:
            return
        loop = asyncio.get_running_loop()
        if self._future is None:
            self._future = loop.create_future()
        self.is_loading = True
        self.error = None
        self._task = loop.create_task(self._load())

    async def _load(self) -> None:
        try:
            value = await self._initializer()
        except asyncio.CancelledError:
            self.is_loading = False
            raise
        except Exception as error:
            self.is_loading = False
            self.error = error
            logger.warning("Async load failed: %s", error)
            if not self.future.done():
                self.future.set_exception(error)
                # Marks it retrieved: hosts reading `error` need not await it.
                self.future.exception()
            return

        self.has_loaded = True
        self.is_loading = False
        self.value = value
        self._value.set(self)
        if not self.future.done():
            self.future.set_result(value)

    def refresh(self) -> None:
        """Reload unless a load is already running."""
        if not self.is_loading:
            self.has_loaded = False
            self.load()

    async def when_loaded(self) -> T | None:
        """Wait for the current load cycle and return the value.

        Raises the cycle's error if the initializer failed.
        """
        self.get()
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)
        if self.error is not None and not self.has_loaded:
            raise self.error
        return self.value

    def __repr__(self) -> str:
        if self.is_loading:
            state = "loading"
        elif self.has_loaded:
            state = f"loaded={self.value!r}"
        elif self.error is not None:
            state = f"error={self.error!r}"
        else:
            state = "idle"
        return f"AsyncContext({state})"
