"""Provider — owns the current hook and every hook's state slots.

A host makes a hook current (assign provider.hook, or `with
provider.running(hook)`) and then runs the hook's logic, which calls the
use_* operations below. Slots are addressed by call order within a run.

The current hook lives in a ContextVar owned by the provider, so nested
switches (effects evaluating, notification passes) restore it exactly and
separate asyncio tasks do not see each other's hook.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Sequence, TypeVar

from hookstate.async_context import AsyncContext
from hookstate.collection import Collection, Creator
from hookstate.effect import Effect, EffectFn
from hookstate.hooks import Cleanup, Hook, HookValues
from hookstate.value import Value, ValueOrFactory

logger = logging.getLogger("hookstate.provider")

T = TypeVar("T")


class InvalidHookCallError(RuntimeError):
    """A use_* operation was called while no initialized hook was current."""


class Provider:
    """Hook context and slot table for a set of host hooks."""

    def __init__(self, *, debug: bool = False) -> None:
        self._debug = debug
        # id(hook) -> (hook, slots); the hook is kept so its id stays unique.
        self._table: dict[int, tuple[Hook, HookValues]] = {}
        self._current: contextvars.ContextVar[Hook | None] = contextvars.ContextVar(
            f"hookstate_current_hook_{id(self)}", default=None
        )

    # ─── Hook context ────────────────────────────────────────────────────

    @property
    def hook(self) -> Hook | None:
        return self._current.get()

    @hook.setter
    def hook(self, hook: Hook | None) -> None:
        self._current.set(hook)
        if hook is not None:
            self.init_hook(hook)

    @contextmanager
    def running(self, hook: Hook | None, *, init: bool = True) -> Iterator[None]:
        """Make hook current for the block, restoring the previous hook on exit.

        init=False skips slot bookkeeping; effects use it to track reads
        without owning slots.
        """
        token = self._current.set(hook)
        try:
            if hook is not None and init:
                self.init_hook(hook)
            yield
        finally:
            self._current.reset(token)

    def init_hook(self, hook: Hook) -> HookValues:
        """Fetch (or create) the hook's slots and rewind them for a new run."""
        entry = self._table.get(id(hook))
        if entry is None:
            values = HookValues(self, debug=self._debug)
            self._table[id(hook)] = (hook, values)
            self._wire_unmount(hook, values)
            logger.debug("Registered hook %r", hook)
        else:
            values = entry[1]
        values.init_count()
        return values

    def _wire_unmount(self, hook: Hook, values: HookValues) -> None:
        host_unmount = getattr(hook, "onunmount", None)

        def onunmount() -> None:
            entry = self._table.get(id(hook))
            if entry is not None and entry[1] is values:
                del self._table[id(hook)]
            hook.onunmount = host_unmount
            try:
                count = values.cleanup()
                logger.debug("Unmounted hook %r: ran %d cleanups", hook, count)
            finally:
                if host_unmount is not None:
                    host_unmount()

        hook.onunmount = onunmount

    def is_mounted(self, hook: Hook) -> bool:
        return id(hook) in self._table

    # ─── Primitives ──────────────────────────────────────────────────────

    def use_state(self, initial: ValueOrFactory[T], cleanup: Cleanup | None = None) -> Value[T]:
        """Return the current hook's next state slot.

        initial (called if callable) and cleanup are only used when the slot
        is first allocated. cleanup runs when the hook unmounts.
        """
        hook = self.hook
        entry = self._table.get(id(hook)) if hook is not None else None
        if entry is None:
            raise InvalidHookCallError(
                "No hook available - use_state can only be called within a hook function"
            )
        return entry[1].get_next(initial, cleanup)

    def use_value(self, initial: ValueOrFactory[T]) -> Value[T]:
        """A standalone Value, not bound to any hook slot."""
        return Value(self, initial)

    def use_effect(self, fn: EffectFn, deps: Sequence[Value[Any]] = ()) -> None:
        """Run fn when all deps are non-None and one of them changed.

        Without deps, fn runs immediately and then on every trigger. fn may
        return a cleanup, called before the next run and on unmount.
        """
        effect = Effect(self, fn, deps)
        slot = self.use_state(effect.install, effect.dispose)
        if slot.value is not effect:
            slot.value.update(fn, deps)

    def use_callback(self, fn: Callable[..., T], deps: Sequence[Value[Any]] = ()) -> Callable[..., T]:
        """A function whose identity only changes when deps change."""
        callback = self.use_state(lambda: fn)
        self.use_effect(lambda: callback.set(lambda: fn), deps)
        return callback.value

    def use_ref(self) -> Value[Any]:
        """A None-initialised slot, meant for .current access."""
        return self.use_state(None)

    def use_collection(self, creator: Creator) -> Collection:
        return self.use_state(lambda: Collection(creator)).value

    def use_async_context(
        self, initializer: Callable[[], Awaitable[T]]
    ) -> Callable[[], AsyncContext[T]]:
        """Wrap initializer in a new AsyncContext and return an accessor for it.

        Not memoized: keep the accessor in use_state to reuse it across runs.
        """
        context: AsyncContext[T] = AsyncContext(self, initializer)
        return lambda: context

    def __repr__(self) -> str:
        return f"Provider(hooks={len(self._table)}, current={self.hook!r})"
