"""Effects — side effects gated on their dependency Values.

An Effect is a synthetic hook stored in one state slot of the hook that
declared it. While it evaluates it is the provider's current hook, so the
dependency reads register the Effect (not the declaring hook) as dependent.

On every trigger the dependencies are read in order. The body runs when
all of them are non-None and at least one differs from the previous
observation. The first evaluation counts as a change. An Effect without
dependencies runs its body on every trigger, starting with the one made
at installation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence

if TYPE_CHECKING:
    from hookstate.provider import Provider
    from hookstate.value import Value

EffectFn = Callable[[], "Callable[[], None] | None"]


def _same(a: Any, b: Any) -> bool:
    return a is b or a == b


class Effect:
    """A dependency-gated side effect that re-runs when its dependencies change."""

    __slots__ = ("_provider", "_fn", "_deps", "_observed", "_total", "_cleanup", "_disposed")

    def __init__(self, provider: Provider, fn: EffectFn, deps: Sequence[Value[Any]] = ()) -> None:
        self._provider = provider
        self._fn = fn
        self._deps = tuple(deps)
        self._observed: list[Any] = []
        # Dependency count when the body last ran; None until it first runs.
        self._total: int | None = None
        self._cleanup: Callable[[], None] | None = None
        self._disposed = False

    def install(self) -> Effect:
        """Evaluate once, synchronously, and return self for slot storage."""
        self.trigger()
        return self

    def update(self, fn: EffectFn, deps: Sequence[Value[Any]] = ()) -> None:
        """Adopt the body and dependencies from a later run of the owning hook."""
        deps = tuple(deps)
        if len(deps) != len(self._deps):
            raise ValueError(
                f"Effect dependency count changed from {len(self._deps)} to {len(deps)}; "
                "pass the same number of dependencies on every run"
            )
        self._fn = fn
        self._deps = deps

    def trigger(self) -> None:
        if self._disposed:
            return

        with self._provider.running(self, init=False):
            satisfied = True
            equal = 0
            observed = []
            for i, dep in enumerate(self._deps):
                value = dep.get()
                if value is None:
                    satisfied = False
                if self._total is not None and _same(value, self._observed[i]):
                    equal += 1
                observed.append(value)
            self._observed = observed

            if not self._deps or (satisfied and equal != self._total):
                self._total = len(self._deps)
                self._run()

    def _run(self) -> None:
        if self._cleanup is not None:
            cleanup, self._cleanup = self._cleanup, None
            cleanup()
        result = self._fn()
        self._cleanup = result if callable(result) else None

    def dispose(self) -> None:
        """Run the latest cleanup and ignore further triggers."""
        self._disposed = True
        if self._cleanup is not None:
            cleanup, self._cleanup = self._cleanup, None
            cleanup()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Effect({getattr(self._fn, '__name__', self._fn)!r}, deps={len(self._deps)}, {state})"
