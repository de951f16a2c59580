"""Turn batching — the scheduling primitive behind Value notifications.

debounce(fn) returns a wrapper that, however many times it is called before
the deferred run happens, results in exactly one call to fn afterwards.

Where the deferred run goes:
- a scheduler installed with set_scheduler() (e.g. a UI app's call_later)
- otherwise the running asyncio loop (call_soon, i.e. the next loop turn)
- otherwise a module-level queue, drained by flush()

Hosts without an event loop call flush() at the end of their turn.
"""

from __future__ import annotations

import asyncio
from typing import Callable

Callback = Callable[[], None]

_scheduler: Callable[[Callback], object] | None = None

# Deferred runs queued while no scheduler or loop was available.
_pending: list[Callback] = []


def set_scheduler(scheduler: Callable[[Callback], object] | None) -> None:
    """Route deferred runs through scheduler(callback). None restores the default.

    Usage:
        hookstate.set_scheduler(app.call_later)
    """
    global _scheduler
    _scheduler = scheduler


def _defer(callback: Callback) -> None:
    if _scheduler is not None:
        _scheduler(callback)
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        _pending.append(callback)
    else:
        loop.call_soon(callback)


def debounce(fn: Callback) -> Callback:
    """Coalesce calls made before the deferred run into a single call of fn."""
    scheduled = False

    def run() -> None:
        nonlocal scheduled
        # Cleared first so fn may schedule a follow-up run.
        scheduled = False
        fn()

    def wrapper() -> None:
        nonlocal scheduled
        if scheduled:
            return
        scheduled = True
        _defer(run)

    return wrapper


def flush() -> None:
    """Run every queued callback, including ones queued while flushing.

    Callbacks leave the queue one at a time, so if one raises the rest stay
    queued for the next flush().
    """
    while _pending:
        _pending.pop(0)()


def get_pending_count() -> int:
    """Number of deferred runs waiting for flush(). Useful for testing."""
    return len(_pending)


def reset() -> None:
    """Drop queued runs and the installed scheduler."""
    global _scheduler
    _pending.clear()
    _scheduler = None
