"""Textual integration for hookstate. Opt-in — requires textual.

AppHook is a Hook whose trigger() re-runs a render function against a
Textual app: held while the app is paused and replayed once the pause
ends, dropped while the app is not running, marshaled through
call_from_thread from other threads, NoMatches from widget queries
ignored. Textual coupling stays in this module; the core only knows the
Hook contract.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable

from textual.css.query import NoMatches

from hookstate._debounce import set_scheduler
from hookstate.provider import Provider

# id(app) -> hooks triggered during the pause, keyed by id(hook).
_held: dict[int, dict[int, AppHook]] = {}


@contextmanager
def pause(app):
    """Hold AppHook re-runs while widgets are replaced.

    Each hook triggered during the pause re-runs once when it ends. A pause
    left through an exception drops them. Nested pauses of the same app
    join the outer one.
    """
    key = id(app)
    if key in _held:
        yield
        return
    held = _held[key] = {}
    try:
        yield
    finally:
        del _held[key]
    for hook in held.values():
        hook.trigger()


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _held


def use_app_scheduler(app) -> None:
    """Flush Value notifications through app.call_later."""
    set_scheduler(app.call_later)


class AppHook:
    """A Hook that renders into a Textual app.

    Usage:
        provider = Provider()

        def render():
            count = provider.use_state(0)
            app.query_one("#count", Static).update(str(count.get()))

        hook = AppHook(app, provider, render)
        hook.run()
    """

    def __init__(self, app, provider: Provider, render: Callable[[], None]) -> None:
        self.app = app
        self.provider = provider
        self.render = render
        self._main = threading.get_ident()

    def run(self) -> None:
        """Run render with this hook current."""
        with self.provider.running(self):
            try:
                self.render()
            except NoMatches:
                pass

    def trigger(self) -> None:
        held = _held.get(id(self.app))
        if held is not None:
            held.setdefault(id(self), self)
            return
        if not self.app.is_running:
            return
        if threading.get_ident() != self._main:
            self.app.call_from_thread(self.run)
        else:
            self.run()

    def unmount(self) -> None:
        """Run this hook's cleanups, if it was ever rendered."""
        onunmount = getattr(self, "onunmount", None)
        if onunmount is not None:
            onunmount()
