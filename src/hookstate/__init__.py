"""hookstate: hook-style reactive state for any host that can re-run a function."""

from importlib.metadata import version as _version

__version__ = _version("hookstate")

from hookstate._debounce import debounce, flush, get_pending_count, set_scheduler
from hookstate.hooks import Hook, HookValues
from hookstate.value import Value
from hookstate.effect import Effect
from hookstate.collection import Collection
from hookstate.async_context import AsyncContext
from hookstate.provider import Provider, InvalidHookCallError
# hookstate.textual is opt-in; import it explicitly

__all__ = [
    "Provider",
    "InvalidHookCallError",
    "Hook",
    "HookValues",
    "Value",
    "Effect",
    "Collection",
    "AsyncContext",
    "debounce",
    "flush",
    "get_pending_count",
    "set_scheduler",
]
