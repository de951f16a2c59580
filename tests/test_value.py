"""Tests for Value — dependency registration and debounced notification."""

import asyncio

import pytest

from hookstate import Provider, Value, flush


class _Hook:
    def __init__(self, on_trigger=None):
        self.triggered = 0
        self._on_trigger = on_trigger

    def trigger(self):
        self.triggered += 1
        if self._on_trigger is not None:
            self._on_trigger()


class TestValue:
    def test_get_set(self):
        provider = Provider()
        v = provider.use_value(42)
        assert v.get() == 42
        v.set(100)
        assert v.get() == 100

    def test_callable_initial_and_set(self):
        provider = Provider()
        v = provider.use_value(lambda: "lazy")
        assert v.value == "lazy"
        v.set(lambda: "computed")
        assert v.value == "computed"

    def test_current_alias(self):
        provider = Provider()
        v = provider.use_value(None)
        v.current = "hello"
        assert v.current == "hello"
        assert v.value == "hello"

    def test_read_without_hook_registers_nothing(self):
        provider = Provider()
        v = provider.use_value(1)
        v.get()
        assert v.dependents == []

    def test_repr(self):
        provider = Provider()
        assert "Value(5)" in repr(provider.use_value(5))


class TestNotification:
    def test_single_hook(self):
        provider = Provider()
        hook = _Hook()
        provider.hook = hook
        v = provider.use_value(None)
        v.get()
        assert hook.triggered == 0
        v.set("hi")
        assert hook.triggered == 0
        flush()
        assert hook.triggered == 1
        v.set("other")
        flush()
        assert hook.triggered == 2

    def test_multiple_hooks(self):
        provider = Provider()
        first, second = _Hook(), _Hook()
        v = provider.use_value(None)
        provider.hook = first
        v.get()
        provider.hook = second
        v.get()
        v.set("hi")
        flush()
        assert (first.triggered, second.triggered) == (1, 1)
        v.set("other")
        flush()
        assert (first.triggered, second.triggered) == (2, 2)

    def test_burst_of_sets_notifies_once_with_last_value(self):
        provider = Provider()
        seen = []
        v = provider.use_value(0)
        hook = _Hook(lambda: seen.append(v.value))
        provider.hook = hook
        v.get()
        for i in range(1, 6):
            v.set(i)
        flush()
        assert hook.triggered == 1
        assert seen == [5]

    def test_every_set_notifies_even_if_unchanged(self):
        provider = Provider()
        hook = _Hook()
        provider.hook = hook
        v = provider.use_value("same")
        v.get()
        v.set("same")
        flush()
        assert hook.triggered == 1

    def test_dependents_persist_without_rereading(self):
        provider = Provider()
        hook = _Hook()
        provider.hook = hook
        v = provider.use_value(0)
        v.get()
        provider.hook = None
        for i in range(3):
            v.set(i)
            flush()
        assert hook.triggered == 3

    def test_rereading_is_idempotent(self):
        provider = Provider()
        hook = _Hook()
        provider.hook = hook
        v = provider.use_value(0)
        v.get()
        v.get()
        assert v.dependents == [hook]
        v.set(1)
        flush()
        assert hook.triggered == 1

    def test_hook_registered_after_set_is_notified(self):
        """The flush covers the dependents present when it runs."""
        provider = Provider()
        v = provider.use_value(0)
        v.set(1)
        hook = _Hook()
        provider.hook = hook
        v.get()
        flush()
        assert hook.triggered == 1

    def test_values_flush_independently(self):
        provider = Provider()
        a_hook, b_hook = _Hook(), _Hook()
        a = provider.use_value(0)
        b = provider.use_value(0)
        provider.hook = a_hook
        a.get()
        provider.hook = b_hook
        b.get()
        a.set(1)
        b.set(1)
        flush()
        assert (a_hook.triggered, b_hook.triggered) == (1, 1)

    def test_no_current_hook_during_notification(self):
        provider = Provider()
        seen = []
        hook = _Hook(lambda: seen.append(provider.hook))
        provider.hook = hook
        v = provider.use_value(0)
        v.get()
        v.set(1)
        flush()
        assert seen == [None]
        assert provider.hook is hook

    @pytest.mark.asyncio
    async def test_flushes_on_next_loop_turn(self):
        provider = Provider()
        hook = _Hook()
        provider.hook = hook
        v = provider.use_value(None)
        v.get()
        v.set("x")
        v.set("y")
        assert hook.triggered == 0
        await asyncio.sleep(0)
        assert hook.triggered == 1
        assert v.value == "y"


def test_value_constructed_directly():
    provider = Provider()
    v = Value(provider, [1, 2])
    assert v.get() == [1, 2]


class TestFailingDependent:
    def test_other_values_keep_notifying(self):
        provider = Provider()

        class Broken:
            def trigger(self):
                raise RuntimeError("host failed")

        good = _Hook()
        a = provider.use_value(0)
        b = provider.use_value(0)
        provider.hook = Broken()
        a.get()
        provider.hook = good
        b.get()
        provider.hook = None

        a.set(1)
        b.set(1)
        with pytest.raises(RuntimeError, match="host failed"):
            flush()
        flush()
        assert good.triggered == 1
        b.set(2)
        flush()
        b.set(3)
        flush()
        assert good.triggered == 3
