"""Tests for the observer registry."""

from __future__ import annotations

import logging

from tokenkeeper.core.observers import ObserverRegistry


class TestObserverRegistry:
    def test_notifies_in_subscription_order(self):
        registry = ObserverRegistry()
        calls: list[str] = []
        registry.subscribe(lambda: calls.append("a"))
        registry.subscribe(lambda: calls.append("b"))
        registry.subscribe(lambda: calls.append("c"))

        registry.notify_all()

        assert calls == ["a", "b", "c"]

    def test_raising_observer_does_not_stop_delivery(self, caplog):
        registry = ObserverRegistry()
        calls: list[str] = []

        def broken() -> None:
            raise RuntimeError("observer bug")

        registry.subscribe(lambda: calls.append("first"))
        registry.subscribe(broken)
        registry.subscribe(lambda: calls.append("last"))

        with caplog.at_level(logging.ERROR, logger="tokenkeeper.core.observers"):
            failures = registry.notify_all()

        assert calls == ["first", "last"]
        assert failures == 1
        assert "observer" in caplog.text

    def test_unsubscribe_is_idempotent(self):
        registry = ObserverRegistry()
        calls: list[int] = []
        handle = registry.subscribe(lambda: calls.append(1))

        handle()
        handle()
        handle.unsubscribe()
        registry.notify_all()

        assert calls == []
        assert handle.active is False
        assert len(registry) == 0

    def test_unsubscribe_during_notify_uses_snapshot(self):
        registry = ObserverRegistry()
        calls: list[str] = []
        handles = {}

        def first() -> None:
            calls.append("first")
            handles["first"]()
            handles["second"]()

        handles["first"] = registry.subscribe(first)
        handles["second"] = registry.subscribe(lambda: calls.append("second"))
        registry.subscribe(lambda: calls.append("third"))

        registry.notify_all()
        assert calls == ["first", "second", "third"]

        calls.clear()
        registry.notify_all()
        assert calls == ["third"]

    def test_subscribe_during_notify_waits_for_next_round(self):
        registry = ObserverRegistry()
        calls: list[str] = []

        def adder() -> None:
            calls.append("adder")
            registry.subscribe(lambda: calls.append("late"))

        registry.subscribe(adder)
        registry.notify_all()

        assert calls == ["adder"]

    def test_same_callback_subscribed_twice_gets_two_handles(self):
        registry = ObserverRegistry()
        calls: list[int] = []

        def callback() -> None:
            calls.append(1)

        first = registry.subscribe(callback)
        registry.subscribe(callback)
        first()
        registry.notify_all()

        assert calls == [1]

    def test_clear_drops_everyone(self):
        registry = ObserverRegistry()
        handle = registry.subscribe(lambda: None)
        registry.clear()
        assert len(registry) == 0
        handle()
