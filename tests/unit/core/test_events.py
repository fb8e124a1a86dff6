"""
Unit tests for the event emitter, subscriptions and the progress channel.
"""

import logging

from bookmarks_extractor.core.domain import EventCompleteRatio
from bookmarks_extractor.core.events import (
    ClientEvent, EventEmitter, MessageEvent, ProgressEmitter, ProgressEvent, Subscription
)


class TestSubscription:

    def test_unsubscribe_runs_teardowns_once(self):
        calls = []
        subscription = Subscription(lambda: calls.append("parent"))
        subscription.add(lambda: calls.append("child"))

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert calls == ["parent", "child"]
        assert subscription.closed

    def test_child_subscriptions_close_with_parent(self):
        parent = Subscription()
        child = Subscription()
        parent.add(child)

        parent.unsubscribe()

        assert child.closed

    def test_adding_to_closed_subscription_tears_down_immediately(self):
        parent = Subscription()
        parent.unsubscribe()
        child = Subscription()

        parent.add(child)

        assert child.closed


class TestEventEmitter:

    def test_listeners_called_in_registration_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("ping", lambda value: calls.append(("first", value)))
        emitter.on("ping", lambda value: calls.append(("second", value)))

        assert emitter.emit("ping", 1)
        assert calls == [("first", 1), ("second", 1)]

    def test_enum_and_string_names_are_the_same_event(self):
        emitter = EventEmitter()
        calls = []
        emitter.on(ClientEvent.USER_ERROR, calls.append)

        emitter.emit("user_error", "bad password")

        assert calls == ["bad password"]

    def test_emit_without_listeners_returns_false(self):
        assert not EventEmitter().emit(ClientEvent.SUCCESS)

    def test_subscription_removes_listener(self):
        emitter = EventEmitter()
        calls = []
        subscription = emitter.on("ping", calls.append)

        subscription.unsubscribe()
        emitter.emit("ping", 1)

        assert calls == []
        assert not emitter.emit("ping")

    def test_failing_listener_does_not_stop_dispatch(self, caplog):
        emitter = EventEmitter()
        calls = []

        def broken(value):
            raise RuntimeError("listener bug")

        emitter.on("ping", broken)
        emitter.on("ping", calls.append)

        with caplog.at_level(logging.ERROR):
            emitter.emit("ping", 7)

        assert calls == [7]
        assert "listener bug" in caplog.text


class TestProgressEmitter:

    def test_progress_and_message_events(self, progress_recorder):
        channel = ProgressEmitter()
        events = progress_recorder(channel)

        channel.emit_progress_event("extractor:tweets:extraction", EventCompleteRatio(2, 5))
        channel.emit_message_event("Your credentials were incorrect.")
        channel.emit_progress_event("extractor:tweets:complete")

        assert events == [
            ProgressEvent("extractor:tweets:extraction", EventCompleteRatio(2, 5)),
            MessageEvent("Your credentials were incorrect."),
            ProgressEvent("extractor:tweets:complete"),
        ]

    def test_forwarding_until_unsubscribed(self, progress_recorder):
        source = ProgressEmitter()
        target = ProgressEmitter()
        events = progress_recorder(target)

        forwarding = source.forward_to(target)
        source.emit_progress_event("page-manager:login")
        source.emit_message_event("hello")
        forwarding.unsubscribe()
        source.emit_progress_event("page-manager:bookmarks:open")

        assert events == [ProgressEvent("page-manager:login"), MessageEvent("hello")]
        assert not source.emit(ProgressEmitter.PROGRESS)
        assert not source.emit(ProgressEmitter.MESSAGE)
