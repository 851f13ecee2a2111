"""Tests for the change notification channel."""

import gc

import pytest

from journalyst.events import EntryChanged, EventChannel, EventKind, ListChanged
from journalyst.models import Entry


@pytest.fixture
def channel():
    return EventChannel()


class Listener:
    """Subscriber object used to test scoped lifetimes."""

    def __init__(self):
        self.seen = []

    def handle(self, event):
        self.seen.append(event)


class TestDelivery:
    """Tests for emit()."""

    def test_delivers_to_matching_kind(self, channel, recorder):
        """Handlers only receive events of the kind they subscribed to."""
        channel.subscribe(EventKind.LIST_CHANGED, recorder)

        channel.emit(EntryChanged(Entry()))
        channel.emit(ListChanged())

        assert recorder.kinds() == [EventKind.LIST_CHANGED]

    def test_registration_order(self, channel):
        """Subscribers are called in the order they registered."""
        calls = []
        channel.subscribe(EventKind.LIST_CHANGED, lambda e: calls.append("first"))
        channel.subscribe(EventKind.LIST_CHANGED, lambda e: calls.append("second"))

        channel.emit(ListChanged())

        assert calls == ["first", "second"]

    def test_once_per_emit(self, channel, recorder):
        """Each emit reaches each subscriber exactly once."""
        channel.subscribe(EventKind.LIST_CHANGED, recorder)

        count = channel.emit(ListChanged())
        channel.emit(ListChanged())

        assert count == 1
        assert len(recorder.events) == 2

    def test_entry_changed_carries_entry(self, channel, recorder):
        """EntryChanged events carry the changed entry."""
        entry = Entry(log="x")
        channel.subscribe(EventKind.ENTRY_CHANGED, recorder)

        channel.emit(EntryChanged(entry))

        assert recorder.events[0].entry.id == entry.id

    def test_subscribe_during_delivery_takes_effect_next_time(self, channel, recorder):
        """A handler added while delivering is not called for the current event."""
        def add_another(event):
            channel.subscribe(EventKind.LIST_CHANGED, recorder)

        channel.subscribe(EventKind.LIST_CHANGED, add_another)
        channel.emit(ListChanged())
        assert recorder.events == []

        channel.emit(ListChanged())
        assert len(recorder.events) == 1

    def test_handler_error_propagates(self, channel):
        """Exceptions from a handler reach the emitter."""
        def broken(event):
            raise RuntimeError("boom")

        channel.subscribe(EventKind.LIST_CHANGED, broken)

        with pytest.raises(RuntimeError, match="boom"):
            channel.emit(ListChanged())


class TestSubscriptionLifetime:
    """Tests for cancelling and scoped subscriptions."""

    def test_cancel_stops_delivery(self, channel, recorder):
        """Cancelled subscriptions receive nothing."""
        subscription = channel.subscribe(EventKind.LIST_CHANGED, recorder)
        subscription.cancel()

        channel.emit(ListChanged())

        assert recorder.events == []
        assert not subscription.active
        assert channel.subscriber_count(EventKind.LIST_CHANGED) == 0

    def test_cancel_is_idempotent(self, channel, recorder):
        """Cancelling twice is harmless."""
        subscription = channel.subscribe(EventKind.LIST_CHANGED, recorder)
        subscription.cancel()
        subscription.cancel()
        assert not subscription.active

    def test_context_manager_cancels(self, channel, recorder):
        """Leaving the with block ends the subscription."""
        with channel.subscribe(EventKind.LIST_CHANGED, recorder):
            channel.emit(ListChanged())
        channel.emit(ListChanged())

        assert len(recorder.events) == 1

    def test_cancel_during_delivery(self, channel, recorder):
        """A subscriber cancelled mid-delivery is skipped immediately."""
        later = None

        def cancel_later(event):
            later.cancel()

        channel.subscribe(EventKind.LIST_CHANGED, cancel_later)
        later = channel.subscribe(EventKind.LIST_CHANGED, recorder)

        assert channel.emit(ListChanged()) == 1
        channel.emit(ListChanged())

        assert recorder.events == []

    def test_bound_method_released_with_object(self, channel):
        """A collected subscriber stops receiving events without unsubscribing."""
        listener = Listener()
        subscription = channel.subscribe(EventKind.LIST_CHANGED, listener.handle)
        assert subscription.active

        del listener
        gc.collect()

        assert not subscription.active
        assert channel.emit(ListChanged()) == 0
        assert channel.subscriber_count(EventKind.LIST_CHANGED) == 0

    def test_owner_collection_cancels(self, channel, recorder):
        """Subscriptions tied to an owner end when the owner is collected."""
        owner = Listener()
        subscription = channel.subscribe(EventKind.LIST_CHANGED, recorder, owner=owner)

        del owner
        gc.collect()

        assert not subscription.active
        channel.emit(ListChanged())
        assert recorder.events == []

    def test_plain_function_held_strongly(self, channel):
        """Plain functions stay subscribed until cancelled."""
        seen = []
        channel.subscribe(EventKind.LIST_CHANGED, lambda e: seen.append(e))
        gc.collect()

        channel.emit(ListChanged())

        assert len(seen) == 1

    def test_handler_capturing_owner_rejected(self, channel):
        """A closure over its owner could never be released by that owner."""
        owner = Listener()
        with pytest.raises(ValueError):
            channel.subscribe(EventKind.LIST_CHANGED, lambda e: owner.handle(e), owner=owner)
        assert channel.subscriber_count(EventKind.LIST_CHANGED) == 0

    def test_strong_method_of_owner_rejected(self, channel):
        owner = Listener()
        with pytest.raises(ValueError):
            channel.subscribe(EventKind.LIST_CHANGED, owner.handle, owner=owner, weak=False)

    def test_strong_method_outlives_its_object(self, channel):
        """weak=False keeps a bound method's object subscribed."""
        listener = Listener()
        seen = listener.seen
        channel.subscribe(EventKind.LIST_CHANGED, listener.handle, weak=False)

        del listener
        gc.collect()
        channel.emit(ListChanged())

        assert len(seen) == 1
