"""Change notifications broadcast by the entry store.

Delivery is synchronous: ``emit`` calls every live subscriber of the
event's kind, in registration order, before it returns. Subscriptions
can be tied to an owner object so they disappear with it.
"""

from __future__ import annotations

import inspect
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from loguru import logger

from .models import Entry


class EventKind(Enum):
    """Kind of change notification."""
    LIST_CHANGED = "list_changed"
    ENTRY_CHANGED = "entry_changed"


@dataclass(frozen=True)
class ListChanged:
    """The number or order of entries changed."""
    kind = EventKind.LIST_CHANGED


@dataclass(frozen=True)
class EntryChanged:
    """One entry's content changed; its identity did not."""
    entry: Entry
    kind = EventKind.ENTRY_CHANGED


Event = Union[ListChanged, EntryChanged]
Handler = Callable[[Any], None]


def holds_owner(handler: Handler, owner: object, weak: bool) -> bool:
    """True if the channel's reference to ``handler`` would reach ``owner``."""
    if inspect.ismethod(handler):
        return not weak and handler.__self__ is owner
    if handler is owner:
        return True
    for cell in getattr(handler, "__closure__", None) or ():
        try:
            if cell.cell_contents is owner:
                return True
        except ValueError:  # empty cell
            continue
    return False


class Subscription:
    """Handle for one registered handler.

    Bound methods are held through a weak reference (unless ``weak`` is
    False), so a subscriber that is garbage collected stops receiving
    events without unsubscribing.
    """

    def __init__(
        self,
        channel: EventChannel,
        kind: EventKind,
        handler: Handler,
        owner: Optional[object] = None,
        weak: bool = True,
    ):
        self._channel = channel
        self.kind = kind
        self._active = True
        if weak and inspect.ismethod(handler):
            self._handler_ref: Callable[[], Optional[Handler]] = weakref.WeakMethod(handler)
        else:
            self._handler_ref = lambda: handler
        self._finalizer = weakref.finalize(owner, self.cancel) if owner is not None else None

    @property
    def active(self) -> bool:
        """Whether the handler will still be called."""
        return self._active and self._handler_ref() is not None

    def handler(self) -> Optional[Handler]:
        if not self._active:
            return None
        return self._handler_ref()

    def cancel(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        if self._finalizer is not None:
            self._finalizer.detach()
        self._channel._discard(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class EventChannel:
    """Broadcast hub between the store and its consumers."""

    def __init__(self):
        self._subscriptions: dict[EventKind, list[Subscription]] = {kind: [] for kind in EventKind}

    def subscribe(
        self,
        kind: EventKind,
        handler: Handler,
        owner: Optional[object] = None,
        weak: bool = True,
    ) -> Subscription:
        """Register a handler for one kind of event.

        The channel holds ``handler`` strongly unless it is a bound method
        and ``weak`` is set, so a handler that references ``owner`` would
        keep it alive forever. Such handlers are rejected.

        Args:
            kind: Which events to receive
            handler: Called with the event value
            owner: Optional object whose collection cancels the subscription
            weak: Hold bound-method handlers weakly

        Returns:
            Subscription handle

        Raises:
            ValueError: If a strongly held handler references ``owner``.
        """
        if owner is not None and holds_owner(handler, owner, weak):
            raise ValueError(
                f"Handler {handler!r} references its owner and would keep it alive; "
                "subscribe a bound method of the owner instead"
            )
        subscription = Subscription(self, kind, handler, owner=owner, weak=weak)
        self._subscriptions[kind].append(subscription)
        logger.debug(f"Subscribed {handler!r} to {kind.value}")
        return subscription

    def subscriber_count(self, kind: EventKind) -> int:
        """Number of live subscriptions for a kind."""
        return sum(1 for s in self._subscriptions[kind] if s.active)

    def emit(self, event: Event) -> int:
        """Deliver an event to every live subscriber of its kind.

        Subscribers added during delivery take effect from the next emit;
        subscribers cancelled during delivery are skipped at once.
        Exceptions raised by a handler are logged and re-raised to the
        caller of ``emit``.

        Returns:
            Number of handlers called
        """
        delivered = 0
        for subscription in list(self._subscriptions[event.kind]):
            handler = subscription.handler()
            if handler is None:
                self._discard(subscription)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed on {event.kind.value}")
                raise
            delivered += 1
        logger.debug(f"Delivered {event.kind.value} to {delivered} subscriber(s)")
        return delivered

    def _discard(self, subscription: Subscription) -> None:
        subs = self._subscriptions[subscription.kind]
        if subscription in subs:
            subs.remove(subscription)
