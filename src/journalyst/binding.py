"""View bindings - keep a displayed list in step with the entry store.

A binding owns the snapshot its consumer last rendered. Each refresh
reconciles that snapshot against the source and hands the consumer only
the operations it needs to apply.
"""

from __future__ import annotations

import inspect
import weakref
from typing import Any, Callable, Hashable, Optional, Sequence

from loguru import logger

from .events import EntryChanged, ListChanged, Subscription, holds_owner
from .models import Entry
from .reconcile import KeyFunc, Operation, reconcile
from .store import EntryStore

ApplyFunc = Callable[[list[Operation]], None]


def _entry_key(entry: Entry) -> Hashable:
    return entry.id


def _value_key(item: Any) -> Hashable:
    return item


def _consumer(apply: ApplyFunc, owner: Optional[object]) -> Optional[object]:
    return owner if owner is not None else getattr(apply, "__self__", None)


class ListBinding:
    """Reconciles a source sequence against the last rendered snapshot.

    Selection is tracked by key, so it survives inserts, deletes and moves
    around the selected item.

    ``owner`` is the consuming view; it defaults to the object ``apply`` is
    bound to. A bound ``apply`` of the owner is held weakly, so the binding
    never keeps its view alive.
    """

    def __init__(
        self,
        source: Callable[[], Sequence[Any]],
        apply: ApplyFunc,
        key: Optional[KeyFunc] = None,
        detect_moves: bool = True,
        owner: Optional[object] = None,
    ):
        owner = _consumer(apply, owner)
        if owner is not None and holds_owner(apply, owner, weak=True):
            raise ValueError("apply references its owner and would keep it alive; pass a bound method of the owner")
        self._source = source
        if owner is not None and inspect.ismethod(apply) and apply.__self__ is owner:
            self._apply_ref: Callable[[], Optional[ApplyFunc]] = weakref.WeakMethod(apply)
        else:
            self._apply_ref = lambda: apply
        self._key = key or _value_key
        self.detect_moves = detect_moves
        self._previous: tuple = ()
        self._selected_key: Optional[Hashable] = None
        self._subscription: Optional[Subscription] = None

    @property
    def snapshot(self) -> tuple:
        """Items as last handed to the consumer."""
        return self._previous

    @property
    def bound(self) -> bool:
        """Whether store events still reach this binding."""
        return self._subscription is not None and self._subscription.active

    def refresh(self) -> list[Operation]:
        """Bring the consumer up to date with the source.

        Returns:
            The operations applied (empty when nothing changed).
        """
        current = tuple(self._source())
        operations = reconcile(self._previous, current, key=self._key, detect_moves=self.detect_moves)
        # Commit before applying: apply may change the source and refresh again.
        old_index = self.selected_index
        self._previous = current
        self._restore_selection(old_index)
        if operations:
            apply = self._apply_ref()
            if apply is not None:
                apply(operations)
        return operations

    def close(self) -> None:
        """Stop following the store."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ========== Selection ==========

    @property
    def selected_key(self) -> Optional[Hashable]:
        return self._selected_key

    @property
    def selected_index(self) -> Optional[int]:
        """Position of the selected item in the snapshot, or None."""
        if self._selected_key is None:
            return None
        return self._index_of(self._selected_key)

    @property
    def selected_item(self) -> Optional[Any]:
        index = self.selected_index
        return None if index is None else self._previous[index]

    def select(self, key: Optional[Hashable]) -> None:
        """Select the item with ``key`` (None clears the selection).

        Raises:
            KeyError: If no item in the snapshot has that key.
        """
        if key is not None and self._index_of(key) is None:
            raise KeyError(key)
        self._selected_key = key

    def select_index(self, index: int) -> None:
        self.select(self._key(self._previous[index]))

    def previous_key(self) -> Optional[Hashable]:
        """Key of the item before the selection, if any."""
        index = self.selected_index
        if index is None or index == 0:
            return None
        return self._key(self._previous[index - 1])

    def next_key(self) -> Optional[Hashable]:
        """Key of the item after the selection, if any."""
        index = self.selected_index
        if index is None or index >= len(self._previous) - 1:
            return None
        return self._key(self._previous[index + 1])

    def _index_of(self, key: Hashable) -> Optional[int]:
        for index, item in enumerate(self._previous):
            if self._key(item) == key:
                return index
        return None

    def _restore_selection(self, old_index: Optional[int]) -> None:
        if self._selected_key is None or self.selected_index is not None:
            return
        # Selected item is gone: fall back to whatever now sits in its slot.
        if not self._previous or old_index is None:
            self._selected_key = None
        else:
            self._selected_key = self._key(self._previous[min(old_index, len(self._previous) - 1)])
        logger.debug(f"Selection moved to {self._selected_key!r}")


class EntryListBinding(ListBinding):
    """All entries of a store, keyed by entry ID, refreshed on list changes.

    The store keeps the binding alive for as long as its owner lives, or
    until ``close()`` when there is no owner.
    """

    def __init__(
        self,
        store: EntryStore,
        apply: ApplyFunc,
        detect_moves: bool = True,
        owner: Optional[object] = None,
    ):
        owner = _consumer(apply, owner)
        super().__init__(store.all_entries, apply, key=_entry_key, detect_moves=detect_moves, owner=owner)
        self.store = store
        self._subscription = store.on_list_changed(self._handle_list_changed, owner=owner, weak=False)
        self.refresh()

    def _handle_list_changed(self, event: ListChanged) -> None:
        self.refresh()


class EntryImagesBinding(ListBinding):
    """Images of one entry, matched by value, refreshed when that entry changes."""

    def __init__(
        self,
        store: EntryStore,
        entry_id: str,
        apply: ApplyFunc,
        detect_moves: bool = True,
        owner: Optional[object] = None,
    ):
        owner = _consumer(apply, owner)
        super().__init__(self._images, apply, detect_moves=detect_moves, owner=owner)
        self.store = store
        self.entry_id = entry_id
        self._subscription = store.on_entry_changed(self._handle_entry_changed, owner=owner, weak=False)
        self.refresh()

    def _images(self) -> list[bytes]:
        entry = self.store.entry(self.entry_id)
        return entry.images if entry is not None else []

    def _handle_entry_changed(self, event: EntryChanged) -> None:
        if event.entry.id == self.entry_id:
            self.refresh()
