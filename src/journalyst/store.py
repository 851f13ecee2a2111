"""In-memory entry store - the single source of truth for journal entries."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from loguru import logger

from .events import EntryChanged, EventChannel, EventKind, ListChanged, Subscription
from .models import Entry


class JournalystError(Exception):
    """Base exception for journal operations."""
    pass


class IndexOutOfRange(JournalystError, IndexError):
    """Raised when an ordinal position does not name an entry."""
    pass


class EntryNotFoundError(JournalystError, LookupError):
    """Raised when an entry ID does not name a stored entry."""
    pass


class EntryStore:
    """Ordered, in-memory collection of entries with change notifications.

    The store owns its entries. Values handed out (and carried by events)
    are copies; edits reach the store only through ``update_entry``.
    """

    def __init__(
        self,
        entries: Optional[Iterable[Entry]] = None,
        channel: Optional[EventChannel] = None,
    ):
        self.channel = channel or EventChannel()
        self._entries: list[Entry] = [e.copy() for e in entries or ()]

    def __len__(self) -> int:
        return len(self._entries)

    # ========== Reads ==========

    def all_entries(self) -> tuple[Entry, ...]:
        """Snapshot of the current entries, in order."""
        return tuple(e.copy() for e in self._entries)

    def entry(self, entry_id: str) -> Optional[Entry]:
        """Find an entry by ID, or None if absent."""
        for e in self._entries:
            if e.id == entry_id:
                return e.copy()
        return None

    def index_of(self, entry_id: str) -> Optional[int]:
        """Ordinal position of the entry with this ID, or None."""
        for index, e in enumerate(self._entries):
            if e.id == entry_id:
                return index
        return None

    # ========== Mutations ==========

    def add_entry(self, entry: Entry) -> None:
        """Append an entry and announce the list change."""
        self._entries.append(entry.copy())
        logger.debug(f"Added entry {entry.id} at position {len(self._entries) - 1}")
        self._post_list_update()

    def update_entry(self, entry: Entry) -> None:
        """Replace the stored entry with the same ID, in place.

        Nothing happens (and nothing is announced) when no entry has that ID
        or when the stored value already equals ``entry``.
        """
        index = self.index_of(entry.id)
        if index is None:
            logger.warning(f"Ignoring update for unknown entry {entry.id}")
            return
        if self._entries[index] == entry:
            logger.debug(f"Entry {entry.id} unchanged, no update posted")
            return

        self._entries[index] = entry.copy()
        logger.debug(f"Updated entry {entry.id} at position {index}")
        self._post_update(entry)
        self._post_list_update()

    def remove_entry(self, index: int) -> Entry:
        """Remove the entry at an ordinal position.

        Returns:
            The removed entry.

        Raises:
            IndexOutOfRange: If no entry exists at ``index``.
        """
        if not 0 <= index < len(self._entries):
            raise IndexOutOfRange(
                f"No entry at position {index} (store holds {len(self._entries)})"
            )
        removed = self._entries.pop(index)
        logger.debug(f"Removed entry {removed.id} from position {index}")
        self._post_list_update()
        return removed

    # ========== Subscriptions ==========

    def on_list_changed(
        self,
        handler: Callable[[ListChanged], None],
        owner: Optional[object] = None,
        weak: bool = True,
    ) -> Subscription:
        return self.channel.subscribe(EventKind.LIST_CHANGED, handler, owner=owner, weak=weak)

    def on_entry_changed(
        self,
        handler: Callable[[EntryChanged], None],
        owner: Optional[object] = None,
        weak: bool = True,
    ) -> Subscription:
        return self.channel.subscribe(EventKind.ENTRY_CHANGED, handler, owner=owner, weak=weak)

    def _post_list_update(self) -> None:
        self.channel.emit(ListChanged())

    def _post_update(self, entry: Entry) -> None:
        self.channel.emit(EntryChanged(entry.copy()))
