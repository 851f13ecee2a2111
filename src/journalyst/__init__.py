"""Journalyst - journal entry store with change notifications and list reconciliation."""

from .binding import EntryImagesBinding, EntryListBinding, ListBinding
from .config import JournalystConfig, Preferences, load_config
from .events import EntryChanged, EventChannel, EventKind, ListChanged, Subscription
from .models import Entry
from .reconcile import Delete, Insert, Move, ReconcileError, Update, apply_operations, reconcile
from .session import JournalSession
from .store import EntryNotFoundError, EntryStore, IndexOutOfRange, JournalystError

__version__ = "0.1.0"

__all__ = [
    "Delete",
    "Entry",
    "EntryChanged",
    "EntryImagesBinding",
    "EntryListBinding",
    "EntryNotFoundError",
    "EntryStore",
    "EventChannel",
    "EventKind",
    "IndexOutOfRange",
    "Insert",
    "JournalSession",
    "JournalystConfig",
    "JournalystError",
    "ListBinding",
    "ListChanged",
    "Move",
    "Preferences",
    "ReconcileError",
    "Subscription",
    "Update",
    "apply_operations",
    "load_config",
    "reconcile",
]
