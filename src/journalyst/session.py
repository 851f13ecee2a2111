"""Journal session - owns the store for the lifetime of one application run."""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from .binding import ApplyFunc, EntryImagesBinding, EntryListBinding
from .config import JournalystConfig
from .events import EntryChanged, ListChanged, Subscription
from .logging import setup_logging
from .models import Entry, activity_entry_id
from .store import EntryStore

# Fixed colors used when the user turns on the entry color override
OVERRIDE_BACKGROUND = "white"
OVERRIDE_TEXT = "black"


class JournalSession:
    """Wires configuration, the entry store and its consumers together.

    Consumers receive the session (or its ``store``) explicitly; there is
    no process-wide store.
    """

    def __init__(
        self,
        config: Optional[JournalystConfig] = None,
        store: Optional[EntryStore] = None,
        configure_logging: bool = False,
    ):
        self.config = config or JournalystConfig()
        if configure_logging:
            setup_logging(level=self.config.log_level, log_file=self.config.log_file)

        if store is None:
            store = EntryStore([Entry()] if self.config.seed_entry else None)
        self.store = store
        self._hook_subscriptions: list[Subscription] = []
        self._register_hooks()
        logger.debug(f"Session started, store holds {len(self.store)} entries")

    def _register_hooks(self) -> None:
        hooks = self.config.hooks
        if "list_changed" in hooks:
            hook = hooks["list_changed"]

            def on_list_changed(event: ListChanged) -> None:
                hook(self.store.all_entries())

            self._hook_subscriptions.append(self.store.on_list_changed(on_list_changed))
        if "entry_changed" in hooks:
            hook_entry = hooks["entry_changed"]

            def on_entry_changed(event: EntryChanged) -> None:
                hook_entry(event.entry)

            self._hook_subscriptions.append(self.store.on_entry_changed(on_entry_changed))

    # ========== Bindings ==========

    def bind_entries(self, apply: ApplyFunc, owner: Optional[object] = None) -> EntryListBinding:
        """Create a binding for a list of all entries.

        The binding follows the store while ``owner`` (by default the object
        ``apply`` is bound to) is alive, whether or not the caller keeps the
        returned binding. Without an owner it follows until closed.
        """
        return EntryListBinding(self.store, apply, detect_moves=self.config.detect_moves, owner=owner)

    def bind_images(self, entry_id: str, apply: ApplyFunc, owner: Optional[object] = None) -> EntryImagesBinding:
        """Create a binding for the images of one entry."""
        return EntryImagesBinding(
            self.store, entry_id, apply, detect_moves=self.config.detect_moves, owner=owner
        )

    # ========== Activities and sharing ==========

    def restore_activity(self, activity: dict[str, Any]) -> Optional[Entry]:
        """Resolve an open-detail activity to the entry it names.

        Returns None for other activity types or entries that no longer exist.
        """
        entry_id = activity_entry_id(activity)
        if entry_id is None:
            logger.warning(f"Failed to restore from {activity!r}")
            return None
        entry = self.store.entry(entry_id)
        if entry is None:
            logger.warning(f"Activity names missing entry {entry_id}")
        return entry

    def share_text(self, entry: Entry) -> str:
        """Entry text for sharing, signed when the user asked for it."""
        text = entry.log or ""
        prefs = self.config.preferences
        if prefs.signature and prefs.name:
            text += f"\n\n -{prefs.name}"
        return text

    def entry_colors(self) -> dict[str, Optional[str]]:
        """Colors for the entry text cell; None means the platform default."""
        if self.config.preferences.color_override:
            return {"background": OVERRIDE_BACKGROUND, "text": OVERRIDE_TEXT}
        return {"background": None, "text": None}

    def close(self) -> None:
        """Release the configuration hooks."""
        for subscription in self._hook_subscriptions:
            subscription.cancel()
        self._hook_subscriptions = []

    def __enter__(self) -> JournalSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
