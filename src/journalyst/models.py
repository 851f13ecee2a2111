"""Data model for journal entries and the open-detail activity."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

OPEN_DETAIL_ACTIVITY_TYPE = "com.raywenderlich.EntryOpenDetailActivityType"
OPEN_DETAIL_ID_KEY = "entryID"

TITLE_FORMAT = "%b %d %Y, %I:%M"


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def generate_entry_id() -> str:
    """Generate an opaque entry ID (uppercase UUID4)."""
    return str(uuid.uuid4()).upper()


def format_timestamp(dt: datetime) -> str:
    """Format datetime as ISO 8601 with timezone."""
    return dt.isoformat(timespec='milliseconds')


def parse_timestamp(s: str) -> datetime:
    """Parse ISO 8601 timestamp string."""
    return datetime.fromisoformat(s)


@dataclass(eq=False)
class Entry:
    """A single journal record.

    ``id`` and ``date_created`` are fixed at creation. Equality compares
    content only, so two entries with different ids can compare equal;
    use ``same_identity`` (or compare ``id``) to ask whether two values
    are the same logical entry.
    """
    log: Optional[str] = None
    images: list[bytes] = field(default_factory=list)
    is_favorite: bool = False
    id: str = field(default_factory=generate_entry_id)
    date_created: datetime = field(default_factory=utc_now)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return (
            self.date_created == other.date_created
            and (self.log or "") == (other.log or "")
            and self.images == other.images
            and self.is_favorite == other.is_favorite
        )

    def __hash__(self) -> int:
        return hash((self.date_created, self.log or ""))

    def same_identity(self, other: Entry) -> bool:
        """True if both values describe the same logical entry."""
        return self.id == other.id

    def copy(self) -> Entry:
        """Return an independent copy sharing id and creation date."""
        return Entry(
            log=self.log,
            images=list(self.images),
            is_favorite=self.is_favorite,
            id=self.id,
            date_created=self.date_created,
        )

    @property
    def title(self) -> str:
        """Creation date formatted for a detail header."""
        return self.date_created.strftime(TITLE_FORMAT)

    def open_detail_activity(self) -> dict[str, Any]:
        """Activity payload asking a new window to show this entry."""
        return {
            "activity_type": OPEN_DETAIL_ACTIVITY_TYPE,
            "user_info": {OPEN_DETAIL_ID_KEY: self.id},
        }

    def to_dict(self) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "date_created": format_timestamp(self.date_created),
            "log": self.log,
            "image_count": len(self.images),
            "is_favorite": self.is_favorite,
            "title": self.title,
        }


def activity_entry_id(activity: dict[str, Any]) -> Optional[str]:
    """Extract the entry ID from an open-detail activity, if it is one."""
    if activity.get("activity_type") != OPEN_DETAIL_ACTIVITY_TYPE:
        return None
    user_info = activity.get("user_info") or {}
    entry_id = user_info.get(OPEN_DETAIL_ID_KEY)
    if not isinstance(entry_id, str):
        return None
    return entry_id
