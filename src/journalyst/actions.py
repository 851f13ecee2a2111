"""User action definitions wrapping the entry store.

Every editing action fetches a copy of the entry, changes the copy and
submits it back through ``EntryStore.update_entry``.
"""

from __future__ import annotations

import base64
from typing import Any

from loguru import logger

from .models import Entry
from .session import JournalSession
from .store import EntryNotFoundError, IndexOutOfRange, JournalystError

_ENTRY_ID = {
    "type": "string",
    "description": "ID of the entry to act on",
}

_IMAGE = {
    "type": "string",
    "contentEncoding": "base64",
    "description": "Image data (raw bytes or base64 text)",
}


def make_actions(session: JournalSession) -> dict[str, dict]:
    """Create action definitions for a session.

    Returns:
        Dict mapping action names to their definitions.
    """

    actions = {}

    # ========== entries ==========
    actions["new_entry"] = {
        "name": "new_entry",
        "description": "Append a new entry to the journal.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "log": {"type": "string", "description": "Initial entry text"},
            },
        },
    }

    actions["delete_entry"] = {
        "name": "delete_entry",
        "description": "Delete an entry, by position or by ID.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "index": {"type": "integer", "description": "Position in the entry list"},
                "entry_id": _ENTRY_ID,
            },
        },
    }

    actions["list_entries"] = {
        "name": "list_entries",
        "description": "List all entries in order, with the entry cell colors.",
        "inputSchema": {"type": "object", "properties": {}},
    }

    # ========== editing ==========
    actions["set_log"] = {
        "name": "set_log",
        "description": "Replace the text of an entry.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": _ENTRY_ID,
                "log": {"type": "string", "description": "New entry text"},
            },
            "required": ["entry_id", "log"],
        },
    }

    actions["toggle_favorite"] = {
        "name": "toggle_favorite",
        "description": "Add an entry to, or remove it from, the favorites.",
        "inputSchema": {
            "type": "object",
            "properties": {"entry_id": _ENTRY_ID},
            "required": ["entry_id"],
        },
    }

    # ========== images ==========
    actions["add_image"] = {
        "name": "add_image",
        "description": "Append an image to an entry.",
        "inputSchema": {
            "type": "object",
            "properties": {"entry_id": _ENTRY_ID, "image": _IMAGE},
            "required": ["entry_id", "image"],
        },
    }

    actions["insert_image"] = {
        "name": "insert_image",
        "description": "Insert an image into an entry at a position (drop target).",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": _ENTRY_ID,
                "image": _IMAGE,
                "index": {"type": "integer", "description": "Position to insert at"},
            },
            "required": ["entry_id", "image", "index"],
        },
    }

    actions["remove_image"] = {
        "name": "remove_image",
        "description": "Remove the image at a position from an entry.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": _ENTRY_ID,
                "index": {"type": "integer", "description": "Position of the image"},
            },
            "required": ["entry_id", "index"],
        },
    }

    actions["move_image"] = {
        "name": "move_image",
        "description": "Reorder an entry's images (drag within the image grid).",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": _ENTRY_ID,
                "from_index": {"type": "integer", "description": "Current position"},
                "to_index": {"type": "integer", "description": "Destination position"},
            },
            "required": ["entry_id", "from_index", "to_index"],
        },
    }

    # ========== sharing ==========
    actions["copy_entry"] = {
        "name": "copy_entry",
        "description": "Text to place on the pasteboard for an entry.",
        "inputSchema": {
            "type": "object",
            "properties": {"entry_id": _ENTRY_ID},
            "required": ["entry_id"],
        },
    }

    actions["share_entry"] = {
        "name": "share_entry",
        "description": "Text (signed per preferences) and images to share for an entry.",
        "inputSchema": {
            "type": "object",
            "properties": {"entry_id": _ENTRY_ID},
            "required": ["entry_id"],
        },
    }

    actions["open_in_new_window"] = {
        "name": "open_in_new_window",
        "description": "Activity that opens an entry's detail in a new window.",
        "inputSchema": {
            "type": "object",
            "properties": {"entry_id": _ENTRY_ID},
            "required": ["entry_id"],
        },
    }

    return actions


def _require_entry(session: JournalSession, entry_id: str) -> Entry:
    entry = session.store.entry(entry_id)
    if entry is None:
        raise EntryNotFoundError(f"No entry with ID {entry_id}")
    return entry


def _decode_image(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    raise ValueError(f"Image must be bytes or base64 text, not {type(value).__name__}")


def _int_argument(arguments: dict[str, Any], name: str) -> int:
    value = arguments[name]
    # bool is an int subclass; True is not a position
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, not {value!r}")
    return value


def _check_position(index: int, size: int, what: str, allow_end: bool = False) -> None:
    upper = size if allow_end else size - 1
    if not 0 <= index <= upper:
        raise IndexOutOfRange(f"No {what} position {index} (entry has {size} images)")


def execute_action(session: JournalSession, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Execute an action and return the result.

    Args:
        session: JournalSession instance
        name: Action name
        arguments: Action arguments

    Returns:
        Result dict with success status and data or error
    """
    store = session.store
    try:
        if name == "new_entry":
            entry = Entry(log=arguments.get("log"))
            store.add_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "index": len(store) - 1,
                "message": f"Entry {entry.id} added",
            }

        elif name == "delete_entry":
            if "entry_id" in arguments:
                index = store.index_of(arguments["entry_id"])
                if index is None:
                    raise EntryNotFoundError(f"No entry with ID {arguments['entry_id']}")
            else:
                index = _int_argument(arguments, "index")
            removed = store.remove_entry(index)
            return {
                "success": True,
                "entry_id": removed.id,
                "index": index,
                "message": f"Entry {removed.id} deleted",
            }

        elif name == "list_entries":
            entries = store.all_entries()
            return {
                "success": True,
                "count": len(entries),
                "entries": [e.to_dict() for e in entries],
                "colors": session.entry_colors(),
            }

        elif name == "set_log":
            entry = _require_entry(session, arguments["entry_id"])
            entry.log = arguments["log"]
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "message": f"Entry {entry.id} text saved",
            }

        elif name == "toggle_favorite":
            entry = _require_entry(session, arguments["entry_id"])
            entry.is_favorite = not entry.is_favorite
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "is_favorite": entry.is_favorite,
                "message": f"Entry {entry.id} {'added to' if entry.is_favorite else 'removed from'} favorites",
            }

        elif name == "add_image":
            entry = _require_entry(session, arguments["entry_id"])
            entry.images.append(_decode_image(arguments["image"]))
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "image_count": len(entry.images),
                "message": f"Image added to entry {entry.id}",
            }

        elif name == "insert_image":
            entry = _require_entry(session, arguments["entry_id"])
            index = _int_argument(arguments, "index")
            _check_position(index, len(entry.images), "image", allow_end=True)
            entry.images.insert(index, _decode_image(arguments["image"]))
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "image_count": len(entry.images),
                "message": f"Image inserted into entry {entry.id} at {index}",
            }

        elif name == "remove_image":
            entry = _require_entry(session, arguments["entry_id"])
            index = _int_argument(arguments, "index")
            _check_position(index, len(entry.images), "image")
            del entry.images[index]
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "image_count": len(entry.images),
                "message": f"Image {index} removed from entry {entry.id}",
            }

        elif name == "move_image":
            entry = _require_entry(session, arguments["entry_id"])
            source = _int_argument(arguments, "from_index")
            destination = _int_argument(arguments, "to_index")
            _check_position(source, len(entry.images), "image")
            _check_position(destination, len(entry.images), "image")
            entry.images.insert(destination, entry.images.pop(source))
            store.update_entry(entry)
            return {
                "success": True,
                "entry_id": entry.id,
                "message": f"Image moved from {source} to {destination}",
            }

        elif name == "copy_entry":
            entry = _require_entry(session, arguments["entry_id"])
            return {
                "success": True,
                "entry_id": entry.id,
                "text": entry.log or "",
            }

        elif name == "share_entry":
            entry = _require_entry(session, arguments["entry_id"])
            return {
                "success": True,
                "entry_id": entry.id,
                "text": session.share_text(entry),
                "images": [base64.b64encode(image).decode("ascii") for image in entry.images],
            }

        elif name == "open_in_new_window":
            entry = _require_entry(session, arguments["entry_id"])
            return {
                "success": True,
                "entry_id": entry.id,
                "activity": entry.open_detail_activity(),
            }

        else:
            return {
                "success": False,
                "error": f"Unknown action: {name}",
            }

    except IndexOutOfRange as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "index_out_of_range",
            "suggestion": "Use list_entries to see current positions",
        }

    except EntryNotFoundError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "entry_not_found",
            "suggestion": "The entry may have been deleted; refresh the entry list",
        }

    except JournalystError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "journal_error",
        }

    except KeyError as e:
        return {
            "success": False,
            "error": f"Missing argument: {e.args[0]}",
            "error_type": "missing_argument",
        }

    except ValueError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "invalid_argument",
        }

    except Exception as e:
        logger.exception(f"Action {name} failed")
        return {
            "success": False,
            "error": str(e),
            "error_type": "unexpected_error",
        }
