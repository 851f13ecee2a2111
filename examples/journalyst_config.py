"""Journalyst Configuration - Advanced Python Example

Copy to your application directory as journalyst_config.py.

Convention:
- CONFIG dict for static configuration (same structure as TOML)
- hook_list_changed(entries) runs after every change to the entry list
- hook_entry_changed(entry) runs after an entry's content changes
"""

# =============================================================================
# Static Configuration (same structure as TOML)
# =============================================================================

CONFIG = {
    "store": {
        "seed_entry": True,
    },
    "reconcile": {
        "detect_moves": True,
    },
    "logging": {
        "level": "INFO",
        "file": "journalyst.log",
    },
    "preferences": {
        "name": "Ray",
        "signature": True,
        "color_override": False,
    },
}


# =============================================================================
# Hooks - Called synchronously after store mutations
# =============================================================================

def hook_list_changed(entries):
    """Called with the full entry snapshot after add, update or remove."""
    favorites = sum(1 for e in entries if e.is_favorite)
    print(f"{len(entries)} entries, {favorites} favorite(s)")


def hook_entry_changed(entry):
    """Called with the new value of an entry whose content changed."""
    print(f"Entry {entry.id} now has {len(entry.images)} image(s)")
