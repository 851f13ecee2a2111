"""Configuration loading for Journalyst.

Supports three tiers:
1. Simple config via .toml or .json - most users
2. Python config via .py - power users who want change hooks
3. Constructing JournalystConfig directly - embedding applications
"""

from __future__ import annotations

import importlib.util
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None


# Hook names a Python config may define (as hook_<name> functions)
HOOK_NAMES = ("list_changed", "entry_changed")


@dataclass
class Preferences:
    """User preferences from the settings bundle."""
    name: Optional[str] = None          # name_preference
    signature: bool = False             # signature_preference: sign shared text
    color_override: bool = False        # entry_color_preference: tint the entry cell


@dataclass
class JournalystConfig:
    """Configuration for a journal session."""

    # Start each session with one empty entry
    seed_entry: bool = True

    # Report reordered items as moves rather than delete + insert
    detect_moves: bool = True

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    preferences: Preferences = field(default_factory=Preferences)

    # Hooks (populated from Python config)
    hooks: dict[str, Callable] = field(default_factory=dict)


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_python_config(path: Path) -> tuple[dict[str, Any], dict[str, Callable]]:
    """Load configuration from Python file.

    Returns:
        Tuple of (config_dict, hooks_dict)

    Convention:
        - CONFIG dict or config dict for static configuration
        - Functions named hook_list_changed / hook_entry_changed become hooks
    """
    spec = importlib.util.spec_from_file_location("journalyst_config", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load Python config from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["journalyst_config"] = module
    spec.loader.exec_module(module)

    config_dict = {}
    if hasattr(module, "CONFIG"):
        config_dict = module.CONFIG
    elif hasattr(module, "config"):
        config_dict = module.config

    hooks = {}
    for name in dir(module):
        if name.startswith("hook_"):
            hook_name = name[5:]  # Remove "hook_" prefix
            if hook_name not in HOOK_NAMES:
                raise ValueError(f"Unknown hook '{name}'. Supported: {['hook_' + h for h in HOOK_NAMES]}")
            hooks[hook_name] = getattr(module, name)

    return config_dict, hooks


def dict_to_config(data: dict[str, Any]) -> JournalystConfig:
    """Convert dictionary to JournalystConfig."""
    config = JournalystConfig()

    if "store" in data:
        store = data["store"]
        if "seed_entry" in store:
            config.seed_entry = bool(store["seed_entry"])

    if "reconcile" in data:
        rec = data["reconcile"]
        if "detect_moves" in rec:
            config.detect_moves = bool(rec["detect_moves"])

    if "logging" in data:
        log = data["logging"]
        if "level" in log:
            config.log_level = str(log["level"]).upper()
        if "file" in log:
            config.log_file = log["file"]

    if "preferences" in data:
        prefs = data["preferences"]
        config.preferences = Preferences(
            name=prefs.get("name"),
            signature=bool(prefs.get("signature", False)),
            color_override=bool(prefs.get("color_override", False)),
        )

    return config


def find_config_file(root: Path) -> Optional[Path]:
    """Find configuration file in a directory.

    Search order:
    1. journalyst_config.py (most flexible)
    2. journalyst_config.toml
    3. journalyst_config.json
    4. .journalyst.toml
    5. .journalyst.json
    """
    candidates = [
        "journalyst_config.py",
        "journalyst_config.toml",
        "journalyst_config.json",
        ".journalyst.toml",
        ".journalyst.json",
    ]

    for name in candidates:
        path = root / name
        if path.exists():
            return path

    return None


def load_config(root: Path, config_path: Optional[Path] = None) -> JournalystConfig:
    """Load session configuration.

    Args:
        root: Directory to search for a config file
        config_path: Optional explicit path to config file

    Returns:
        JournalystConfig instance
    """
    if config_path is None:
        config_path = find_config_file(root)

    if config_path is None:
        # No config file - use defaults
        return JournalystConfig()

    suffix = config_path.suffix.lower()

    if suffix == ".py":
        config_dict, hooks = load_python_config(config_path)
        config = dict_to_config(config_dict)
        config.hooks = hooks
        return config

    elif suffix == ".toml":
        return dict_to_config(load_toml_config(config_path))

    elif suffix == ".json":
        return dict_to_config(load_json_config(config_path))

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
