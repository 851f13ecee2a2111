"""Shared pytest fixtures for journalyst tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
from loguru import logger

from journalyst.models import Entry
from journalyst.reconcile import apply_operations
from journalyst.store import EntryStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_entry():
    """Factory for entries with distinct, fixed creation times."""
    counter = {"n": 0}

    def _make(log=None, images=None, is_favorite=False):
        counter["n"] += 1
        return Entry(
            log=log,
            images=list(images or []),
            is_favorite=is_favorite,
            date_created=datetime(2020, 1, 1, 12, counter["n"], tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def abc(make_entry):
    """Three distinct entries A, B, C."""
    return make_entry("A"), make_entry("B"), make_entry("C")


@pytest.fixture
def store():
    """An empty store."""
    return EntryStore()


@pytest.fixture
def abc_store(abc):
    """A store holding [A, B, C]."""
    return EntryStore(abc)


@pytest.fixture
def recorder():
    """Collects events delivered to it, in order."""

    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

        def kinds(self):
            return [e.kind for e in self.events]

    return Recorder()


@pytest.fixture
def rendered():
    """A stand-in display surface that applies operations to its rows."""

    class Rendered:
        def __init__(self):
            self.rows = []
            self.batches = []

        def __call__(self, operations):
            self.batches.append(list(operations))
            self.rows = apply_operations(self.rows, operations)

    return Rendered()


@pytest.fixture
def log_messages():
    """Capture loguru output as a list of formatted records."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)
