"""
Entry store contract for the SpecVer registry.

The history log is append-only: entries are inserted once and never
deleted. The single allowed mutation is toggling ``uploaded`` on one entry.

Backends
--------
• InMemoryEntryStore  — tests / local dev
• SqliteEntryStore    — ``history_entries`` table (services/store_sqlite.py)
• FirestoreEntryStore — one document per entry (services/store_firestore.py)

Every backend runs the same ``validate_entry`` before writing, and raises
only the exceptions from services/errors.py.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Protocol

from specver.models.history import HistoryEntry
from specver.services.errors import (
    DuplicateEntry, EntryNotFound, EntryValidationError, SchemaMissing,
)

log = logging.getLogger(__name__)

_REQUIRED = ("id", "object_id", "document_name", "version")


def validate_entry(entry: HistoryEntry) -> None:
    missing = [f for f in _REQUIRED if not str(getattr(entry, f) or "").strip()]
    if missing:
        raise EntryValidationError(f"Missing required field(s): {', '.join(missing)}")


class EntryStore(Protocol):
    """
    Read/write contract for the version-history log.

    Methods
    -------
    append(entry) -> None
        Insert a new entry. DuplicateEntry / EntryValidationError on bad input.
    scan_all() -> list[HistoryEntry]
        Every stored entry, unspecified order. SchemaMissing if never initialised.
    patch_uploaded_flag(entry_id, value) -> None
        Set ``uploaded`` on one entry. EntryNotFound if the id is unknown.
    """
    name: str

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def initialize(self) -> None:
        ...

    def append(self, entry: HistoryEntry) -> None:
        ...

    def scan_all(self) -> List[HistoryEntry]:
        ...

    def patch_uploaded_flag(self, entry_id: str, value: bool) -> None:
        ...


class InMemoryEntryStore:
    """Dict-backed store. ``initialized=False`` mimics a fresh deployment."""
    name = "memory"

    def __init__(self, initialized: bool = True):
        self._entries: Dict[str, HistoryEntry] = {}
        self._initialized = initialized
        self._lock = threading.Lock()

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def initialize(self) -> None:
        self._initialized = True

    def append(self, entry: HistoryEntry) -> None:
        validate_entry(entry)
        with self._lock:
            if not self._initialized:
                raise SchemaMissing("history store has not been initialised")
            if entry.id in self._entries:
                raise DuplicateEntry(entry.id)
            self._entries[entry.id] = entry

    def scan_all(self) -> List[HistoryEntry]:
        with self._lock:
            if not self._initialized:
                raise SchemaMissing("history store has not been initialised")
            return list(self._entries.values())

    def patch_uploaded_flag(self, entry_id: str, value: bool) -> None:
        with self._lock:
            if not self._initialized:
                raise SchemaMissing("history store has not been initialised")
            cur = self._entries.get(entry_id)
            if cur is None:
                raise EntryNotFound(entry_id)
            # entries are frozen; swap in a copy with the one field changed
            self._entries[entry_id] = cur.model_copy(update={"uploaded": bool(value)})
