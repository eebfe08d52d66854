"""
Registry service: the one place routes and scripts talk to.

Holds an explicitly constructed entry store (no process-wide handle) and
recomputes the summary projection from a fresh scan on every read.
"""
from __future__ import annotations

import datetime as _dt
import logging
from typing import List, Optional

from specver.core.config import Settings
from specver.models.history import DocumentSummary, HistoryEntry, NewEntry
from specver.services.entry_store import EntryStore, InMemoryEntryStore
from specver.services.errors import SchemaMissing
from specver.services.summary import (
    filter_summaries, history_log, project_summaries, registry_stats,
)

log = logging.getLogger(__name__)


def build_store(s: Settings) -> EntryStore:
    """Pick the backend named by STORAGE_BACKEND."""
    if s.storage_backend == "memory":
        return InMemoryEntryStore()
    if s.storage_backend == "firestore":
        # imported lazily so sqlite/memory deployments don't need GCP libs loaded
        from specver.services.store_firestore import FirestoreEntryStore
        return FirestoreEntryStore(collection=s.firestore_collection, project=s.gcp_project)
    from specver.services.store_sqlite import SqliteEntryStore
    return SqliteEntryStore(s.db_path)


def backup_filename(today: Optional[_dt.date] = None) -> str:
    return f"specver_backup_{(today or _dt.date.today()).isoformat()}.json"


class RegistryService:
    def __init__(self, store: EntryStore):
        self.store = store

    # ───────────────────────── reads ─────────────────────────
    def entries(self) -> List[HistoryEntry]:
        try:
            return self.store.scan_all()
        except SchemaMissing:
            # fresh deployment: a valid, empty registry
            log.info("History store not initialised yet; returning empty result")
            return []

    def history(self, object_id: Optional[str] = None) -> List[HistoryEntry]:
        return history_log(self.entries(), object_id)

    def summaries(self, term: Optional[str] = None) -> List[DocumentSummary]:
        return filter_summaries(project_summaries(self.entries()), term)

    def summary_for(self, object_id: str) -> Optional[DocumentSummary]:
        return next((s for s in project_summaries(self.entries()) if s.object_id == object_id), None)

    def stats(self) -> dict:
        return registry_stats(self.entries())

    def export(self) -> List[dict]:
        return [e.to_wire() for e in self.history()]

    # ───────────────────────── writes ────────────────────────
    def add_entry(self, payload: NewEntry) -> HistoryEntry:
        entry = payload.build()
        log.info(f"Inserting entry: {entry.object_id}")
        self.store.append(entry)
        return entry

    def append(self, entry: HistoryEntry) -> None:
        self.store.append(entry)

    def set_uploaded(self, entry_id: str, value: bool) -> None:
        log.info(f"Setting uploaded={bool(value)} on entry {entry_id}")
        self.store.patch_uploaded_flag(entry_id, value)
