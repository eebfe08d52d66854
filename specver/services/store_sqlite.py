"""
SQLite entry store.

One row per HistoryEntry in ``history_entries``; ``timestamp`` and
``document_date`` are INTEGER epoch milliseconds so no timezone is involved.

The table is created by ``initialize()`` only. A database without the table
is a fresh deployment: ``scan_all`` raises SchemaMissing (read as empty by the
registry), writes raise SchemaMissing and are never silently dropped.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from specver.models.history import HistoryEntry
from specver.services.entry_store import validate_entry
from specver.services.errors import (
    DuplicateEntry, EntryNotFound, EntryValidationError, SchemaMissing, StoreUnavailable,
)

log = logging.getLogger(__name__)

_DDL = """
CREATE TABLE IF NOT EXISTS history_entries (
    id                 TEXT PRIMARY KEY,
    ricefw_id          TEXT NOT NULL,
    fs_name            TEXT NOT NULL,
    transaction_id     TEXT NOT NULL DEFAULT '',
    region             TEXT NOT NULL DEFAULT '',
    status             INTEGER NOT NULL DEFAULT 0,
    version            TEXT NOT NULL,
    release_reference  TEXT NOT NULL DEFAULT '',
    author             TEXT NOT NULL DEFAULT 'Unknown',
    change_description TEXT NOT NULL DEFAULT '',
    timestamp          INTEGER NOT NULL,
    document_date      INTEGER NOT NULL
)
"""

_COLUMNS = (
    "id, ricefw_id, fs_name, transaction_id, region, status, version, "
    "release_reference, author, change_description, timestamp, document_date"
)


def _row_to_entry(r: sqlite3.Row) -> HistoryEntry:
    return HistoryEntry(
        id=r["id"],
        object_id=r["ricefw_id"],
        document_name=r["fs_name"],
        transaction_code=r["transaction_id"] or "",
        region=r["region"] or "",
        uploaded=bool(r["status"]),
        version=r["version"],
        release_reference=r["release_reference"] or "",
        author=r["author"] or "Unknown",
        change_description=r["change_description"] or "",
        logged_at=int(r["timestamp"]),
        document_date=int(r["document_date"]),
    )


def _translate(exc: sqlite3.Error) -> StoreUnavailable:
    if "no such table" in str(exc):
        return SchemaMissing("history_entries table does not exist")
    log.error("SQLite failure: %s", exc)
    return StoreUnavailable(f"SQLite error: {exc}")


class SqliteEntryStore:
    """
    SQLite implementation of EntryStore.

    Properties
    ----------
    conn : sqlite3.Connection
        Created by ``open()`` (or lazily on first use); Row factory.

    Statements are serialised with a lock because FastAPI runs sync
    endpoints on a thread pool and the connection is shared.
    """
    name = "sqlite"

    def __init__(self, db_path: str | Path = "specver.db") -> None:
        self._db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.open()
        return self._conn

    def open(self) -> None:
        if self._conn is not None:
            return
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot open {self._db_path}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close the connection (idempotent); next access to 'conn' reopens it."""
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None

    def initialize(self) -> None:
        with self._lock:
            try:
                with self.conn:
                    self.conn.execute(_DDL)
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    def append(self, entry: HistoryEntry) -> None:
        validate_entry(entry)
        with self._lock:
            try:
                with self.conn:
                    self.conn.execute(
                        f"INSERT INTO history_entries ({_COLUMNS}) VALUES (?,?,?,?,?,?,?,?,?,?,?,?)",
                        (entry.id, entry.object_id, entry.document_name, entry.transaction_code,
                         entry.region, int(entry.uploaded), entry.version, entry.release_reference,
                         entry.author, entry.change_description, entry.logged_at, entry.document_date),
                    )
            except sqlite3.IntegrityError as exc:
                if "UNIQUE" in str(exc):
                    raise DuplicateEntry(entry.id) from exc
                raise EntryValidationError(str(exc)) from exc
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    def scan_all(self) -> List[HistoryEntry]:
        with self._lock:
            try:
                rows = self.conn.execute(f"SELECT {_COLUMNS} FROM history_entries").fetchall()
            except sqlite3.Error as exc:
                raise _translate(exc) from exc
        return [_row_to_entry(r) for r in rows]

    def patch_uploaded_flag(self, entry_id: str, value: bool) -> None:
        with self._lock:
            try:
                with self.conn:
                    cur = self.conn.execute(
                        "UPDATE history_entries SET status = ? WHERE id = ?",
                        (int(bool(value)), entry_id),
                    )
            except sqlite3.Error as exc:
                raise _translate(exc) from exc
        if cur.rowcount == 0:
            raise EntryNotFound(entry_id)
