"""
Firestore entry store.

Backed by one Firestore (Native mode) collection, ``history_entries`` by
default, with one document per HistoryEntry keyed by the entry id. Documents
hold the wire shape of the entry (``RICEFWID``, ``FSNAME``, ``Status`` ...).

Notes
-----
• Firestore has no schema, so a fresh project is simply an empty collection;
  SchemaMissing never comes out of this backend.
• ``append`` uses ``DocumentReference.create`` which fails server-side when
  the id exists, so two writers cannot both insert the same id.
• ``patch_uploaded_flag`` is a single-field ``update``; it fails with NotFound
  for an unknown id instead of creating a stub document.
• A stored document that no longer parses as a HistoryEntry fails the scan
  with StoreUnavailable naming the document id.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from google.api_core import exceptions as gexc  # type: ignore
from google.auth import exceptions as auth_exc  # type: ignore
from google.cloud import firestore  # type: ignore
from pydantic import ValidationError

from specver.models.history import HistoryEntry
from specver.services.entry_store import validate_entry
from specver.services.errors import DuplicateEntry, EntryNotFound, StoreUnavailable
from specver.services.gcp_clients import make_firestore_client

log = logging.getLogger(__name__)


class FirestoreEntryStore:
    name = "firestore"

    def __init__(self, collection: str = "history_entries", project: Optional[str] = None,
                 client: Optional[firestore.Client] = None):
        self._collection_name = collection
        self._project = project
        self._client = client
        self._owns_client = client is None

    def open(self) -> None:
        if self._client is not None:
            return
        try:
            self._client = make_firestore_client(self._project)
        except auth_exc.DefaultCredentialsError as exc:
            raise StoreUnavailable(f"Firestore credentials not configured: {exc}") from exc

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def initialize(self) -> None:
        # collections appear on first write
        pass

    @property
    def _col(self):
        if self._client is None:
            self.open()
        return self._client.collection(self._collection_name)

    def append(self, entry: HistoryEntry) -> None:
        validate_entry(entry)
        try:
            self._col.document(entry.id).create(entry.to_wire())
        except gexc.AlreadyExists as exc:
            raise DuplicateEntry(entry.id) from exc
        except gexc.GoogleAPICallError as exc:
            log.exception("Firestore append failed")
            raise StoreUnavailable(f"Firestore error: {exc.message}") from exc

    def scan_all(self) -> List[HistoryEntry]:
        try:
            snaps = list(self._col.stream())
        except gexc.GoogleAPICallError as exc:
            log.exception("Firestore scan failed")
            raise StoreUnavailable(f"Firestore error: {exc.message}") from exc
        out: List[HistoryEntry] = []
        for s in snaps:
            d = s.to_dict() or {}
            d.setdefault("id", s.id)
            d.setdefault("documentDate", d.get("timestamp"))
            try:
                out.append(HistoryEntry.model_validate(d))
            except ValidationError as exc:
                log.exception(f"Malformed history document {s.id}")
                raise StoreUnavailable(f"Malformed entry {s.id}: {exc.error_count()} invalid field(s)") from exc
        return out

    def patch_uploaded_flag(self, entry_id: str, value: bool) -> None:
        try:
            self._col.document(entry_id).update({"Status": bool(value)})
        except gexc.NotFound as exc:
            raise EntryNotFound(entry_id) from exc
        except gexc.GoogleAPICallError as exc:
            log.exception("Firestore patch failed")
            raise StoreUnavailable(f"Firestore error: {exc.message}") from exc
