# specver/services/summary.py
"""
Summary projection over the history log.

``project_summaries`` folds every entry, oldest first, into a map keyed by
object id. Each fold step overwrites the object's summary with the folded
entry and bumps its history count, so the entry with the greatest
``loggedAt`` wins and the count is the number of entries for the object.

Entries sharing a ``loggedAt`` are folded in ascending id order, which makes
the result independent of the order the store returned them in.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from specver.models.history import DocumentSummary, HistoryEntry


def _fold_key(e: HistoryEntry):
    return (e.logged_at, e.id)


def project_summaries(entries: Iterable[HistoryEntry]) -> List[DocumentSummary]:
    acc: Dict[str, DocumentSummary] = {}
    for e in sorted(entries, key=_fold_key):
        prev = acc.get(e.object_id)
        acc[e.object_id] = DocumentSummary(
            object_id=e.object_id,
            document_name=e.document_name,
            transaction_code=e.transaction_code,
            region=e.region,
            uploaded=e.uploaded,
            current_version=e.version,
            last_release=e.release_reference,
            document_date=e.document_date,
            last_updated=e.logged_at,
            history_count=(prev.history_count if prev else 0) + 1,
            latest_entry_id=e.id,
        )
    # newest object first; object id keeps equal timestamps stable
    out = sorted(acc.values(), key=lambda s: s.object_id)
    out.sort(key=lambda s: s.last_updated, reverse=True)
    return out


def history_log(entries: Iterable[HistoryEntry], object_id: Optional[str] = None) -> List[HistoryEntry]:
    """Audit log, newest first; optionally only one object's entries."""
    rows = [e for e in entries if object_id is None or e.object_id == object_id]
    rows.sort(key=_fold_key, reverse=True)
    return rows


_SEARCH_FIELDS = ("document_name", "object_id", "transaction_code", "last_release")


def filter_summaries(summaries: List[DocumentSummary], term: Optional[str]) -> List[DocumentSummary]:
    """Case-insensitive match on FS name, RICEFW id, T-code or release."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(summaries)
    return [
        s for s in summaries
        if any(needle in (getattr(s, f) or "").lower() for f in _SEARCH_FIELDS)
    ]


def registry_stats(entries: Iterable[HistoryEntry]) -> dict:
    rows = list(entries)
    summaries = project_summaries(rows)
    return {
        "totalObjects": len(summaries),
        "totalEntries": len(rows),
        "uploadedObjects": sum(1 for s in summaries if s.uploaded),
    }
