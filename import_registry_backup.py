#!/usr/bin/env python3
"""
Load a registry backup (the JSON array served by /api/export) into the
configured history store.

Rules:
- Append-only: entries whose id already exists are skipped, never patched.
- Entries missing 'documentDate' get their 'timestamp'.
- Supports --dry-run and --limit.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Optional

from specver.core.config import settings
from specver.models.history import HistoryEntry
from specver.services.entry_store import validate_entry
from specver.services.errors import DuplicateEntry, EntryValidationError
from specver.services.registry import RegistryService, build_store


def import_backup(registry: RegistryService, rows: list[dict], dry_run: bool = False,
                  limit: Optional[int] = None) -> dict:
    existing = {e.id for e in registry.entries()}
    scanned = imported = skipped = invalid = 0

    for row in rows:
        scanned += 1
        row = dict(row)
        row.setdefault("documentDate", row.get("timestamp"))
        try:
            entry = HistoryEntry.model_validate(row)
        except ValueError as e:
            print(f"[SKIP] unreadable row #{scanned}: {e}")
            invalid += 1
            continue

        if entry.id in existing:
            skipped += 1
            continue  # already imported

        if dry_run:
            try:
                validate_entry(entry)
            except EntryValidationError as e:
                print(f"[SKIP] {entry.id}: {e}")
                invalid += 1
                continue
            print(f"[DRY] would import {entry.id} ({entry.object_id} v{entry.version})")
            existing.add(entry.id)
            imported += 1
        else:
            try:
                registry.append(entry)
            except DuplicateEntry:
                skipped += 1
                continue
            except EntryValidationError as e:
                print(f"[SKIP] {entry.id}: {e}")
                invalid += 1
                continue
            existing.add(entry.id)
            imported += 1

        if limit and imported >= limit:
            break

    return {"scanned": scanned, "imported": imported, "skipped": skipped, "invalid": invalid}


if __name__ == "__main__":
    import argparse
    ap = argparse.ArgumentParser()
    ap.add_argument("backup", type=Path, help="specver_backup_<date>.json")
    ap.add_argument("--dry-run", action="store_true")
    ap.add_argument("--limit", type=int)
    args = ap.parse_args()

    store = build_store(settings)
    store.open()
    try:
        if settings.auto_init and not args.dry_run:
            store.initialize()
        rows = json.loads(args.backup.read_text(encoding="utf-8"))
        counts = import_backup(RegistryService(store), rows, dry_run=args.dry_run, limit=args.limit)
    finally:
        store.close()
    print(", ".join(f"{k}={v}" for k, v in counts.items()))
