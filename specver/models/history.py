"""
Version-history data models for the SpecVer registry.

A HistoryEntry is one immutable record in the append-only log; only its
``uploaded`` flag may be toggled after creation. A DocumentSummary is the
derived "latest state" of one functional object and is never stored.

Field aliases are the wire names used by the registry UI and the
``history_entries`` backups (``RICEFWID``, ``FSNAME`` ...). Models accept
either the alias or the Python field name.
"""
from __future__ import annotations

import re
import time
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    return int(time.time() * 1000)


def new_entry_id() -> str:
    return uuid.uuid4().hex


def normalize_object_id(raw: str) -> str:
    """Canonical RICEFW id for a newly registered object: upper case, blanks -> '_'."""
    return re.sub(r"\s+", "_", raw.strip()).upper()


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class HistoryEntry(_WireModel):
    """One version record of a functional document"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    object_id: str = Field(alias="RICEFWID")
    document_name: str = Field(alias="FSNAME")
    transaction_code: str = Field("", alias="TransactionID")
    region: str = Field("", alias="Region")
    uploaded: bool = Field(False, alias="Status")  # posted to SharePoint
    version: str
    release_reference: str = Field("", alias="releaseReference")
    author: str = "Unknown"
    change_description: str = Field("", alias="changeDescription")
    logged_at: int = Field(alias="timestamp")        # epoch ms, ordering key
    document_date: int = Field(alias="documentDate")  # epoch ms, business date


class NewEntry(_WireModel):
    """Create payload; id / timestamp / documentDate are filled in when absent"""
    id: Optional[str] = None
    object_id: str = Field(alias="RICEFWID")
    document_name: str = Field(alias="FSNAME")
    transaction_code: Optional[str] = Field(None, alias="TransactionID")
    region: Optional[str] = Field(None, alias="Region")
    uploaded: bool = Field(False, alias="Status")
    version: str
    release_reference: Optional[str] = Field(None, alias="releaseReference")
    author: Optional[str] = None
    change_description: Optional[str] = Field(None, alias="changeDescription")
    logged_at: Optional[int] = Field(None, alias="timestamp")
    document_date: Optional[int] = Field(None, alias="documentDate")
    # register a new object: normalise the RICEFW id
    new_object: bool = Field(False, alias="isNewDoc")

    def build(self) -> HistoryEntry:
        ts = self.logged_at or now_ms()
        return HistoryEntry(
            id=self.id or new_entry_id(),
            object_id=normalize_object_id(self.object_id) if self.new_object else self.object_id,
            document_name=self.document_name,
            transaction_code=self.transaction_code or "",
            region=self.region or "",
            uploaded=bool(self.uploaded),
            version=self.version,
            release_reference=self.release_reference or "",
            author=self.author or "Unknown",
            change_description=self.change_description or "",
            logged_at=ts,
            document_date=self.document_date or ts,
        )


class StatusPatch(_WireModel):
    id: Optional[str] = None
    status: bool


class DocumentSummary(_WireModel):
    """Current state of one object, derived from its latest entry"""
    object_id: str = Field(alias="RICEFWID")
    document_name: str = Field(alias="FSNAME")
    transaction_code: str = Field("", alias="TransactionID")
    region: str = Field("", alias="Region")
    uploaded: bool = Field(False, alias="Status")
    current_version: str = Field(alias="currentVersion")
    last_release: str = Field("", alias="lastRelease")
    document_date: int = Field(alias="documentDate")
    last_updated: int = Field(alias="lastUpdated")
    history_count: int = Field(0, alias="historyCount")
    latest_entry_id: str = Field(alias="latestEntryId")


class ImpactLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SuggestionRequest(_WireModel):
    current_version: str = Field("", alias="currentVersion")
    change_description: str = Field("", alias="changeDescription")


class Suggestion(_WireModel):
    suggested_version: str = Field(alias="suggestedVersion")
    formal_description: str = Field(alias="formalDescription")
    impact_level: ImpactLevel = Field(alias="impactLevel")
