# specver/services/errors.py
"""Error taxonomy shared by every entry-store backend and the HTTP layer."""


class StoreError(Exception):
    """Base for everything an entry store can raise."""


class EntryValidationError(StoreError):
    """Missing/empty required field; rejected before the store is touched."""


class DuplicateEntry(EntryValidationError):
    def __init__(self, entry_id: str):
        super().__init__(f"Entry {entry_id} already exists")
        self.entry_id = entry_id


class EntryNotFound(StoreError):
    def __init__(self, entry_id: str):
        super().__init__(f"Entry {entry_id} not found")
        self.entry_id = entry_id


class StoreUnavailable(StoreError):
    """Transport/configuration failure. Retryable by the caller."""


class SchemaMissing(StoreUnavailable):
    """Store was never initialised. Reads treat this as empty; writes fail."""
