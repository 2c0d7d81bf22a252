"""Error taxonomy for the offline sales subsystem.

StorageWriteError propagates to the caller of a recorder.
RemoteError is caught per queue entry inside the reconciler.
Invariant violations use StopRule from core.receipt.
"""


class OfflineError(Exception):
    """Base class for offline subsystem errors."""
    pass


class StorageWriteError(OfflineError):
    """Local write failed (quota, corruption, unserializable value)."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not write '{key}': {reason}")
        self.key = key
        self.reason = reason


class RemoteError(OfflineError):
    """Remote data service rejected or failed an operation."""

    def __init__(self, message: str, status: int | None = None, table: str | None = None):
        super().__init__(message)
        self.status = status
        self.table = table
