"""Core subpackage for arthub receipt primitives and errors.

Exports all from receipt.py and errors.py.
"""
from .receipt import dual_hash, emit_receipt, utc_now_iso, StopRule
from .errors import OfflineError, StorageWriteError, RemoteError

__all__ = [
    "dual_hash",
    "emit_receipt",
    "utc_now_iso",
    "StopRule",
    "OfflineError",
    "StorageWriteError",
    "RemoteError",
]
