"""arthub: offline-first sales capture and sync for Point Art Hub.

Public API:
- Core: dual_hash, emit_receipt, StopRule
- Errors: StorageWriteError, RemoteError
- Config: SyncConfig
"""
from .core import RemoteError, StopRule, StorageWriteError, dual_hash, emit_receipt
from .config import SyncConfig

__version__ = "1.0.0"

__all__ = [
    # Core
    "dual_hash",
    "emit_receipt",
    "StopRule",
    # Errors
    "StorageWriteError",
    "RemoteError",
    # Config
    "SyncConfig",
]
