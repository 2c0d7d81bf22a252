"""Offline-first sales capture and sync.

Sales are always written locally first. Each record is kept in its
category's local list and queued for replay against the remote tables.
Sync happens when connectivity returns.

Usage:
    from arthub.offline import LocalStore, SyncQueue, OfflineSaleRecorder

    store = LocalStore(FileStoragePort("~/.arthub/offline_storage.json"))
    queue = SyncQueue(store)

    # Record a gift sale offline
    sale = OfflineSaleRecorder("gift", store, queue).record(
        {"item": "Mug", "quantity": 2, "bpx": 1000, "spx": 1500}
    )

    # Sync when connected
    reconciler = SyncReconciler(["gift"], store, queue, remote)
    reconciler.sync_pending()
"""
from arthub.offline.storage import (
    LocalStore,
    FileStoragePort,
    MemoryStoragePort,
    StoragePort,
)
from arthub.offline.models import (
    SaleCategory,
    CategorySpec,
    CATEGORY_SPECS,
    get_spec,
)
from arthub.offline.queue import SyncQueue
from arthub.offline.recorder import OfflineSaleRecorder
from arthub.offline.remote import (
    InsertResult,
    RemoteDataService,
    SupabaseRestClient,
)
from arthub.offline.sync import SyncReconciler
from arthub.offline.observable import Observable
from arthub.offline.network import (
    NetworkStatusObserver,
    is_connected,
    host_probe,
)
from arthub.offline.sales import (
    OfflineSalesBook,
    build_books,
    open_store,
)
from arthub.offline.reconnect import (
    ReconnectHandler,
    handle_reconnection,
    detect_inconsistencies,
    get_sync_status,
)
from arthub.offline.cache import CachedResponse, ResponseCache

__all__ = [
    # Storage
    "LocalStore",
    "FileStoragePort",
    "MemoryStoragePort",
    "StoragePort",
    # Categories
    "SaleCategory",
    "CategorySpec",
    "CATEGORY_SPECS",
    "get_spec",
    # Queue and recording
    "SyncQueue",
    "OfflineSaleRecorder",
    # Remote and sync
    "InsertResult",
    "RemoteDataService",
    "SupabaseRestClient",
    "SyncReconciler",
    # Connectivity
    "Observable",
    "NetworkStatusObserver",
    "is_connected",
    "host_probe",
    # Books
    "OfflineSalesBook",
    "build_books",
    "open_store",
    # Reconnection
    "ReconnectHandler",
    "handle_reconnection",
    "detect_inconsistencies",
    "get_sync_status",
    # Cache
    "CachedResponse",
    "ResponseCache",
]
