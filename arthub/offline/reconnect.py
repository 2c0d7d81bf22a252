"""Reconnection handling and consistency checks.

Manages the transition from offline to online: every book gets one sync
pass when the observer reports a reconnect. Also detects records whose
local list and queue entry have drifted apart.
"""
from typing import Callable, Iterable

from arthub.core.receipt import emit_receipt
from arthub.offline.models import CATEGORY_SPECS
from arthub.offline.network import NetworkStatusObserver
from arthub.offline.queue import SyncQueue, entry_payload
from arthub.offline.sales import OfflineSalesBook
from arthub.offline.storage import LocalStore


class InconsistencyType:
    """Ways a local list and the sync queue can disagree."""
    UNQUEUED_RECORD = "unqueued_record"  # In a local list, never queued
    ORPHANED_ENTRY = "orphaned_entry"  # Queued, but gone from its local list


def handle_reconnection(
    books: Iterable[OfflineSalesBook],
    observer: NetworkStatusObserver | None = None,
    tenant_id: str = "default",
) -> dict:
    """Run one sync pass per book.

    Args:
        books: Books to sync
        observer: If given and offline, nothing is synced
        tenant_id: Tenant reconnecting

    Returns:
        Reconnection status with per-book sync results. status is "synced",
        "partial" (failures, or some books without a remote) or
        "not_configured" (no book has a remote)
    """
    if observer is not None and observer.is_offline:
        return {
            "status": "still_offline",
            "connected": False,
        }

    results = {book.name: book.sync() for book in books}

    synced = sum(r.get("synced_count", 0) for r in results.values())
    failed = sum(r.get("failed_count", 0) for r in results.values())
    not_configured = sorted(n for n, r in results.items() if r.get("reason") == "not_configured")

    if not_configured and len(not_configured) == len(results):
        status = "not_configured"
    elif failed or not_configured:
        status = "partial"
    else:
        status = "synced"

    emit_receipt("offline_reconnection", {
        "tenant_id": tenant_id,
        "status": status,
        "synced_count": synced,
        "failed_count": failed,
        "books": sorted(results),
        "not_configured": not_configured,
    })

    return {
        "status": status,
        "connected": True,
        "synced_count": synced,
        "failed_count": failed,
        "not_configured": not_configured,
        "results": results,
    }


class ReconnectHandler:
    """Syncs books whenever the observer goes from offline to online."""

    def __init__(
        self,
        observer: NetworkStatusObserver,
        books: Iterable[OfflineSalesBook],
        tenant_id: str = "default",
    ):
        self.observer = observer
        self.books = list(books)
        self.tenant_id = tenant_id
        self.last_result: dict | None = None
        self._unsubscribe: Callable[[], None] | None = observer.subscribe(self._on_change)

    def _on_change(self, online: bool) -> None:
        if online:
            self.last_result = handle_reconnection(self.books, self.observer, self.tenant_id)

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def close(self) -> None:
        """Stop listening. Safe to call twice."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


def detect_inconsistencies(store: LocalStore, queue: SyncQueue) -> list[dict]:
    """Compare every category's local list with its queue entries.

    Returns:
        List of inconsistency descriptors
    """
    found = []
    entries = queue.list_pending()

    for spec in CATEGORY_SPECS.values():
        sales = store.get(spec.storage_key, [])
        if not isinstance(sales, list):
            sales = []
        local_ids = {s.get("id") for s in sales if isinstance(s, dict)}
        queued = {
            entry_payload(e).get("id"): e.get("id")
            for e in entries
            if e.get("endpoint") == spec.endpoint
        }

        for sale_id in sorted(i for i in local_ids - queued.keys() if i is not None):
            found.append({
                "type": InconsistencyType.UNQUEUED_RECORD,
                "category": spec.category.value,
                "sale_id": sale_id,
                "severity": "error",
            })

        for sale_id in sorted(i for i in queued.keys() - local_ids if i is not None):
            found.append({
                "type": InconsistencyType.ORPHANED_ENTRY,
                "category": spec.category.value,
                "sale_id": sale_id,
                "local_sequence_id": queued[sale_id],
                "severity": "warning",
            })

    return found


def get_sync_status(
    store: LocalStore,
    queue: SyncQueue,
    observer: NetworkStatusObserver | None = None,
) -> dict:
    """Pending counts per category, queue size and connectivity."""
    local_counts = {}
    queued_counts = {}
    for spec in CATEGORY_SPECS.values():
        sales = store.get(spec.storage_key, [])
        local_counts[spec.category.value] = len(sales) if isinstance(sales, list) else 0
        queued_counts[spec.category.value] = len(queue.pending_for(spec.endpoint))

    return {
        "local_counts": local_counts,
        "queued_counts": queued_counts,
        "queue_size": queue.size(),
        "connected": observer.is_online if observer is not None else None,
    }
