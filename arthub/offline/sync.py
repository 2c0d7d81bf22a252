"""Sync reconciler for pushing the local queue to the remote service.

Sync process:
1. Skip if every governed local list is empty
2. Raise the syncing flag
3. Replay queued entries oldest first, one at a time; entries that are
   malformed or name no known category are skipped and left queued
4. Remove each entry whose insert succeeded, keep the rest
5. Clear the governed local lists according to the clear policy
6. Drop the syncing flag, whatever happened

With the default "unconditional" policy the local lists are cleared even
when some entries failed and stay queued. The pending view can then
under-report; the queue still holds the work. "synced_only" keeps the
records whose entries are still queued.
"""
import requests

from arthub.core.constants import (
    CLEAR_POLICIES,
    CLEAR_SYNCED_ONLY,
    CLEAR_UNCONDITIONAL,
    IDEMPOTENCY_COLUMN,
)
from arthub.core.errors import RemoteError
from arthub.core.receipt import StopRule, emit_receipt
from arthub.offline.models import CategorySpec, SaleCategory, get_spec, spec_for_entry
from arthub.offline.observable import Observable
from arthub.offline.queue import SyncQueue, entry_payload
from arthub.offline.remote import RemoteDataService
from arthub.offline.storage import LocalStore


class SyncReconciler:
    """Drains the sync queue for a fixed set of sale categories.

    Attributes:
        specs: Categories this reconciler governs
        is_syncing: Observable flag, True while a pass is running
    """

    def __init__(
        self,
        categories: list[SaleCategory | str],
        store: LocalStore,
        queue: SyncQueue,
        remote: RemoteDataService,
        clear_policy: str = CLEAR_UNCONDITIONAL,
        idempotent_replay: bool = False,
    ):
        if clear_policy not in CLEAR_POLICIES:
            raise ValueError(f"Unknown clear policy: {clear_policy!r}")
        self.specs: list[CategorySpec] = [get_spec(c) for c in categories]
        self.store = store
        self.queue = queue
        self.remote = remote
        self.clear_policy = clear_policy
        self.idempotent_replay = idempotent_replay
        self.is_syncing: Observable[bool] = Observable(False)

    @property
    def categories(self) -> set[SaleCategory]:
        return {spec.category for spec in self.specs}

    def local_count(self) -> int:
        """Records waiting in the governed local lists."""
        total = 0
        for spec in self.specs:
            sales = self.store.get(spec.storage_key, [])
            total += len(sales) if isinstance(sales, list) else 0
        return total

    def _replay(self, entry: dict, spec: CategorySpec) -> RemoteError | None:
        on_conflict = IDEMPOTENCY_COLUMN if self.idempotent_replay else None
        try:
            result = self.remote.insert(spec.table, [entry_payload(entry)], on_conflict=on_conflict)
        except (RemoteError, requests.RequestException) as e:
            return e if isinstance(e, RemoteError) else RemoteError(str(e), table=spec.table)
        return result.error

    def _resolve(self, entry: dict) -> CategorySpec | None:
        """Category of a replayable entry, None if it cannot be replayed."""
        if not isinstance(entry.get("id"), int) or not entry_payload(entry):
            reason = "malformed entry"
        else:
            try:
                return spec_for_entry(entry)
            except StopRule as e:
                reason = str(e)

        emit_receipt("offline_sync_skipped", {
            "tenant_id": self.queue.tenant_id,
            "local_sequence_id": entry.get("id"),
            "endpoint": entry.get("endpoint"),
            "reason": reason,
        })
        return None

    def _clear_local(self, spec: CategorySpec) -> bool:
        with self.store.transaction():
            if self.clear_policy == CLEAR_SYNCED_ONLY:
                still_queued = {
                    entry_payload(e).get("id") for e in self.queue.pending_for(spec.endpoint)
                }
                sales = self.store.get(spec.storage_key, [])
                keep = [s for s in sales if isinstance(s, dict) and s.get("id") in still_queued]
                if keep:
                    self.store.store(spec.storage_key, keep)
                    return False
            self.store.remove(spec.storage_key)
        return True

    def sync_pending(self) -> dict:
        """Replay every queued entry of the governed categories.

        Returns:
            Sync result with synced_count, failed_count, failed_ids, cleared
        """
        if self.local_count() == 0:
            return {
                "success": True,
                "reason": "nothing_pending",
                "synced_count": 0,
                "failed_count": 0,
                "failed_ids": [],
                "cleared": [],
            }

        self.is_syncing.set(True)
        try:
            synced_ids: list[int] = []
            failed_ids: list[int] = []
            skipped_ids: list = []
            governed = self.categories

            for entry in self.queue.list_pending():
                spec = self._resolve(entry)
                if spec is None:
                    skipped_ids.append(entry.get("id"))
                    continue
                if spec.category not in governed:
                    continue

                error = self._replay(entry, spec)
                if error is None:
                    self.queue.remove_by_id(entry["id"])
                    synced_ids.append(entry["id"])
                    continue

                failed_ids.append(entry["id"])
                emit_receipt("offline_sync_failed", {
                    "tenant_id": self.queue.tenant_id,
                    "local_sequence_id": entry["id"],
                    "category": spec.category.value,
                    "table": spec.table,
                    "status": error.status,
                    "error": str(error),
                })

            cleared = [spec.category.value for spec in self.specs if self._clear_local(spec)]

            emit_receipt("offline_sync", {
                "tenant_id": self.queue.tenant_id,
                "categories": sorted(c.value for c in governed),
                "synced_count": len(synced_ids),
                "failed_count": len(failed_ids),
                "skipped_count": len(skipped_ids),
                "clear_policy": self.clear_policy,
                "cleared": cleared,
                "queue_size": self.queue.size(),
            })

            return {
                "success": not failed_ids,
                "synced_count": len(synced_ids),
                "failed_count": len(failed_ids),
                "synced_ids": synced_ids,
                "failed_ids": failed_ids,
                "skipped_ids": skipped_ids,
                "cleared": cleared,
            }
        finally:
            self.is_syncing.set(False)
