"""Offline sale recorders, one per sale category.

A recorder always writes locally first: the record goes into the
category's persisted list and a copy is queued for remote replay.
"""
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from arthub.core.constants import RECORDER_OWNED_FIELDS
from arthub.core.errors import StorageWriteError
from arthub.core.receipt import StopRule, emit_receipt
from arthub.offline.models import SaleCategory, get_spec
from arthub.offline.queue import SyncQueue, entry_payload
from arthub.offline.storage import LocalStore


class OfflineSaleRecorder:
    """Records sales of one category while offline.

    Attributes:
        spec: Category routing (storage key, endpoint, table)
        sales: Last loaded copy of the category's local list
    """

    def __init__(
        self,
        category: SaleCategory | str,
        store: LocalStore,
        queue: SyncQueue,
        clock: Callable[[], float] = time.time,
    ):
        self.spec = get_spec(category)
        self.store = store
        self.queue = queue
        self.clock = clock
        self.sales: list[dict] = []
        self.load()

    @property
    def category(self) -> SaleCategory:
        return self.spec.category

    def load(self) -> list[dict]:
        """Re-read the category's persisted list."""
        sales = self.store.get(self.spec.storage_key, [])
        self.sales = [s for s in sales if isinstance(s, dict)] if isinstance(sales, list) else []
        return list(self.sales)

    def _used_ids(self, sales: list[dict]) -> set[str]:
        used = {s.get("id") for s in sales}
        for entry in self.queue.pending_for(self.spec.endpoint):
            used.add(entry_payload(entry).get("id"))
        return used

    def _new_id(self, sales: list[dict], now: float) -> str:
        millis = int(now * 1000)
        used = self._used_ids(sales)
        while f"{self.spec.id_prefix}{millis}" in used:
            millis += 1
        return f"{self.spec.id_prefix}{millis}"

    def _validate(self, sale_data: dict) -> None:
        owned = [f for f in RECORDER_OWNED_FIELDS if f in sale_data]
        if owned:
            raise StopRule(f"Recorder-owned fields supplied: {', '.join(owned)}")
        missing = [f for f in self.spec.required_fields if sale_data.get(f) in (None, "")]
        if missing:
            raise StopRule(
                f"{self.category.value} sale missing required fields: {', '.join(missing)}"
            )

    def record(self, sale_data: dict) -> dict:
        """Capture a sale locally and queue it for replay.

        Args:
            sale_data: Category fields, without id, date or client_ref

        Returns:
            The complete record as stored

        Raises:
            StorageWriteError: If the local list or the queue cannot be written
            StopRule: If sale_data carries recorder-owned or lacks required fields
        """
        self._validate(sale_data)
        now = self.clock()

        with self.store.transaction():
            previous = self.load()
            sale = {
                **sale_data,
                "id": self._new_id(previous, now),
                "date": datetime.fromtimestamp(now, timezone.utc).isoformat(),
                "client_ref": str(uuid.uuid4()),
            }

            updated = previous + [sale]
            self.store.store(self.spec.storage_key, updated)

            try:
                self.queue.enqueue(sale, self.spec.endpoint, self.category)
            except StorageWriteError as e:
                # List and queue must agree; undo the list write
                self.store.store(self.spec.storage_key, previous)
                emit_receipt("offline_record_rollback", {
                    "tenant_id": self.queue.tenant_id,
                    "category": self.category.value,
                    "sale_id": sale["id"],
                    "error": str(e),
                })
                raise

        self.sales = updated

        emit_receipt("offline_record", {
            "tenant_id": self.queue.tenant_id,
            "category": self.category.value,
            "sale_id": sale["id"],
            "local_count": len(updated),
        })

        return sale

    def clear(self) -> None:
        """Drop the category's local list (user-initiated)."""
        self.store.remove(self.spec.storage_key)
        self.sales = []
