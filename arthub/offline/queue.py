"""Sync queue of pending remote writes.

The queue is a single persisted list under SYNC_QUEUE_KEY, appended to
and filtered in place. Volume is one shop's point of sale, so a full
rewrite per change is fine.

Design constraints:
- Enqueue is durable before it returns
- Entries are listed oldest first
- Sequence ids only ever increase, even after entries are removed
- Every read-modify-write of the queue holds the store transaction
"""
from arthub.core.constants import SYNC_QUEUE_KEY, SYNC_QUEUE_STATE_KEY
from arthub.core.receipt import emit_receipt, utc_now_iso
from arthub.offline.models import SaleCategory
from arthub.offline.storage import LocalStore


def entry_payload(entry: dict) -> dict:
    """The record carried by a queue entry, or {} if it is malformed."""
    data = entry.get("data")
    return data if isinstance(data, dict) else {}


class SyncQueue:
    """Ordered list of outstanding remote-write obligations."""

    def __init__(self, store: LocalStore, tenant_id: str = "default"):
        self.store = store
        self.tenant_id = tenant_id

    def _load_state(self) -> dict:
        state = self.store.get(SYNC_QUEUE_STATE_KEY, {})
        if not isinstance(state, dict):
            state = {}
        state.setdefault("local_sequence_id", 0)
        return state

    def _next_sequence_id(self, entries: list[dict]) -> int:
        # The counter survives entry removal; max() guards against a lost state key
        state = self._load_state()
        highest = max((e["id"] for e in entries if isinstance(e.get("id"), int)), default=0)
        next_id = max(state["local_sequence_id"], highest) + 1
        state["local_sequence_id"] = next_id
        self.store.store(SYNC_QUEUE_STATE_KEY, state)
        return next_id

    def enqueue(
        self,
        payload: dict,
        endpoint: str,
        category: SaleCategory | str | None = None,
    ) -> dict:
        """Append a payload for later replay.

        Args:
            payload: Full record to insert remotely
            endpoint: Endpoint tag of the target table
            category: Sale category tag

        Returns:
            The queue entry that was written
        """
        with self.store.transaction():
            entries = self.list_pending()
            entry = {
                "id": self._next_sequence_id(entries),
                "endpoint": endpoint,
                "category": SaleCategory(category).value if category is not None else None,
                "data": payload,
                "timestamp": utc_now_iso(),
            }
            entries.append(entry)
            self.store.store(SYNC_QUEUE_KEY, entries)

        emit_receipt("offline_enqueue", {
            "tenant_id": self.tenant_id,
            "local_sequence_id": entry["id"],
            "endpoint": endpoint,
            "queue_size": len(entries),
        })

        return entry

    def list_pending(self) -> list[dict]:
        """All pending entries, oldest first."""
        entries = self.store.get(SYNC_QUEUE_KEY, [])
        if not isinstance(entries, list):
            return []
        return [e for e in entries if isinstance(e, dict)]

    def remove_by_id(self, entry_id: int) -> bool:
        """Drop the entry with entry_id.

        Returns:
            True if an entry was removed, False if it was already absent
        """
        with self.store.transaction():
            entries = self.list_pending()
            remaining = [e for e in entries if e.get("id") != entry_id]
            if len(remaining) == len(entries):
                return False
            self.store.store(SYNC_QUEUE_KEY, remaining)
        return True

    def size(self) -> int:
        return len(self.list_pending())

    def peek(self, n: int = 10) -> list[dict]:
        """View oldest n entries without removing."""
        return self.list_pending()[:n]

    def pending_for(self, endpoint: str) -> list[dict]:
        """Pending entries targeting one endpoint."""
        return [e for e in self.list_pending() if e.get("endpoint") == endpoint]

    def clear(self) -> None:
        """Drop every pending entry. The sequence counter is kept."""
        self.store.remove(SYNC_QUEUE_KEY)
