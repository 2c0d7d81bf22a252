"""Offline sales books.

A book bundles the recorders of some sale categories with the reconciler
that syncs them. The application uses three:

- sales: stationery and gift sales together
- gift_sales: gift daily sales
- stationery_sales: stationery daily sales
"""
from arthub.config.settings import SyncConfig
from arthub.core.constants import CLEAR_UNCONDITIONAL
from arthub.offline.models import SaleCategory, get_spec
from arthub.offline.queue import SyncQueue
from arthub.offline.recorder import OfflineSaleRecorder
from arthub.offline.remote import RemoteDataService, SupabaseRestClient
from arthub.offline.storage import FileStoragePort, LocalStore
from arthub.offline.sync import SyncReconciler

BOOK_CATEGORIES: dict[str, tuple[SaleCategory, ...]] = {
    "sales": (SaleCategory.STATIONERY, SaleCategory.GIFT),
    "gift_sales": (SaleCategory.GIFT,),
    "stationery_sales": (SaleCategory.STATIONERY_DAILY,),
}


class OfflineSalesBook:
    """Recorders plus reconciler for a set of sale categories."""

    def __init__(
        self,
        name: str,
        categories: tuple[SaleCategory, ...],
        store: LocalStore,
        queue: SyncQueue,
        remote: RemoteDataService | None,
        clear_policy: str = CLEAR_UNCONDITIONAL,
        idempotent_replay: bool = False,
    ):
        self.name = name
        self.store = store
        self.queue = queue
        self.recorders = {
            category: OfflineSaleRecorder(category, store, queue) for category in categories
        }
        self.reconciler = SyncReconciler(
            list(categories),
            store,
            queue,
            remote,
            clear_policy=clear_policy,
            idempotent_replay=idempotent_replay,
        )

    @property
    def categories(self) -> tuple[SaleCategory, ...]:
        return tuple(self.recorders)

    @property
    def is_syncing(self) -> bool:
        return self.reconciler.is_syncing.value

    def recorder(self, category: SaleCategory | str) -> OfflineSaleRecorder:
        spec = get_spec(category)
        if spec.category not in self.recorders:
            raise KeyError(f"Book '{self.name}' does not record {spec.category.value} sales")
        return self.recorders[spec.category]

    def record(self, category: SaleCategory | str, sale_data: dict) -> dict:
        """Record one sale of category while offline."""
        return self.recorder(category).record(sale_data)

    def offline_sales(self, category: SaleCategory | str) -> list[dict]:
        """Current local list of one category."""
        return self.recorder(category).load()

    def pending_sync_items(self, all_categories: bool = False) -> list[dict]:
        """Queue entries of this book's categories, or the whole queue."""
        entries = self.queue.list_pending()
        if all_categories:
            return entries
        endpoints = {r.spec.endpoint for r in self.recorders.values()}
        return [e for e in entries if e.get("endpoint") in endpoints]

    def sync(self) -> dict:
        if self.reconciler.remote is None:
            return {
                "success": False,
                "reason": "not_configured",
                "pending_count": len(self.pending_sync_items()),
            }
        result = self.reconciler.sync_pending()
        for recorder in self.recorders.values():
            recorder.load()
        return result

    def clear(self) -> None:
        """Drop every local list of this book (user-initiated)."""
        for recorder in self.recorders.values():
            recorder.clear()


def open_store(config: SyncConfig) -> LocalStore:
    """Local store on the configured file."""
    return LocalStore(FileStoragePort(config.storage_path))


def build_books(
    config: SyncConfig,
    store: LocalStore | None = None,
    remote: RemoteDataService | None = None,
) -> dict[str, OfflineSalesBook]:
    """Wire the three books over one store and one shared queue.

    The remote client is only built when credentials are configured;
    without one the books can record but not sync.
    """
    store = store if store is not None else open_store(config)
    queue = SyncQueue(store, tenant_id=config.tenant_id)
    if remote is None and config.supabase_url and config.supabase_key:
        remote = SupabaseRestClient.from_config(config)

    return {
        name: OfflineSalesBook(
            name,
            categories,
            store,
            queue,
            remote,
            clear_policy=config.clear_policy,
            idempotent_replay=config.idempotent_replay,
        )
        for name, categories in BOOK_CATEGORIES.items()
    }
