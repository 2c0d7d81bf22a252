"""Tests for sales books, reconnection and consistency checks."""
import pytest

from arthub.config import SyncConfig
from arthub.offline.network import NetworkStatusObserver
from arthub.offline.queue import SyncQueue
from arthub.offline.reconnect import (
    InconsistencyType,
    ReconnectHandler,
    detect_inconsistencies,
    get_sync_status,
    handle_reconnection,
)
from arthub.offline.sales import build_books

from conftest import failing_for


@pytest.fixture
def books(memory_store, mock_remote):
    return build_books(SyncConfig(), store=memory_store, remote=mock_remote)


class TestBooks:
    """The three consumer-facing books."""

    def test_book_layout(self, books):
        assert set(books) == {"sales", "gift_sales", "stationery_sales"}
        assert [c.value for c in books["sales"].categories] == ["stationery", "gift"]
        assert [c.value for c in books["gift_sales"].categories] == ["gift"]
        assert [c.value for c in books["stationery_sales"].categories] == ["stationery_daily"]

    def test_books_share_queue(self, books, gift_sale, daily_sale):
        books["gift_sales"].record("gift", gift_sale)
        books["stationery_sales"].record("stationery_daily", daily_sale)

        assert len(books["sales"].pending_sync_items(all_categories=True)) == 2
        assert len(books["sales"].pending_sync_items()) == 1
        assert len(books["stationery_sales"].pending_sync_items()) == 1

    def test_wrong_category_for_book(self, books, daily_sale):
        with pytest.raises(KeyError):
            books["gift_sales"].record("stationery_daily", daily_sale)

    def test_sync_reloads_recorders(self, books, gift_sale):
        book = books["gift_sales"]
        book.record("gift", gift_sale)

        book.sync()

        assert book.recorder("gift").sales == []
        assert book.offline_sales("gift") == []

    def test_clear_book(self, books, stationery_sale, gift_sale):
        book = books["sales"]
        book.record("stationery", stationery_sale)
        book.record("gift", gift_sale)

        book.clear()

        assert book.offline_sales("stationery") == []
        assert book.offline_sales("gift") == []
        assert len(book.pending_sync_items()) == 2

    def test_sync_without_remote(self, memory_store, gift_sale):
        books = build_books(SyncConfig(), store=memory_store)
        books["gift_sales"].record("gift", gift_sale)

        result = books["gift_sales"].sync()

        assert result["success"] is False
        assert result["reason"] == "not_configured"
        assert result["pending_count"] == 1

    def test_policy_from_config(self, memory_store, mock_remote):
        config = SyncConfig(clear_policy="synced_only", idempotent_replay=True)
        book = build_books(config, store=memory_store, remote=mock_remote)["gift_sales"]
        assert book.reconciler.clear_policy == "synced_only"
        assert book.reconciler.idempotent_replay is True


class TestReconnection:
    """Sync passes triggered by connectivity."""

    def test_handler_syncs_on_reconnect(self, books, mock_remote, gift_sale, daily_sale):
        observer = NetworkStatusObserver(initial=False)
        handler = ReconnectHandler(observer, books.values())
        books["gift_sales"].record("gift", gift_sale)
        books["stationery_sales"].record("stationery_daily", daily_sale)

        observer.handle_online()

        assert handler.last_result["status"] == "synced"
        assert handler.last_result["synced_count"] == 2
        assert SyncQueue(books["sales"].store).size() == 0

    def test_going_offline_does_not_sync(self, books, mock_remote, gift_sale):
        observer = NetworkStatusObserver(initial=True)
        ReconnectHandler(observer, books.values())
        books["gift_sales"].record("gift", gift_sale)

        observer.handle_offline()

        mock_remote.insert.assert_not_called()

    def test_close_unsubscribes(self, books, mock_remote, gift_sale):
        observer = NetworkStatusObserver(initial=False)
        handler = ReconnectHandler(observer, books.values())
        handler.close()
        handler.close()
        books["gift_sales"].record("gift", gift_sale)

        observer.handle_online()

        assert handler.active is False
        mock_remote.insert.assert_not_called()

    def test_still_offline(self, books):
        observer = NetworkStatusObserver(initial=False)
        result = handle_reconnection(books.values(), observer)
        assert result == {"status": "still_offline", "connected": False}

    def test_partial_status(self, books, mock_remote, gift_sale):
        sale = books["gift_sales"].record("gift", gift_sale)
        mock_remote.insert.side_effect = failing_for({sale["id"]})

        result = handle_reconnection([books["gift_sales"]])

        assert result["status"] == "partial"
        assert result["failed_count"] == 1

    def test_stray_entry_does_not_stop_other_books(self, books, mock_remote, gift_sale, daily_sale):
        """An entry for an unknown endpoint is skipped by every book."""
        queue = SyncQueue(books["sales"].store)
        books["gift_sales"].record("gift", gift_sale)
        books["stationery_sales"].record("stationery_daily", daily_sale)
        queue.enqueue({"id": "x"}, "/api/other")
        observer = NetworkStatusObserver(initial=False)
        handler = ReconnectHandler(observer, books.values())

        observer.handle_online()

        tables = sorted(c.args[0] for c in mock_remote.insert.call_args_list)
        assert tables == ["gift_daily_sales", "stationery_daily_sales"]
        assert handler.last_result["status"] == "synced"
        assert [e["endpoint"] for e in queue.list_pending()] == ["/api/other"]

    def test_not_configured_status(self, memory_store, gift_sale):
        books = build_books(SyncConfig(), store=memory_store)
        books["gift_sales"].record("gift", gift_sale)

        result = handle_reconnection(books.values())

        assert result["status"] == "not_configured"
        assert result["synced_count"] == 0
        assert result["not_configured"] == ["gift_sales", "sales", "stationery_sales"]

    def test_some_books_not_configured_is_partial(self, books, memory_store, gift_sale):
        unconfigured = build_books(SyncConfig(), store=memory_store)["stationery_sales"]
        books["gift_sales"].record("gift", gift_sale)

        result = handle_reconnection([books["gift_sales"], unconfigured])

        assert result["status"] == "partial"
        assert result["failed_count"] == 0
        assert result["not_configured"] == ["stationery_sales"]


class TestInconsistencies:
    """Local lists versus queue entries."""

    def test_clean_state(self, memory_store, books, gift_sale):
        books["gift_sales"].record("gift", gift_sale)
        assert detect_inconsistencies(memory_store, SyncQueue(memory_store)) == []

    def test_orphaned_entry_after_unconditional_clear(self, memory_store, books, mock_remote, gift_sale):
        """A failed entry whose local record was cleared shows up as orphaned."""
        sale = books["gift_sales"].record("gift", gift_sale)
        mock_remote.insert.side_effect = failing_for({sale["id"]})
        books["gift_sales"].sync()

        found = detect_inconsistencies(memory_store, SyncQueue(memory_store))

        assert len(found) == 1
        assert found[0]["type"] == InconsistencyType.ORPHANED_ENTRY
        assert found[0]["sale_id"] == sale["id"]

    def test_unqueued_record(self, memory_store, books, gift_sale):
        sale = books["gift_sales"].record("gift", gift_sale)
        SyncQueue(memory_store).clear()

        found = detect_inconsistencies(memory_store, SyncQueue(memory_store))

        assert found == [{
            "type": InconsistencyType.UNQUEUED_RECORD,
            "category": "gift",
            "sale_id": sale["id"],
            "severity": "error",
        }]

    def test_sync_status(self, memory_store, books, gift_sale, daily_sale):
        books["gift_sales"].record("gift", gift_sale)
        books["stationery_sales"].record("stationery_daily", daily_sale)
        observer = NetworkStatusObserver(initial=False)

        status = get_sync_status(memory_store, SyncQueue(memory_store), observer)

        assert status["local_counts"] == {"stationery": 0, "gift": 1, "stationery_daily": 1}
        assert status["queued_counts"] == {"stationery": 0, "gift": 1, "stationery_daily": 1}
        assert status["queue_size"] == 2
        assert status["connected"] is False
