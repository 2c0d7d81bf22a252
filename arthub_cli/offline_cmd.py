"""Offline mode CLI commands."""
import json
import time

import click

from arthub.config import SyncConfig
from arthub.core.constants import CACHE_PRECACHE_URLS
from arthub.offline.cache import ResponseCache
from arthub.offline.models import SaleCategory
from arthub.offline.network import NetworkStatusObserver, host_probe
from arthub.offline.queue import SyncQueue, entry_payload
from arthub.offline.reconnect import (
    ReconnectHandler,
    detect_inconsistencies,
    get_sync_status,
    handle_reconnection,
)
from arthub.offline.recorder import OfflineSaleRecorder
from arthub.offline.sales import BOOK_CATEGORIES, build_books, open_store
from .output import print_json, print_error, print_success, table


def _load_config() -> SyncConfig:
    config = SyncConfig.from_env()
    errors = config.validate()
    if errors:
        raise click.ClickException("; ".join(errors))
    return config


def _observer(config: SyncConfig) -> NetworkStatusObserver:
    return NetworkStatusObserver(
        probe=host_probe(config.remote_host, config.probe_port),
        tenant_id=config.tenant_id,
    )


def _parse_value(raw: str):
    """JSON literal if it parses, plain string otherwise."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@click.group()
def offline():
    """Offline mode commands."""
    pass


@offline.command()
def status():
    """Show local lists, queue size and connectivity."""
    config = _load_config()
    try:
        store = open_store(config)
        queue = SyncQueue(store, tenant_id=config.tenant_id)
        print_json(get_sync_status(store, queue, _observer(config)))
    except Exception as e:
        print_error(f"Status check failed: {e}")


@offline.command()
@click.argument("category", type=click.Choice([c.value for c in SaleCategory]))
@click.option("--field", "-f", "fields", multiple=True, metavar="KEY=VALUE",
              help="Sale field, repeatable. Values are parsed as JSON when possible.")
@click.option("--json", "json_data", default=None, help="Sale fields as a JSON object")
def record(category: str, fields: tuple[str, ...], json_data: str | None):
    """Record a sale locally and queue it for sync."""
    config = _load_config()
    try:
        sale_data = json.loads(json_data) if json_data else {}
        if not isinstance(sale_data, dict):
            print_error("--json must be a JSON object")
            return
        for item in fields:
            key, sep, value = item.partition("=")
            if not sep or not key:
                print_error(f"Bad field '{item}', expected KEY=VALUE")
                return
            sale_data[key.strip()] = _parse_value(value)

        store = open_store(config)
        queue = SyncQueue(store, tenant_id=config.tenant_id)
        sale = OfflineSaleRecorder(category, store, queue).record(sale_data)
        print_success(f"Recorded {category} sale {sale['id']}")
        print_json(sale)
    except Exception as e:
        print_error(f"Record failed: {e}")


@offline.command("queue")
@click.option("--limit", "-n", default=10, help="Number of entries to show")
def show_queue(limit: int):
    """List pending sync entries."""
    config = _load_config()
    try:
        queue = SyncQueue(open_store(config), tenant_id=config.tenant_id)
        entries = queue.peek(limit)

        if not entries:
            click.echo("Queue is empty")
            return

        click.echo(f"Showing {len(entries)} of {queue.size()} pending entries:\n")
        table(
            ["seq", "endpoint", "sale id", "queued at"],
            [[e.get("id", "?"), e.get("endpoint", "?"), entry_payload(e).get("id", "?"),
              e.get("timestamp", "?")] for e in entries],
        )
    except Exception as e:
        print_error(f"Queue list failed: {e}")


@offline.command("sync")
@click.option("--book", "book_names", multiple=True, type=click.Choice(list(BOOK_CATEGORIES)),
              help="Book to sync, repeatable. Defaults to all books.")
@click.option("--force", is_flag=True, help="Force sync attempt even if not connected")
def do_sync(book_names: tuple[str, ...], force: bool):
    """Replay queued sales against the remote tables."""
    config = _load_config()
    if not config.supabase_url:
        print_error("Remote not configured. Set ARTHUB_SUPABASE_URL and ARTHUB_SUPABASE_KEY.")
        return
    try:
        observer = _observer(config)
        if observer.is_offline and not force:
            print_error("Not connected. Use --force to attempt anyway.")
            return

        books = build_books(config)
        selected = [books[name] for name in (book_names or BOOK_CATEGORIES)]
        result = handle_reconnection(selected, tenant_id=config.tenant_id)

        if result["failed_count"] == 0:
            print_success(f"Synced {result['synced_count']} entries")
        else:
            print_error(f"{result['failed_count']} entries failed and stay queued")
        print_json(result)
    except Exception as e:
        print_error(f"Sync failed: {e}")


@offline.command()
@click.option("--book", "book_name", default=None, type=click.Choice(list(BOOK_CATEGORIES)),
              help="Only clear this book's local lists")
@click.option("--all", "clear_all", is_flag=True,
              help="Also drop the sync queue and every other offline key")
@click.confirmation_option(prompt="Clear offline sales?")
def clear(book_name: str | None, clear_all: bool):
    """Clear local offline sales lists."""
    config = _load_config()
    try:
        if clear_all:
            removed = open_store(config).clear_offline()
            print_success(f"Removed {len(removed)} offline keys")
            return

        books = build_books(config)
        for name in ([book_name] if book_name else list(books)):
            books[name].clear()
        print_success("Local offline sales cleared")
    except Exception as e:
        print_error(f"Clear failed: {e}")


@offline.command()
def connected():
    """Check if the remote service host is reachable."""
    config = _load_config()
    try:
        is_online = _observer(config).is_online
        print_json({
            "connected": is_online,
            "status": "online" if is_online else "offline",
            "host": config.remote_host,
        })
    except Exception as e:
        print_error(f"Connection check failed: {e}")


@offline.command()
@click.option("--interval", default=10.0, help="Seconds between connectivity probes")
@click.option("--count", default=0, help="Stop after this many probes (0 = forever)")
def watch(interval: float, count: int):
    """Probe connectivity and sync every book on reconnect."""
    config = _load_config()
    observer = _observer(config)
    handler = ReconnectHandler(observer, build_books(config).values(), tenant_id=config.tenant_id)
    click.echo(f"Watching connectivity ({'online' if observer.is_online else 'offline'})")
    probes = 0
    try:
        while count == 0 or probes < count:
            time.sleep(interval)
            observer.refresh()
            probes += 1
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print_error(f"Watch stopped: {e}")
    finally:
        handler.close()
    if handler.last_result is not None:
        print_json(handler.last_result)


@offline.command()
def check():
    """Report local records and queue entries that disagree."""
    config = _load_config()
    try:
        store = open_store(config)
        found = detect_inconsistencies(store, SyncQueue(store, tenant_id=config.tenant_id))
        if not found:
            print_success("Local lists and sync queue agree")
            return
        print_json(found)
    except Exception as e:
        print_error(f"Check failed: {e}")


@offline.command("cache-install")
@click.option("--base-url", required=True, help="Origin the precached paths are fetched from")
@click.argument("urls", nargs=-1)
def cache_install(base_url: str, urls: tuple[str, ...]):
    """Precache static assets into the current cache version."""
    config = _load_config()
    try:
        cache = ResponseCache(open_store(config), config.cache_version, base_url=base_url,
                              timeout=config.request_timeout)
        count = cache.install(list(urls or CACHE_PRECACHE_URLS))
        print_success(f"Cached {count} responses in {config.cache_version}")
    except Exception as e:
        print_error(f"Cache install failed: {e}")


@offline.command("cache-purge")
def cache_purge():
    """Drop every cache version except the configured one."""
    config = _load_config()
    try:
        purged = ResponseCache(open_store(config), config.cache_version).activate()
        if purged:
            print_success(f"Purged {len(purged)} old cache versions")
            print_json(purged)
        else:
            click.echo("No old cache versions")
    except Exception as e:
        print_error(f"Cache purge failed: {e}")
