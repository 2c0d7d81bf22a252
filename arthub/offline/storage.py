"""Local durable key-value store for offline operation.

Values are JSON documents wrapped in a small envelope
({"data", "timestamp", "version"}) and kept behind a storage port, so
the same store runs on a file on disk or in memory for tests.

Design constraints:
- Writes are synchronous and never fail silently
- Corrupt data reads as absent, never as a crash
- Removing an absent key is a no-op
- Read-modify-write sequences run inside transaction()
"""
import fcntl
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, ContextManager, Iterator, Protocol

from arthub.core.constants import OFFLINE_KEY_PREFIXES, STORAGE_ENVELOPE_VERSION
from arthub.core.errors import StorageWriteError
from arthub.core.receipt import emit_receipt, utc_now_iso


class StoragePort(Protocol):
    """Raw string storage keyed by string."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, text: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def transaction(self) -> ContextManager[None]: ...


class MemoryStoragePort:
    """In-process storage port.

    Attributes:
        quota_bytes: Optional capacity; writes past it raise OSError
    """

    def __init__(self, quota_bytes: int | None = None):
        self._items: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    def read(self, key: str) -> str | None:
        return self._items.get(key)

    def write(self, key: str, text: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(text) > self.quota_bytes:
                raise OSError(f"Storage quota of {self.quota_bytes} bytes exceeded")
        self._items[key] = text

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileStoragePort:
    """Storage port backed by a single JSON document on disk.

    Every mutation is a locked read-modify-write; the document is replaced
    atomically so a crash never leaves a half-written file. transaction()
    holds the same lock across several reads and writes, so another process
    (or another port on the same file) cannot write in between.

    Attributes:
        path: Path to the JSON document
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock_path = self.path.with_name(self.path.name + ".lock")
        self._thread_lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the file lock for the duration of the block. Reentrant."""
        with self._thread_lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            with open(self._lock_path, "a") as lock:
                fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
                self._depth = 1
                try:
                    yield
                finally:
                    self._depth = 0
                    fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, ValueError):
            return {}
        return items if isinstance(items, dict) else {}

    def _save(self, items: dict[str, str]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def read(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, text: str) -> None:
        with self.transaction():
            items = self._load()
            items[key] = text
            self._save(items)

    def delete(self, key: str) -> None:
        with self.transaction():
            items = self._load()
            if key not in items:
                return
            del items[key]
            self._save(items)

    def keys(self) -> list[str]:
        return list(self._load())


class LocalStore:
    """JSON values under string keys, on top of a storage port."""

    def __init__(self, port: StoragePort | None = None):
        self.port = port if port is not None else MemoryStoragePort()

    def store(self, key: str, value: Any) -> None:
        """Serialize value and write it under key, overwriting any prior value.

        Raises:
            StorageWriteError: If serialization or the port write fails
        """
        envelope = {
            "data": value,
            "timestamp": utc_now_iso(),
            "version": STORAGE_ENVELOPE_VERSION,
        }
        try:
            text = json.dumps(envelope, sort_keys=True)
            self.port.write(key, text)
        except (TypeError, ValueError, OSError) as e:
            emit_receipt("offline_store_write_failed", {
                "key": key,
                "error": str(e),
            })
            raise StorageWriteError(key, str(e)) from e

    def get(self, key: str, default: Any = None) -> Any:
        """Read the value under key.

        Returns:
            The stored value, or default if absent or unreadable
        """
        text = self.port.read(key)
        if text is None:
            return default
        try:
            envelope = json.loads(text)
        except ValueError:
            return default
        if not isinstance(envelope, dict) or "data" not in envelope:
            return default
        data = envelope["data"]
        return default if data is None else data

    def remove(self, key: str) -> None:
        """Delete key. Absent keys are ignored."""
        self.port.delete(key)

    def keys(self) -> list[str]:
        return self.port.keys()

    def transaction(self) -> ContextManager[None]:
        """Exclusive access to the store for a read-modify-write sequence.

        Nested transactions on the same store are allowed.
        """
        return self.port.transaction()

    def offline_keys(self) -> list[str]:
        """Keys owned by the offline subsystem."""
        return [k for k in self.keys() if k.startswith(OFFLINE_KEY_PREFIXES)]

    def clear_offline(self) -> list[str]:
        """Remove every offline key.

        Returns:
            The keys that were removed
        """
        with self.transaction():
            removed = self.offline_keys()
            for key in removed:
                self.remove(key)
        return removed
