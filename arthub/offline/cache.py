"""Versioned response cache for offline reads.

One cache namespace per version tag, kept in the local store under
"cache:<version>". Activating a version purges every other one.

Strategies:
- API paths (/api/, /rest/v1/): network first, cache 200s, fall back to cache
- Navigations: network first, fall back to the cached page, then to "/"
- Everything else: cache first, network on a miss
"""
from dataclasses import asdict, dataclass, field
from urllib.parse import urljoin, urlparse

import requests

from arthub.core.constants import (
    CACHE_KEY_PREFIX,
    CACHE_NETWORK_FIRST_MARKERS,
    CACHE_VERSION,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)
from arthub.core.errors import RemoteError
from arthub.core.receipt import emit_receipt
from arthub.offline.storage import LocalStore


@dataclass
class CachedResponse:
    """A response as served to the caller."""
    url: str
    status: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    from_cache: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("from_cache")
        return data


class ResponseCache:
    """Cache-aware GET fetcher.

    Attributes:
        version: Current cache version tag
        base_url: Prefix for relative URLs
    """

    def __init__(
        self,
        store: LocalStore,
        version: str = CACHE_VERSION,
        base_url: str = "",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.version = version
        self.base_url = base_url
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @property
    def cache_key(self) -> str:
        return f"{CACHE_KEY_PREFIX}{self.version}"

    def _cache_id(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme:
            return parsed.path + (f"?{parsed.query}" if parsed.query else "")
        return url

    def _absolute(self, url: str) -> str:
        if urlparse(url).scheme or not self.base_url:
            return url
        return urljoin(self.base_url, url)

    def _entries(self) -> dict:
        entries = self.store.get(self.cache_key, {})
        return entries if isinstance(entries, dict) else {}

    def _network(self, url: str) -> CachedResponse:
        response = self.session.get(self._absolute(url), timeout=self.timeout)
        return CachedResponse(
            url=url,
            status=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    def match(self, url: str) -> CachedResponse | None:
        """Cached response for url in the current version, if any."""
        entry = self._entries().get(self._cache_id(url))
        if not isinstance(entry, dict):
            return None
        return CachedResponse(
            url=entry.get("url", url),
            status=entry.get("status", 200),
            body=entry.get("body", ""),
            headers=entry.get("headers", {}),
            from_cache=True,
        )

    def put(self, response: CachedResponse) -> None:
        entries = self._entries()
        entries[self._cache_id(response.url)] = response.to_dict()
        self.store.store(self.cache_key, entries)

    def cache_names(self) -> list[str]:
        """Every cache version present in the store."""
        return sorted(
            k[len(CACHE_KEY_PREFIX):] for k in self.store.keys() if k.startswith(CACHE_KEY_PREFIX)
        )

    def install(self, urls: list[str]) -> int:
        """Precache urls into the current version. All or nothing.

        Raises:
            RemoteError: If any url cannot be fetched with status 200
        """
        fetched = []
        for url in urls:
            try:
                response = self._network(url)
            except requests.RequestException as e:
                raise RemoteError(f"Precache of {url} failed: {e}") from e
            if response.status != 200:
                raise RemoteError(f"Precache of {url} returned {response.status}", status=response.status)
            fetched.append(response)

        entries = self._entries()
        for response in fetched:
            entries[self._cache_id(response.url)] = response.to_dict()
        self.store.store(self.cache_key, entries)
        return len(fetched)

    def activate(self) -> list[str]:
        """Purge every cache version except the current one.

        Returns:
            The purged version tags
        """
        purged = [name for name in self.cache_names() if name != self.version]
        for name in purged:
            self.store.remove(f"{CACHE_KEY_PREFIX}{name}")

        if purged:
            emit_receipt("offline_cache_purge", {
                "version": self.version,
                "purged": purged,
            })
        return purged

    def fetch(self, url: str, navigate: bool = False) -> CachedResponse | None:
        """Serve url from network or cache according to its strategy.

        Returns:
            The response, or None if neither network nor cache has it
        """
        if any(marker in url for marker in CACHE_NETWORK_FIRST_MARKERS):
            try:
                response = self._network(url)
            except requests.RequestException:
                return self.match(url)
            if response.status == 200:
                self.put(response)
            return response

        if navigate:
            try:
                return self._network(url)
            except requests.RequestException:
                return self.match(url) or self.match("/")

        cached = self.match(url)
        if cached is not None:
            return cached
        try:
            return self._network(url)
        except requests.RequestException:
            return None
