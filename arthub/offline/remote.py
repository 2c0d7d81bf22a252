"""Remote data service boundary.

Inserts go to the hosted database's REST endpoint (PostgREST behind
Supabase). Results come back as a result-or-error pair; the client never
raises for a rejected insert.
"""
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from arthub.config.settings import SyncConfig
from arthub.core.constants import SUPABASE_REST_PATH
from arthub.core.errors import RemoteError


@dataclass
class InsertResult:
    """Outcome of one insert call."""
    data: list[dict] | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RemoteDataService(Protocol):
    """Table-like remote writes."""

    def insert(
        self,
        table: str,
        rows: list[dict],
        on_conflict: str | None = None,
    ) -> InsertResult: ...


class SupabaseRestClient:
    """Insert rows through the Supabase REST API.

    Attributes:
        base_url: Project URL, e.g. https://xyz.supabase.co
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        if not base_url or not api_key:
            raise RuntimeError(
                "Missing Supabase credentials.\n"
                "Set ARTHUB_SUPABASE_URL and ARTHUB_SUPABASE_KEY environment variables."
            )
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(cls, config: SyncConfig) -> "SupabaseRestClient":
        return cls(config.supabase_url, config.supabase_key, timeout=config.request_timeout)

    def _headers(self, on_conflict: str | None) -> dict[str, str]:
        prefer = ["return=representation"]
        if on_conflict:
            prefer.append("resolution=ignore-duplicates")
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": ",".join(prefer),
        }

    def insert(
        self,
        table: str,
        rows: list[dict],
        on_conflict: str | None = None,
    ) -> InsertResult:
        """Insert rows into table.

        Args:
            table: Remote table name
            rows: Rows to insert
            on_conflict: Unique column; duplicates on it are ignored

        Returns:
            InsertResult with inserted rows or the error
        """
        params: dict[str, Any] = {}
        if on_conflict:
            params["on_conflict"] = on_conflict

        try:
            response = self.session.post(
                f"{self.base_url}{SUPABASE_REST_PATH}/{table}",
                json=rows,
                params=params,
                headers=self._headers(on_conflict),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return InsertResult(error=RemoteError(f"Request to {table} failed: {e}", table=table))

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("message", response.text) if isinstance(body, dict) else response.text
            return InsertResult(error=RemoteError(
                f"Insert into {table} rejected: {detail}",
                status=response.status_code,
                table=table,
            ))

        try:
            data = response.json() if response.content else []
        except ValueError:
            data = []
        return InsertResult(data=data if isinstance(data, list) else [data])
