"""Offline sync configuration.

All settings can be overridden via environment variables with the
ARTHUB_ prefix.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from arthub.core.constants import (
    CACHE_VERSION,
    CLEAR_POLICIES,
    CLEAR_UNCONDITIONAL,
    DEFAULT_PROBE_PORT,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_STORAGE_DIRNAME,
    DEFAULT_STORAGE_FILENAME,
)


def _default_storage_path() -> Path:
    return Path.home() / DEFAULT_STORAGE_DIRNAME / DEFAULT_STORAGE_FILENAME


@dataclass
class SyncConfig:
    """Offline sync configuration."""

    # Remote data service
    supabase_url: str = ""
    supabase_key: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # Local store
    storage_path: Path = field(default_factory=_default_storage_path)

    # Reconciler behavior
    clear_policy: str = CLEAR_UNCONDITIONAL
    idempotent_replay: bool = False

    # Connectivity probe
    probe_port: int = DEFAULT_PROBE_PORT

    # Response cache
    cache_version: str = CACHE_VERSION

    tenant_id: str = "default"

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Load configuration from environment variables."""
        config = cls()

        if "ARTHUB_SUPABASE_URL" in os.environ:
            config.supabase_url = os.environ["ARTHUB_SUPABASE_URL"].rstrip("/")
        if "ARTHUB_SUPABASE_KEY" in os.environ:
            config.supabase_key = os.environ["ARTHUB_SUPABASE_KEY"]
        if "ARTHUB_REQUEST_TIMEOUT" in os.environ:
            config.request_timeout = float(os.environ["ARTHUB_REQUEST_TIMEOUT"])

        if "ARTHUB_STORAGE_PATH" in os.environ:
            config.storage_path = Path(os.environ["ARTHUB_STORAGE_PATH"]).expanduser()

        if "ARTHUB_SYNC_CLEAR_POLICY" in os.environ:
            config.clear_policy = os.environ["ARTHUB_SYNC_CLEAR_POLICY"].strip().lower()
        if "ARTHUB_IDEMPOTENT_REPLAY" in os.environ:
            config.idempotent_replay = os.environ["ARTHUB_IDEMPOTENT_REPLAY"].lower() == "true"

        if "ARTHUB_PROBE_PORT" in os.environ:
            config.probe_port = int(os.environ["ARTHUB_PROBE_PORT"])

        if "ARTHUB_CACHE_VERSION" in os.environ:
            config.cache_version = os.environ["ARTHUB_CACHE_VERSION"]

        if "ARTHUB_TENANT_ID" in os.environ:
            config.tenant_id = os.environ["ARTHUB_TENANT_ID"]

        return config

    @property
    def remote_host(self) -> str | None:
        """Hostname of the remote data service, if configured."""
        if not self.supabase_url:
            return None
        return urlparse(self.supabase_url).hostname

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if self.clear_policy not in CLEAR_POLICIES:
            errors.append(
                f"clear_policy must be one of {', '.join(CLEAR_POLICIES)}, got '{self.clear_policy}'"
            )

        if self.request_timeout <= 0:
            errors.append("request_timeout must be positive")

        if not 1 <= self.probe_port <= 65535:
            errors.append(f"Invalid probe port: {self.probe_port}")

        if self.supabase_url and not self.supabase_url.startswith(("http://", "https://")):
            errors.append("supabase_url must start with http:// or https://")

        if self.supabase_url and not self.supabase_key:
            errors.append("supabase_key required when supabase_url is set")

        if not self.cache_version:
            errors.append("cache_version must not be empty")

        return errors
