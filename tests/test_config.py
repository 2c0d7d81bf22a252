"""Tests for configuration and receipts."""
import json
from pathlib import Path

from arthub.config import SyncConfig
from arthub.core.receipt import dual_hash, emit_receipt


class TestSyncConfig:
    """Environment overrides and validation."""

    def test_defaults_valid(self):
        config = SyncConfig()
        assert config.clear_policy == "unconditional"
        assert config.idempotent_replay is False
        assert config.validate() == []

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ARTHUB_SUPABASE_URL", "https://xyz.supabase.co/")
        monkeypatch.setenv("ARTHUB_SUPABASE_KEY", "secret")
        monkeypatch.setenv("ARTHUB_REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("ARTHUB_STORAGE_PATH", str(tmp_path / "store.json"))
        monkeypatch.setenv("ARTHUB_SYNC_CLEAR_POLICY", "Synced_Only")
        monkeypatch.setenv("ARTHUB_IDEMPOTENT_REPLAY", "true")
        monkeypatch.setenv("ARTHUB_CACHE_VERSION", "v9")
        monkeypatch.setenv("ARTHUB_TENANT_ID", "shop-1")
        monkeypatch.setenv("ARTHUB_PROBE_PORT", "8443")

        config = SyncConfig.from_env()

        assert config.supabase_url == "https://xyz.supabase.co"
        assert config.supabase_key == "secret"
        assert config.request_timeout == 12.5
        assert config.storage_path == Path(tmp_path / "store.json")
        assert config.clear_policy == "synced_only"
        assert config.idempotent_replay is True
        assert config.cache_version == "v9"
        assert config.tenant_id == "shop-1"
        assert config.probe_port == 8443
        assert config.remote_host == "xyz.supabase.co"
        assert config.validate() == []

    def test_validation_errors(self):
        config = SyncConfig(
            supabase_url="xyz.supabase.co",
            clear_policy="sometimes",
            request_timeout=0,
            probe_port=70000,
        )
        errors = config.validate()
        assert len(errors) == 5

    def test_remote_host_unset(self):
        assert SyncConfig().remote_host is None


class TestReceipts:
    """Structured receipts on stdout."""

    def test_emit_receipt(self, capsys):
        receipt = emit_receipt("offline_sync", {"synced_count": 2})
        line = capsys.readouterr().out.strip()

        assert json.loads(line) == receipt
        assert receipt["receipt_type"] == "offline_sync"
        assert receipt["tenant_id"] == "default"
        assert receipt["ts"].endswith("Z")

    def test_receipts_silenced(self, capsys, monkeypatch):
        monkeypatch.setenv("ARTHUB_RECEIPTS", "off")
        receipt = emit_receipt("offline_sync", {"tenant_id": "shop-1"})
        assert capsys.readouterr().out == ""
        assert receipt["tenant_id"] == "shop-1"

    def test_dual_hash_format(self):
        value = dual_hash({"b": 1, "a": 2})
        sha, blake = value.split(":")
        assert len(sha) == 64
        assert len(blake) == 64
        assert value == dual_hash('{"a":2,"b":1}')
