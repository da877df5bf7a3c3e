"""Unit tests for config.py — AppConfig and load_config()."""

import dataclasses
import os
from unittest.mock import patch

import pytest

from teams_archive.config import AppConfig, load_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "TA_CLIENT_ID": "test-client-id",
    "TA_CLIENT_SECRET": "test-secret",
    "TA_TENANT_ID": "test-tenant-id",
    "TA_EXPORT_ROOT": "/data/teams-archive",
}


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_tuning_values_have_defaults(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid", export_root="/x")
        assert config.library_name == "Documents"
        assert config.page_size == 999
        assert config.max_retries == 3
        assert config.retry_backoff_seconds == 2.0
        assert config.request_timeout_seconds == 120.0

    def test_is_frozen(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid", export_root="/x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.export_root = "/y"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values_from_env(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.client_id == "test-client-id"
        assert config.tenant_id == "test-tenant-id"
        assert config.export_root == "/data/teams-archive"
        assert config.library_name == "Documents"

    def test_reads_overrides_from_env(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "TA_LIBRARY_NAME": "Shared Documents",
            "TA_PAGE_SIZE": "250",
            "TA_MAX_RETRIES": "5",
            "TA_RETRY_BACKOFF_SECONDS": "0.5",
            "TA_REQUEST_TIMEOUT_SECONDS": "30",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.library_name == "Shared Documents"
        assert config.page_size == 250
        assert config.max_retries == 5
        assert config.retry_backoff_seconds == 0.5
        assert config.request_timeout_seconds == 30.0

    @pytest.mark.parametrize("missing", sorted(_REQUIRED_ENV))
    def test_raises_key_error_when_required_value_missing(self, missing: str) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != missing}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()
