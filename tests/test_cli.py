"""
Tests for credential loading and the click entry point.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from services.sync.cli import main
from shared import config
from shared.config import Credentials, load_credentials, normalize_domain
from shared.errors import NotConfigured

NO_ENV = {"FRESHDESK_API_KEY": None, "FRESHDESK_DOMAIN": None}


class TestCredentials:
    def test_normalize_domain(self) -> None:
        assert normalize_domain("acme.freshdesk.com/") == "https://acme.freshdesk.com"
        assert normalize_domain("http://localhost:8080") == "http://localhost:8080"
        assert normalize_domain("  ") == ""

    def test_arguments_override_environment(self, monkeypatch) -> None:
        monkeypatch.setattr(config, "FRESHDESK_API_KEY", "env-key")
        monkeypatch.setattr(config, "FRESHDESK_DOMAIN", "env.freshdesk.com")

        assert load_credentials() == Credentials("env-key", "https://env.freshdesk.com")
        assert load_credentials("arg-key", "arg.freshdesk.com").api_key == "arg-key"

    def test_missing_values_raise(self, monkeypatch) -> None:
        monkeypatch.setattr(config, "FRESHDESK_API_KEY", "")
        monkeypatch.setattr(config, "FRESHDESK_DOMAIN", "")
        with pytest.raises(NotConfigured, match="api_key, domain"):
            load_credentials()

    def test_repr_masks_key(self) -> None:
        assert "secret" not in repr(Credentials("secret", "https://acme.freshdesk.com"))


class TestCli:
    def test_missing_credentials_is_usage_error(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setattr(config, "FRESHDESK_API_KEY", "")
        monkeypatch.setattr(config, "FRESHDESK_DOMAIN", "")
        result = CliRunner().invoke(main, ["--data-dir", str(tmp_path), "test"], env=NO_ENV)

        assert result.exit_code == 1
        assert "Freshdesk credentials missing" in result.output

    def test_rebuild_rejects_unknown_cache(self, tmp_path) -> None:
        result = CliRunner().invoke(main, ["--data-dir", str(tmp_path), "rebuild", "groups"], env=NO_ENV)
        assert result.exit_code == 2
