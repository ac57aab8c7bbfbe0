"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from income_ledger.config import (
    AppSettings,
    PrivatBankSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestPrivatBankSettings:

    def test_defaults(self):
        settings = PrivatBankSettings()
        assert settings.api_url == "https://api.privatbank.ua/p24api/exchange_rates"
        assert settings.max_attempts == 3
        assert settings.base_delay_seconds == 1.0
        assert settings.max_jitter_seconds == 0.5

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PRIVATBANK_API_URL", "http://localhost:8080/rates")
        monkeypatch.setenv("PRIVATBANK_MAX_ATTEMPTS", "5")

        settings = PrivatBankSettings()

        assert settings.api_url == "http://localhost:8080/rates"
        assert settings.max_attempts == 5

    def test_rejects_non_http_url(self, monkeypatch):
        monkeypatch.setenv("PRIVATBANK_API_URL", "ftp://example.org")
        with pytest.raises(ValidationError):
            PrivatBankSettings()

    def test_rejects_zero_attempts(self, monkeypatch):
        monkeypatch.setenv("PRIVATBANK_MAX_ATTEMPTS", "0")
        with pytest.raises(ValidationError):
            PrivatBankSettings()


class TestAppSettings:

    def test_supported_currencies_list(self, monkeypatch):
        monkeypatch.setenv("SUPPORTED_CURRENCIES", "usd, eur,,pln ")
        assert AppSettings().supported_currencies_list == ["USD", "EUR", "PLN"]


def test_validate_all_settings_reports_errors(monkeypatch):
    monkeypatch.setenv("PRIVATBANK_TIMEOUT_SECONDS", "-1")

    results = validate_all_settings()

    assert results["privatbank"] is False
    assert "privatbank_error" in results
    assert results["app"] is True


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_env_example_only_lists_real_settings():
    env_example = Path(__file__).resolve().parent.parent / ".env.example"
    keys = [
        line.split("=", 1)[0].strip()
        for line in env_example.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    known = {f"PRIVATBANK_{name}".upper() for name in PrivatBankSettings.model_fields}
    known |= {name.upper() for name in AppSettings.model_fields}

    assert keys
    assert [k for k in keys if k not in known] == []
