"""
Configuration Management for Income Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external dependency is the PrivatBank exchange-rate API, and
its retry budget lives next to its URL so both can be tuned together.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PrivatBankSettings(BaseSettings):
    """PrivatBank exchange-rate API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PRIVATBANK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_url: str = Field(
        default="https://api.privatbank.ua/p24api/exchange_rates",
        description="Exchange rates endpoint (may point at a forwarding proxy)"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout in seconds"
    )

    # Retry policy
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts per rate lookup"
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Backoff base; attempt i waits 2**i * base"
    )
    max_jitter_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Exclusive upper bound of the random jitter added to each wait"
    )

    @field_validator('api_url')
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got: {v!r}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Currencies
    supported_currencies: str = Field(
        default="USD,EUR,GBP,PLN,CHF,CZK",
        description="Comma-separated list of currencies offered in the UI"
    )

    # Audit
    audit_buffer_size: int = Field(
        default=200,
        ge=0,
        le=10000,
        description="How many recent audit events to keep in memory"
    )

    @property
    def supported_currencies_list(self) -> list[str]:
        """Get supported currencies as a list."""
        return [
            code.strip().upper()
            for code in self.supported_currencies.split(",")
            if code.strip()
        ]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def privatbank(self) -> PrivatBankSettings:
        return PrivatBankSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.privatbank
        results["privatbank"] = True
    except Exception as e:
        results["privatbank"] = False
        results["privatbank_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
