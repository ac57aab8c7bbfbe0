"""Configuration package."""

from income_ledger.config.settings import (
    AppSettings,
    PrivatBankSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "PrivatBankSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
