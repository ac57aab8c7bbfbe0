"""Exchange rate services package."""

from income_ledger.services.rates.privatbank_client import (
    ExchangeRateSource,
    PrivatBankClient,
    RateFetchError,
    format_date_for_api,
)
from income_ledger.services.rates.rate_fetcher import RateFetcher, RetryPolicy

__all__ = [
    "ExchangeRateSource",
    "PrivatBankClient",
    "RateFetchError",
    "RateFetcher",
    "RetryPolicy",
    "format_date_for_api",
]
