"""Services package."""

from income_ledger.services.rates import (
    ExchangeRateSource,
    PrivatBankClient,
    RateFetchError,
    RateFetcher,
    RetryPolicy,
    format_date_for_api,
)
from income_ledger.services.storage import (
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    # Rate services
    "ExchangeRateSource",
    "PrivatBankClient",
    "RateFetchError",
    "RateFetcher",
    "RetryPolicy",
    "format_date_for_api",
    # Storage services
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
]
