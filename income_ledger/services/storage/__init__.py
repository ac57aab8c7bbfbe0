"""
Storage Services Package

Provides the abstract ledger interface and the in-memory implementation.
"""

from income_ledger.services.storage.interface import (
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from income_ledger.services.storage.memory import InMemoryTransactionStorage

__all__ = [
    # Interfaces
    "TransactionStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryTransactionStorage",
]
