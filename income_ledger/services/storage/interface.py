"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger storage.
This allows us to:
1. Keep the in-memory ledger for the current session
2. Give each test (or each user session) its own independent ledger
3. Add a persistent backend later without touching business logic

The store trusts its input. Validation belongs to TransactionService.
"""

from abc import ABC, abstractmethod

from income_ledger.models.transaction import Transaction


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation must implement these methods.
    Implementations are not required to be thread-safe.
    """

    @abstractmethod
    def add(self, transaction: Transaction) -> None:
        """
        Append a transaction to the ledger.

        No validation is performed; the caller guarantees a well-formed
        record with a unique id.
        """
        pass

    @abstractmethod
    def remove(self, transaction_id: int) -> bool:
        """
        Remove the transaction with the given id.

        Returns:
            True if a transaction was removed, False if none matched
            (the ledger is left unchanged)
        """
        pass

    @abstractmethod
    def get(self, transaction_id: int) -> Transaction:
        """
        Retrieve a transaction by id.

        Raises:
            NotFoundError: If no transaction has this id
        """
        pass

    @abstractmethod
    def list(self) -> list[Transaction]:
        """
        Snapshot of all transactions, most recent date first.

        Transactions sharing a date keep their insertion order.
        """
        pass

    @abstractmethod
    def max_id(self) -> int:
        """Highest id ever added (0 for a fresh store)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")
