"""
In-Memory Ledger Storage

The ledger lives for the duration of a session only. Persistence across
sessions is deliberately not provided.
"""

from typing import Optional

from income_ledger.models.transaction import Transaction
from income_ledger.services.storage.interface import (
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """
    Ordered list of transactions owned by a single ledger.

    Single-threaded use only. A multi-caller deployment must guard
    add/remove/list with a lock.
    """

    def __init__(self, transactions: Optional[list[Transaction]] = None):
        self._transactions: list[Transaction] = []
        self._max_id = 0
        for transaction in transactions or []:
            self.add(transaction)

    def add(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)
        self._max_id = max(self._max_id, transaction.id)

    def remove(self, transaction_id: int) -> bool:
        remaining = [t for t in self._transactions if t.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return False
        self._transactions = remaining
        return True

    def get(self, transaction_id: int) -> Transaction:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        raise NotFoundError(transaction_id)

    def list(self) -> list[Transaction]:
        # sorted() is stable, so equal dates keep insertion order
        return sorted(self._transactions, key=lambda t: t.date, reverse=True)

    def max_id(self) -> int:
        return self._max_id

    def __len__(self) -> int:
        return len(self._transactions)

    def __contains__(self, transaction_id: object) -> bool:
        return any(t.id == transaction_id for t in self._transactions)
