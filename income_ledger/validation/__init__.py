"""Input validation package."""

from income_ledger.validation.validator import TransactionInputValidator, ValidationError

__all__ = ["TransactionInputValidator", "ValidationError"]
