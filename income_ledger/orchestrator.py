"""
Main Orchestrator for Income Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Adding income (input -> validate -> fetch rate -> convert -> store)
2. Deleting income (confirmed by the user -> remove)
3. Reporting (ledger -> quarterly summary)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No network call for input that fails validation
- No transaction without a successfully fetched rate
- Nothing is deleted without explicit user confirmation
- Every step is audited

Creation is atomic: either a complete transaction is stored, or the
ledger is left untouched.
"""

from datetime import date
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from income_ledger.audit import AuditLogger, create_correlation_id
from income_ledger.config import get_settings
from income_ledger.models.transaction import (
    QuarterlySummary,
    Transaction,
    ValidationIssue,
)
from income_ledger.queries import QuarterAggregator
from income_ledger.services.rates import (
    RateFetchError,
    RateFetcher,
    format_date_for_api,
)
from income_ledger.services.storage import (
    InMemoryTransactionStorage,
    TransactionStorageInterface,
)
from income_ledger.validation import TransactionInputValidator, ValidationError


class TransactionService:
    """
    Orchestrates the income ledger.

    Flow for create_transaction:
    1. Validate -> raw input parsed, or ValidationError (no network)
    2. Fetch rate -> NBU sale rate for the date, with retries
    3. Convert -> amount_local = amount * rate, must stay finite
    4. Commit -> id above the store's high-water mark, appended

    Each call starts fresh; a failure leaves the service ready for
    the next request.
    """

    def __init__(
        self,
        store: Optional[TransactionStorageInterface] = None,
        rate_fetcher: Optional[RateFetcher] = None,
        aggregator: Optional[QuarterAggregator] = None,
        validator: Optional[TransactionInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store if store is not None else InMemoryTransactionStorage()
        self._rate_fetcher = rate_fetcher or RateFetcher()
        self._aggregator = aggregator or QuarterAggregator()
        self._validator = validator or TransactionInputValidator()
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

        # Ids are never reused, even after deletion
        self._last_id = 0

    @property
    def store(self) -> TransactionStorageInterface:
        return self._store

    def _next_id(self) -> int:
        # The store may be shared; its high-water mark wins
        self._last_id = max(self._last_id, self._store.max_id()) + 1
        return self._last_id

    async def create_transaction(
        self,
        on_date: Union[date, str],
        amount: Any,
        currency_code: str,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Record a foreign-currency income.

        Args:
            on_date: Date received (date or YYYY-MM-DD text)
            amount: Positive amount in the foreign currency
            currency_code: Currency code, e.g. "USD"

        Returns:
            The stored Transaction

        Raises:
            ValidationError: Input rejected (before the rate lookup), or
                the converted amount overflows; nothing stored
            RateFetchError: Rate could not be obtained; nothing stored
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            self._audit_logger.log_transaction_requested(
                raw_date=on_date,
                raw_amount=amount,
                raw_currency=currency_code,
                correlation_id=correlation_id,
            )

        # Step 1: Validate
        try:
            parsed = self._validator.validate_or_raise(on_date, amount, currency_code)
        except ValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    issues=[self._issue_dict(i) for i in e.issues],
                    correlation_id=correlation_id,
                )
            raise

        api_date = format_date_for_api(parsed.on_date)

        # Step 2: Fetch rate
        try:
            rate = await self._rate_fetcher.fetch_rate(api_date, parsed.currency)
        except RateFetchError as e:
            if self._audit_logger:
                self._audit_logger.log_rate_fetch_failed(
                    currency=parsed.currency,
                    api_date=api_date,
                    error_message=e.cause,
                    correlation_id=correlation_id,
                )
            raise
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"step": "fetch_rate", "currency": parsed.currency, "date": api_date},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_rate_fetched(
                currency=parsed.currency,
                api_date=api_date,
                rate=rate,
                correlation_id=correlation_id,
            )

        # Step 3: Convert
        try:
            self._validator.check_conversion(parsed.amount, rate)
        except ValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    issues=[self._issue_dict(i) for i in e.issues],
                    correlation_id=correlation_id,
                )
            raise

        # Step 4: Commit
        transaction = Transaction.create(
            transaction_id=self._next_id(),
            on_date=parsed.on_date,
            currency=parsed.currency,
            amount=parsed.amount,
            rate=rate,
        )
        self._store.add(transaction)

        self._logger.info(
            "transaction_created",
            transaction_id=transaction.id,
            currency=transaction.currency,
            amount=transaction.amount,
            rate=transaction.rate,
            amount_local=transaction.amount_local,
        )
        if self._audit_logger:
            self._audit_logger.log_transaction_created(
                transaction_id=transaction.id,
                currency=transaction.currency,
                amount=transaction.amount,
                rate=transaction.rate,
                amount_local=transaction.amount_local,
                correlation_id=correlation_id,
            )

        return transaction

    def delete_transaction(
        self,
        transaction_id: int,
        confirmed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a transaction the user has confirmed removing.

        CRITICAL: Call this ONLY after the user confirmed the deletion.

        Returns:
            True if removed, False if no such transaction existed
            (the ledger is unchanged)

        Raises:
            ValidationError: If the deletion was not confirmed
        """
        if not confirmed:
            raise ValidationError(
                [ValidationIssue(
                    field="confirmed",
                    issue_type="missing",
                    message="Deletion must be confirmed by the user.",
                )],
                message="Deletion must be confirmed by the user.",
            )

        removed = self._store.remove(transaction_id)

        if removed:
            self._logger.info("transaction_deleted", transaction_id=transaction_id)
            if self._audit_logger:
                self._audit_logger.log_transaction_deleted(
                    transaction_id=transaction_id,
                    correlation_id=correlation_id,
                )
        else:
            self._logger.warning("delete_not_found", transaction_id=transaction_id)
            if self._audit_logger:
                self._audit_logger.log_delete_not_found(
                    transaction_id=transaction_id,
                    correlation_id=correlation_id,
                )

        return removed

    def list_transactions(self) -> list[Transaction]:
        """Ledger snapshot, most recent date first."""
        return self._store.list()

    def summarize(self) -> QuarterlySummary:
        """Quarterly totals over the current ledger."""
        return self._aggregator.summarize(self._store.list())

    @staticmethod
    def _issue_dict(issue: ValidationIssue) -> dict:
        return {"field": issue.field, "type": issue.issue_type, "message": issue.message}


def create_app_components(
    store: Optional[TransactionStorageInterface] = None,
) -> tuple[TransactionService, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        store: Ledger to use. A fresh in-memory ledger when omitted,
               so every caller gets an independent ledger.

    Returns:
        (transaction_service, audit_logger)
    """
    settings = get_settings()
    audit_logger = AuditLogger(buffer_size=settings.app.audit_buffer_size)

    service = TransactionService(
        store=store,
        rate_fetcher=RateFetcher(),
        audit_logger=audit_logger,
    )

    return service, audit_logger
