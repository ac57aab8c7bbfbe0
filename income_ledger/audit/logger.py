"""
Audit Logger

DESIGN DECISION: Every significant action in the ledger is logged.
This provides:
1. Traceability of every transaction and the rate behind it
2. Debugging capability when the rate API misbehaves
3. A session history the user can review

The audit logger:
- Always logs locally through structlog
- Keeps a bounded in-memory buffer of recent events (no persistence)
- Supports correlation IDs to trace related events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from income_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory buffer (for the session history view)
    """

    def __init__(self, buffer_size: int = 200):
        """
        Initialize audit logger.

        Args:
            buffer_size: How many recent events to retain. 0 disables
                        the buffer; events are still logged locally.
        """
        self._events: deque[AuditEvent] = deque(maxlen=buffer_size)
        self._logger = structlog.get_logger("income_ledger.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._events.append(event)

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(reversed(self._events))
        return events if limit is None else events[:limit]

    def events_for(self, correlation_id: UUID) -> list[AuditEvent]:
        """All buffered events of one request, in chronological order."""
        return [e for e in self._events if e.correlation_id == correlation_id]

    def log_transaction_requested(
        self,
        raw_date,
        raw_amount,
        raw_currency,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transaction_requested(
            raw_date=raw_date,
            raw_amount=raw_amount,
            raw_currency=raw_currency,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_rate_fetched(
        self,
        currency: str,
        api_date: str,
        rate: float,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.rate_fetched(
            currency=currency,
            api_date=api_date,
            rate=rate,
            correlation_id=correlation_id,
        ))

    def log_rate_fetch_failed(
        self,
        currency: str,
        api_date: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.rate_fetch_failed(
            currency=currency,
            api_date=api_date,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_transaction_created(
        self,
        transaction_id: int,
        currency: str,
        amount: float,
        rate: float,
        amount_local: float,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transaction_created(
            transaction_id=transaction_id,
            currency=currency,
            amount=amount,
            rate=rate,
            amount_local=amount_local,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_delete_not_found(
        self,
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.delete_not_found(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding income).
    Pass it through all subsequent operations.
    """
    return uuid4()
