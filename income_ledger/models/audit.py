"""
Audit Models for Income Ledger

Every significant action in the ledger is logged for audit purposes.
This provides:
1. Traceability of how each transaction and its rate came to be
2. Debugging information when the rate API misbehaves
3. A history the user can review during the session

DESIGN DECISION: Audit logs are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transaction creation
    TRANSACTION_REQUESTED = "transaction_requested"
    VALIDATION_FAILED = "validation_failed"
    RATE_FETCHED = "rate_fetched"
    RATE_FETCH_FAILED = "rate_fetch_failed"
    TRANSACTION_CREATED = "transaction_created"

    # Deletion
    TRANSACTION_DELETED = "transaction_deleted"
    DELETE_NOT_FOUND = "delete_not_found"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'rate')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one add-income request)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_created(transaction, correlation_id)
        event = AuditEventBuilder.rate_fetch_failed("USD", "01.02.2025", msg, correlation_id)
    """

    @staticmethod
    def transaction_requested(
        raw_date: Any,
        raw_amount: Any,
        raw_currency: Any,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REQUESTED,
            entity_type="transaction",
            correlation_id=correlation_id,
            description="Income transaction requested",
            details={
                "date": str(raw_date),
                "amount": str(raw_amount),
                "currency": str(raw_currency),
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Input validation failed with {len(issues)} issue(s)",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def rate_fetched(
        currency: str,
        api_date: str,
        rate: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_FETCHED,
            entity_type="rate",
            entity_id=f"{currency}@{api_date}",
            correlation_id=correlation_id,
            description=f"NBU rate for {currency} on {api_date}: {rate}",
            details={
                "currency": currency,
                "date": api_date,
                "rate": rate,
            },
        )

    @staticmethod
    def rate_fetch_failed(
        currency: str,
        api_date: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="rate",
            entity_id=f"{currency}@{api_date}",
            correlation_id=correlation_id,
            description=f"Could not fetch rate for {currency} on {api_date}",
            error_message=error_message,
            details={
                "service": "privatbank",
                "currency": currency,
                "date": api_date,
            },
        )

    @staticmethod
    def transaction_created(
        transaction_id: int,
        currency: str,
        amount: float,
        rate: float,
        amount_local: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} recorded: {amount} {currency}",
            details={
                "currency": currency,
                "amount": amount,
                "rate": rate,
                "amount_local": amount_local,
            },
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} deleted",
            is_user_action=True,
        )

    @staticmethod
    def delete_not_found(
        transaction_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=str(transaction_id),
            correlation_id=correlation_id,
            description=f"Delete requested for unknown transaction {transaction_id}",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
