"""
Data Models Package

This package contains all Pydantic models used in the Income Ledger system.
All data flowing through the system must conform to these schemas.
"""

from income_ledger.models.transaction import (
    ExchangeRateEntry,
    ExchangeRateResponse,
    QuarterKey,
    QuarterlySummary,
    QuarterTotal,
    Transaction,
    ValidationIssue,
    ValidationResult,
)
from income_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ExchangeRateEntry",
    "ExchangeRateResponse",
    "QuarterKey",
    "QuarterlySummary",
    "QuarterTotal",
    "Transaction",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
