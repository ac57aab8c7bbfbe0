"""
Transaction Input Validation

DESIGN DECISION: Raw user input is checked in full BEFORE any network
call. A request that cannot possibly produce a transaction never costs
a rate lookup.

Checks:
- date: present and parseable (datetime.date or ISO YYYY-MM-DD text)
- amount: a finite number strictly greater than zero
- currency: non-empty code

All issues are collected and reported together, so the user can fix
the whole form in one go.

IMPORTANT: Validation NEVER silently fixes values beyond trivial
normalization (whitespace, upper-casing the currency code).
"""

import math
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import Any, Optional

from income_ledger.models.transaction import ValidationIssue, ValidationResult


class ValidationError(Exception):
    """User input cannot produce a transaction."""

    def __init__(self, issues: list[ValidationIssue], message: Optional[str] = None):
        self.issues = issues
        if message is None:
            message = "Please enter a valid date, amount and currency. " + " ".join(
                issue.message for issue in issues
            )
        super().__init__(message.strip())


class TransactionInputValidator:
    """Parses and checks the raw {date, amount, currency} triple."""

    def _parse_date(self, raw: Any) -> tuple[Optional[date], Optional[ValidationIssue]]:
        if isinstance(raw, datetime):
            return raw.date(), None
        if isinstance(raw, date):
            return raw, None
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required.",
            )
        if isinstance(raw, str):
            try:
                return date.fromisoformat(raw.strip()), None
            except ValueError:
                pass
        return None, ValidationIssue(
            field="date",
            issue_type="invalid_format",
            message=f"Date '{raw}' is not a valid YYYY-MM-DD date.",
        )

    def _parse_amount(self, raw: Any) -> tuple[Optional[float], Optional[ValidationIssue]]:
        value: Optional[float] = None
        # bool is an int subclass; True is not an amount
        if isinstance(raw, (Real, Decimal)) and not isinstance(raw, bool):
            value = float(raw)
        elif isinstance(raw, str) and raw.strip():
            try:
                value = float(raw.strip())
            except ValueError:
                value = None

        if value is None or not math.isfinite(value):
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount '{raw}' is not a number.",
            )
        if value <= 0:
            return None, ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Amount must be greater than zero.",
            )
        return value, None

    def _parse_currency(self, raw: Any) -> tuple[Optional[str], Optional[ValidationIssue]]:
        if not isinstance(raw, str) or not raw.strip():
            return None, ValidationIssue(
                field="currency",
                issue_type="missing",
                message="Currency is required.",
            )
        return raw.strip().upper(), None

    def validate(self, raw_date: Any, raw_amount: Any, raw_currency: Any) -> ValidationResult:
        """
        Check raw input and return parsed values.

        Returns:
            ValidationResult; parsed fields are set only when is_valid
        """
        on_date, date_issue = self._parse_date(raw_date)
        amount, amount_issue = self._parse_amount(raw_amount)
        currency, currency_issue = self._parse_currency(raw_currency)

        issues = [i for i in (date_issue, amount_issue, currency_issue) if i is not None]
        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        return ValidationResult(
            is_valid=True,
            on_date=on_date,
            amount=amount,
            currency=currency,
        )

    def validate_or_raise(self, raw_date: Any, raw_amount: Any, raw_currency: Any) -> ValidationResult:
        """Like validate(), but raises ValidationError on any issue."""
        result = self.validate(raw_date, raw_amount, raw_currency)
        if not result.is_valid:
            raise ValidationError(result.issues)
        return result

    def check_conversion(self, amount: float, rate: float) -> float:
        """
        Convert amount at rate, rejecting results that overflow.

        Only possible once the rate is known, so this runs after the
        lookup rather than in validate().
        """
        amount_local = amount * rate
        if not math.isfinite(amount_local):
            raise ValidationError([ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message=f"Amount {amount} is too large to convert at rate {rate}.",
            )])
        return amount_local
