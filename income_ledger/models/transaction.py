"""
Core Data Models for Income Ledger

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Provide clear validation error messages
3. Be serializable for logging and display

DESIGN DECISION: Transactions are frozen. There is no update-in-place;
a correction is a delete followed by a new transaction.
"""

import math
import datetime as dt
from typing import NamedTuple, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# QUARTERS
# =============================================================================

class QuarterKey(NamedTuple):
    """
    Aggregation key for a calendar quarter.

    Tuple ordering gives chronological order, so sorting keys in
    reverse puts the most recent quarter first.
    """
    year: int
    quarter: int

    @classmethod
    def from_date(cls, value: dt.date) -> "QuarterKey":
        return cls(value.year, (value.month - 1) // 3 + 1)

    @property
    def label(self) -> str:
        return f"{self.year} Q{self.quarter}"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A foreign-currency income record converted to local currency.

    CRITICAL: Only TransactionService creates these, and only after
    a rate was fetched successfully. `amount_local` is stored rather
    than recomputed so it stays stable if upstream rates change.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique, monotonically assigned identifier"
    )
    date: dt.date = Field(
        ...,
        description="Date the income was received"
    )
    currency: str = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Foreign currency code (e.g. USD)"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in foreign currency"
    )
    rate: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Local currency per one unit of foreign currency"
    )
    amount_local: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="amount * rate, computed at creation"
    )
    created_at: dt.datetime = Field(
        default_factory=dt.datetime.utcnow,
        description="When the transaction was recorded"
    )

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode='after')
    def validate_local_amount(self) -> 'Transaction':
        """amount_local must agree with amount * rate."""
        if not math.isclose(self.amount_local, self.amount * self.rate, rel_tol=1e-9):
            raise ValueError("amount_local must equal amount * rate")
        return self

    @classmethod
    def create(
        cls,
        transaction_id: int,
        on_date: dt.date,
        currency: str,
        amount: float,
        rate: float,
    ) -> "Transaction":
        """Build a transaction, deriving the local amount."""
        return cls(
            id=transaction_id,
            date=on_date,
            currency=currency,
            amount=amount,
            rate=rate,
            amount_local=amount * rate,
        )

    @property
    def quarter(self) -> QuarterKey:
        return QuarterKey.from_date(self.date)


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class QuarterTotal(BaseModel):
    """Local-currency total for one calendar quarter."""

    year: int
    quarter: int = Field(ge=1, le=4)
    total_local: float = 0.0
    transaction_count: int = Field(default=0, ge=0)

    @property
    def key(self) -> QuarterKey:
        return QuarterKey(self.year, self.quarter)

    @property
    def label(self) -> str:
        return self.key.label


class QuarterlySummary(BaseModel):
    """
    Result of aggregating the ledger by quarter.

    `quarters` is ordered most recent first. `annual_total` is the sum
    over every loaded transaction, regardless of year; use `per_year`
    for calendar-year totals.
    """

    quarters: list[QuarterTotal] = Field(default_factory=list)
    annual_total: float = 0.0

    @property
    def per_quarter(self) -> dict[QuarterKey, float]:
        return {q.key: q.total_local for q in self.quarters}

    @property
    def per_year(self) -> dict[int, float]:
        totals: dict[int, float] = {}
        for q in self.quarters:
            totals[q.year] = totals.get(q.year, 0.0) + q.total_local
        return totals

    @property
    def is_empty(self) -> bool:
        return not self.quarters


# =============================================================================
# UPSTREAM PAYLOAD MODELS
# =============================================================================

class ExchangeRateEntry(BaseModel):
    """
    One currency entry from the PrivatBank exchange_rates payload.

    Every field is optional: a malformed entry is reported by the
    rate fetcher with a specific message instead of a schema error.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base_currency: Optional[str] = Field(default=None, alias="baseCurrency")
    currency: Optional[str] = None
    sale_rate_nb: Optional[float] = Field(default=None, alias="saleRateNB")
    purchase_rate_nb: Optional[float] = Field(default=None, alias="purchaseRateNB")
    sale_rate: Optional[float] = Field(default=None, alias="saleRate")
    purchase_rate: Optional[float] = Field(default=None, alias="purchaseRate")


class ExchangeRateResponse(BaseModel):
    """The PrivatBank exchange_rates payload for one date."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: Optional[str] = None
    bank: Optional[str] = None
    base_currency_lit: Optional[str] = Field(default=None, alias="baseCurrencyLit")
    exchange_rate: list[ExchangeRateEntry] = Field(
        default_factory=list,
        alias="exchangeRate",
    )

    @field_validator('exchange_rate', mode='before')
    @classmethod
    def null_to_empty(cls, v):
        return v or []

    def find(self, currency_code: str) -> Optional[ExchangeRateEntry]:
        """First entry for the currency, or None."""
        for entry in self.exchange_rate:
            if entry.currency == currency_code:
                return entry
        return None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of checking raw transaction input."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    # Parsed values, present only when is_valid
    on_date: Optional[dt.date] = None
    amount: Optional[float] = None
    currency: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
