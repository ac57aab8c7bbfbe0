"""
Quarterly Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and STATELESS.
Every call recomputes from the transactions it is given. There is no
cache, so there is nothing to invalidate when the ledger changes.

The overall total sums every loaded transaction regardless of year.
Calendar-year totals are available separately via `per_year`.
"""

from collections.abc import Iterable
from datetime import date

from income_ledger.models.transaction import (
    QuarterKey,
    QuarterlySummary,
    QuarterTotal,
    Transaction,
)


def quarter_of(value: date) -> QuarterKey:
    """Calendar quarter a date falls in."""
    return QuarterKey.from_date(value)


class QuarterAggregator:
    """
    Groups transactions by calendar quarter and sums local amounts.

    GUARANTEES:
    - Only sums what it is given; never estimates
    - Quarters ordered most recent first
    - Empty input gives an empty summary with a zero total
    """

    def summarize(self, transactions: Iterable[Transaction]) -> QuarterlySummary:
        totals: dict[QuarterKey, float] = {}
        counts: dict[QuarterKey, int] = {}

        for transaction in transactions:
            key = quarter_of(transaction.date)
            totals[key] = totals.get(key, 0.0) + transaction.amount_local
            counts[key] = counts.get(key, 0) + 1

        quarters = [
            QuarterTotal(
                year=key.year,
                quarter=key.quarter,
                total_local=totals[key],
                transaction_count=counts[key],
            )
            for key in sorted(totals, reverse=True)
        ]

        return QuarterlySummary(
            quarters=quarters,
            annual_total=sum(q.total_local for q in quarters),
        )
