"""Tests for quarterly aggregation."""

from datetime import date

import pytest

from income_ledger.models.transaction import QuarterKey
from income_ledger.queries import QuarterAggregator, quarter_of


@pytest.fixture
def aggregator() -> QuarterAggregator:
    return QuarterAggregator()


class TestQuarterAggregator:

    def test_empty_input(self, aggregator):
        summary = aggregator.summarize([])
        assert summary.per_quarter == {}
        assert summary.annual_total == 0.0
        assert summary.is_empty is True

    def test_groups_and_orders_quarters(self, aggregator, transaction_factory):
        """Q1 = 100 + 50, Q2 = 200, Q2 listed first."""
        transactions = [
            transaction_factory(1, date(2025, 1, 15), amount_local=100.0),
            transaction_factory(2, date(2025, 2, 10), amount_local=50.0),
            transaction_factory(3, date(2025, 4, 1), amount_local=200.0),
        ]

        summary = aggregator.summarize(transactions)

        assert summary.per_quarter == {
            QuarterKey(2025, 2): pytest.approx(200.0),
            QuarterKey(2025, 1): pytest.approx(150.0),
        }
        assert list(summary.per_quarter) == [QuarterKey(2025, 2), QuarterKey(2025, 1)]
        assert summary.annual_total == pytest.approx(350.0)

    def test_counts_transactions_per_quarter(self, aggregator, transaction_factory):
        summary = aggregator.summarize([
            transaction_factory(1, date(2025, 1, 15)),
            transaction_factory(2, date(2025, 3, 31)),
        ])
        assert summary.quarters[0].transaction_count == 2
        assert summary.quarters[0].label == "2025 Q1"

    def test_total_spans_all_years(self, aggregator, transaction_factory):
        """The overall total is not scoped to one calendar year."""
        summary = aggregator.summarize([
            transaction_factory(1, date(2024, 12, 31), amount_local=100.0),
            transaction_factory(2, date(2025, 1, 1), amount_local=40.0),
        ])

        assert [q.key for q in summary.quarters] == [QuarterKey(2025, 1), QuarterKey(2024, 4)]
        assert summary.annual_total == pytest.approx(140.0)
        assert summary.per_year == {2025: pytest.approx(40.0), 2024: pytest.approx(100.0)}

    def test_input_order_does_not_matter(self, aggregator, transaction_factory):
        items = [
            transaction_factory(1, date(2025, 7, 1), amount_local=10.0),
            transaction_factory(2, date(2025, 1, 1), amount_local=20.0),
            transaction_factory(3, date(2025, 10, 1), amount_local=30.0),
        ]
        forward = aggregator.summarize(items)
        backward = aggregator.summarize(list(reversed(items)))
        assert forward == backward

    def test_accepts_any_iterable(self, aggregator, transaction_factory):
        summary = aggregator.summarize(
            transaction_factory(i, date(2025, 5, i)) for i in range(1, 4)
        )
        assert summary.quarters[0].transaction_count == 3


def test_quarter_of():
    assert quarter_of(date(2025, 9, 30)) == QuarterKey(2025, 3)
    assert quarter_of(date(2025, 10, 1)) == QuarterKey(2025, 4)
