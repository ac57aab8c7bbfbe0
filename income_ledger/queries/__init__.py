"""Aggregation queries package."""

from income_ledger.queries.aggregator import QuarterAggregator, quarter_of

__all__ = ["QuarterAggregator", "quarter_of"]
