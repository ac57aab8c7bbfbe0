"""
Shared fixtures for Income Ledger tests.

No real API calls in tests: the upstream rate source is replaced by
a scripted fake, and backoff sleeps are recorded instead of awaited.
"""

from datetime import date

import pytest

from income_ledger.models.transaction import ExchangeRateResponse, Transaction
from income_ledger.services.rates import (
    ExchangeRateSource,
    RateFetcher,
    RateFetchError,
    RetryPolicy,
)
from income_ledger.services.storage import InMemoryTransactionStorage


def make_payload(rates: dict[str, float], api_date: str = "15.01.2025") -> dict:
    """Build a payload shaped like the PrivatBank exchange_rates response."""
    return {
        "date": api_date,
        "bank": "PB",
        "baseCurrency": 980,
        "baseCurrencyLit": "UAH",
        "exchangeRate": [
            {
                "baseCurrency": "UAH",
                "currency": code,
                "saleRateNB": rate,
                "purchaseRateNB": rate,
            }
            for code, rate in rates.items()
        ],
    }


class FakeRateSource(ExchangeRateSource):
    """
    Plays back scripted outcomes, one per call.

    Each outcome is either an exception instance (raised) or a payload
    dict (validated into ExchangeRateResponse). The last outcome repeats
    once the script runs out.
    """

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls: list[str] = []

    async def get_exchange_rates(self, api_date: str) -> ExchangeRateResponse:
        self.calls.append(api_date)
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return ExchangeRateResponse.model_validate(outcome)


class RecordingSleep:
    """Async sleep replacement that only records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay_seconds=1.0, max_jitter_seconds=0.5)


@pytest.fixture
def make_fetcher(policy, recording_sleep):
    """Build a RateFetcher over a FakeRateSource scripted with the given outcomes."""

    def _make(*outcomes) -> tuple[RateFetcher, FakeRateSource]:
        source = FakeRateSource(*outcomes)
        return RateFetcher(source=source, policy=policy, sleep=recording_sleep), source

    return _make


@pytest.fixture
def store() -> InMemoryTransactionStorage:
    return InMemoryTransactionStorage()


def make_transaction(
    transaction_id: int,
    on_date: date,
    amount_local: float = 100.0,
    currency: str = "USD",
    rate: float = 40.0,
) -> Transaction:
    """Transaction whose local amount is exactly `amount_local`."""
    return Transaction.create(
        transaction_id=transaction_id,
        on_date=on_date,
        currency=currency,
        amount=amount_local / rate,
        rate=rate,
    )


NETWORK_DOWN = RateFetchError("Network error: connection refused")


@pytest.fixture
def payload():
    """Factory fixture for upstream payload dicts."""
    return make_payload


@pytest.fixture
def transaction_factory():
    """Factory fixture for ready-made transactions."""
    return make_transaction


@pytest.fixture
def fake_source():
    """Factory fixture for scripted rate sources."""
    return FakeRateSource


@pytest.fixture
def network_down() -> RateFetchError:
    return NETWORK_DOWN
