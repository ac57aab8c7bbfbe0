"""
Tests for RateFetcher retry and response validation.

Backoff is observed through an injected sleep that records delays;
nothing actually waits.
"""

import asyncio
from datetime import date
from unittest.mock import patch

import pytest

from income_ledger.services.rates import (
    RateFetcher,
    RateFetchError,
    RetryPolicy,
    format_date_for_api,
)
from income_ledger.services.rates.rate_fetcher import wait_jitter


class TestFormatDateForApi:

    def test_day_month_year(self):
        assert format_date_for_api(date(2025, 1, 5)) == "05.01.2025"

    def test_end_of_year(self):
        assert format_date_for_api(date(2024, 12, 31)) == "31.12.2024"


class TestRateFetcherSuccess:

    def test_returns_sale_rate_nb(self, make_fetcher, payload, recording_sleep):
        fetcher, source = make_fetcher(payload({"USD": 41.9, "EUR": 43.5}))

        rate = asyncio.run(fetcher.fetch_rate("15.01.2025", "EUR"))

        assert rate == 43.5
        assert source.calls == ["15.01.2025"]
        assert recording_sleep.delays == []

    def test_succeeds_on_third_attempt_after_two_waits(
        self, make_fetcher, payload, network_down, recording_sleep
    ):
        """Two failures then success: exactly two backoff waits."""
        fetcher, source = make_fetcher(network_down, network_down, payload({"USD": 41.9}))

        rate = asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert rate == 41.9
        assert len(source.calls) == 3
        assert len(recording_sleep.delays) == 2

    def test_backoff_is_exponential_with_bounded_jitter(
        self, make_fetcher, payload, network_down, recording_sleep
    ):
        fetcher, _ = make_fetcher(network_down, network_down, payload({"USD": 41.9}))

        asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        first, second = recording_sleep.delays
        assert 1.0 <= first < 1.5
        assert 2.0 <= second < 2.5


class TestRateFetcherFailures:

    def test_exhausted_retries_raise_with_last_cause(
        self, make_fetcher, network_down, recording_sleep
    ):
        fetcher, source = make_fetcher(network_down)

        with pytest.raises(RateFetchError) as exc_info:
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        err = exc_info.value
        assert len(source.calls) == 3
        assert err.attempts == 3
        assert err.cause == "Network error: connection refused"
        assert str(err) == (
            "Could not fetch rate from PrivatBank API. Network error: connection refused"
        )

    def test_no_wait_after_last_attempt(self, make_fetcher, network_down, recording_sleep):
        fetcher, _ = make_fetcher(network_down)

        with pytest.raises(RateFetchError):
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert len(recording_sleep.delays) == 2

    def test_cause_is_from_last_attempt(self, make_fetcher, payload, network_down):
        fetcher, _ = make_fetcher(network_down, network_down, payload({"EUR": 43.5}))

        with pytest.raises(RateFetchError) as exc_info:
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert exc_info.value.cause == "Rate for currency USD on 15.01.2025 not found."

    def test_empty_rate_list(self, make_fetcher):
        fetcher, _ = make_fetcher({"date": "15.01.2025", "exchangeRate": []})

        with pytest.raises(RateFetchError) as exc_info:
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert exc_info.value.cause == "API response does not contain exchange rates."

    def test_missing_rate_list(self, make_fetcher):
        fetcher, _ = make_fetcher({"date": "15.01.2025"})

        with pytest.raises(RateFetchError, match="does not contain exchange rates"):
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

    @pytest.mark.parametrize(
        "bad_rate, shown",
        [(0, "0.0"), (-3.2, "-3.2"), (None, "None")],
    )
    def test_non_positive_or_absent_rate(self, make_fetcher, payload, bad_rate, shown):
        fetcher, source = make_fetcher(payload({"USD": bad_rate}))

        with pytest.raises(RateFetchError) as exc_info:
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert exc_info.value.cause == f"Received invalid NBU rate ({shown}) for USD."
        assert len(source.calls) == 3

    def test_unexpected_exceptions_are_not_retried(self, make_fetcher, recording_sleep):
        fetcher, source = make_fetcher(RuntimeError("bug"))

        with pytest.raises(RuntimeError, match="bug"):
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert len(source.calls) == 1
        assert recording_sleep.delays == []


class TestRetryPolicy:

    def test_single_attempt_policy_never_waits(self, fake_source, network_down, recording_sleep):
        source = fake_source(network_down)
        fetcher = RateFetcher(
            source=source,
            policy=RetryPolicy(max_attempts=1),
            sleep=recording_sleep,
        )

        with pytest.raises(RateFetchError) as exc_info:
            asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert exc_info.value.attempts == 1
        assert recording_sleep.delays == []

    def test_zero_jitter_gives_exact_delays(self, fake_source, network_down, payload, recording_sleep):
        source = fake_source(network_down, network_down, network_down, payload({"USD": 40.0}))
        fetcher = RateFetcher(
            source=source,
            policy=RetryPolicy(max_attempts=4, base_delay_seconds=1.0, max_jitter_seconds=0.0),
            sleep=recording_sleep,
        )

        asyncio.run(fetcher.fetch_rate("15.01.2025", "USD"))

        assert recording_sleep.delays == [1.0, 2.0, 4.0]

    def test_from_settings_defaults(self):
        policy = RetryPolicy.from_settings()
        assert policy.max_attempts == 3
        assert policy.base_delay_seconds == 1.0
        assert policy.max_jitter_seconds == 0.5


class TestWaitJitter:

    @pytest.mark.parametrize("max_jitter", [0.5, 0.3, 0.1])
    def test_upper_bound_is_never_returned(self, max_jitter):
        with patch("random.random", return_value=1.0 - 2 ** -53):
            value = wait_jitter(max_jitter)(None)
        assert 0.0 <= value < max_jitter

    def test_lower_bound(self):
        with patch("random.random", return_value=0.0):
            assert wait_jitter(0.5)(None) == 0.0

    def test_zero_jitter(self):
        assert wait_jitter(0.0)(None) == 0.0
