"""
Resilient NBU Rate Lookup

RateFetcher turns "give me the USD rate for 15.01.2025" into a single
positive number, or a single RateFetchError.

RETRY POLICY:
- Up to `max_attempts` attempts (3 by default)
- After failed attempt i (0-indexed) wait 2**i * base + jitter,
  jitter uniform in [0, max_jitter)
- No wait after the last attempt
- Every failure is retryable: network error, bad status, bad payload,
  missing currency, non-positive rate

Individual attempt failures are logged but never surfaced. Only the
final outcome reaches the caller.
"""

import asyncio
import math
import random
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from income_ledger.config import get_settings
from income_ledger.services.rates.privatbank_client import (
    ExchangeRateSource,
    PrivatBankClient,
    RateFetchError,
)


class wait_jitter(wait_base):
    """Uniform jitter in [0, max_jitter); the upper bound is never returned."""

    def __init__(self, max_jitter: float) -> None:
        self.max_jitter = max_jitter

    def __call__(self, retry_state: RetryCallState) -> float:
        if self.max_jitter <= 0:
            return 0.0
        # random() * max can round up to max
        return min(random.random() * self.max_jitter, math.nextafter(self.max_jitter, 0.0))


class RetryPolicy(BaseModel):
    """Retry budget and backoff shape for rate lookups."""
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0.0)
    max_jitter_seconds: float = Field(default=0.5, ge=0.0)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        settings = get_settings().privatbank
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.base_delay_seconds,
            max_jitter_seconds=settings.max_jitter_seconds,
        )

    def wait_strategy(self):
        """tenacity wait: 2**i * base plus uniform jitter."""
        return (
            wait_exponential(multiplier=self.base_delay_seconds, exp_base=2, min=0)
            + wait_jitter(self.max_jitter_seconds)
        )


class RateFetcher:
    """
    Fetches the NBU sale rate for a currency on a date.

    The sleep function is injectable so tests can observe backoff
    without actually waiting.
    """

    def __init__(
        self,
        source: Optional[ExchangeRateSource] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._source = source or PrivatBankClient()
        self._policy = policy or RetryPolicy.from_settings()
        self._sleep = sleep or asyncio.sleep
        self._logger = structlog.get_logger(__name__)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "rate_fetch_attempt_failed",
            attempt=retry_state.attempt_number,
            max_attempts=self._policy.max_attempts,
            error=str(exc),
            wait_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._policy.max_attempts),
            wait=self._policy.wait_strategy(),
            retry=retry_if_exception_type(RateFetchError),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    async def _fetch_once(self, api_date: str, currency_code: str) -> float:
        """One attempt: request the table and pick out the sale rate."""
        payload = await self._source.get_exchange_rates(api_date)

        if not payload.exchange_rate:
            raise RateFetchError("API response does not contain exchange rates.")

        entry = payload.find(currency_code)
        if entry is None:
            raise RateFetchError(
                f"Rate for currency {currency_code} on {api_date} not found."
            )

        rate = entry.sale_rate_nb
        if rate is None or not math.isfinite(rate) or rate <= 0:
            raise RateFetchError(
                f"Received invalid NBU rate ({rate}) for {currency_code}."
            )

        return rate

    async def fetch_rate(self, api_date: str, currency_code: str) -> float:
        """
        Resolve the NBU sale rate, retrying per the policy.

        Args:
            api_date: Date in DD.MM.YYYY form (see format_date_for_api)
            currency_code: Currency code as quoted by the bank (e.g. USD)

        Returns:
            The positive `saleRateNB` value for the currency

        Raises:
            RateFetchError: After the last attempt fails; `cause` holds
                the last attempt's message
        """
        attempts = 0
        try:
            async for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    rate = await self._fetch_once(api_date, currency_code)
                    self._logger.info(
                        "rate_fetched",
                        currency=currency_code,
                        date=api_date,
                        rate=rate,
                        attempts=attempts,
                    )
                    return rate
        except RateFetchError as e:
            self._logger.error(
                "rate_fetch_exhausted",
                currency=currency_code,
                date=api_date,
                attempts=attempts,
                error=str(e),
            )
            raise RateFetchError(
                f"Could not fetch rate from PrivatBank API. {e}",
                cause=str(e),
                attempts=attempts,
            ) from e
