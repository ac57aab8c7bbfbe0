"""
PrivatBank Exchange Rate Client

Thin adapter over the public PrivatBank archive endpoint:

    GET https://api.privatbank.ua/p24api/exchange_rates?date=DD.MM.YYYY

The response lists every currency PrivatBank quotes for that day, each
with the National Bank (NBU) sale and purchase rates.

This client performs exactly ONE request per call, in a worker thread
so the blocking `requests` call does not stall the event loop. Retries, backoff and
rate selection belong to RateFetcher. Every failure surfaces as a
RateFetchError so the retry policy can treat them uniformly.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

import requests
import structlog
from pydantic import ValidationError as PydanticValidationError

from income_ledger.config import get_settings
from income_ledger.models.transaction import ExchangeRateResponse


class RateFetchError(Exception):
    """
    Exchange rate could not be obtained.

    Raised per attempt by the client and, after retries are exhausted,
    by RateFetcher with the last attempt's message as `cause`.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[str] = None,
        attempts: Optional[int] = None,
    ):
        self.cause = cause or message
        self.attempts = attempts
        super().__init__(message)


def format_date_for_api(value: date) -> str:
    """Format a date the way the exchange_rates endpoint expects (DD.MM.YYYY)."""
    return value.strftime("%d.%m.%Y")


class ExchangeRateSource(ABC):
    """Anything that can return the exchange-rate table for a date."""

    @abstractmethod
    async def get_exchange_rates(self, api_date: str) -> ExchangeRateResponse:
        """
        Fetch the rate table for one date.

        Args:
            api_date: Date in DD.MM.YYYY form

        Raises:
            RateFetchError: On any transport, status or format failure
        """
        pass


class PrivatBankClient(ExchangeRateSource):
    """
    HTTP client for the PrivatBank exchange_rates endpoint.

    The endpoint URL is configurable so a forwarding proxy can sit in
    front of the bank API without code changes.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings().privatbank
        self._api_url = api_url or settings.api_url
        self._timeout = timeout_seconds or settings.timeout_seconds
        self._session = session
        self._logger = structlog.get_logger(__name__)

    def _get(self, api_date: str) -> requests.Response:
        params = {"date": api_date}
        headers = {"Accept": "application/json"}
        if self._session is not None:
            return self._session.get(
                self._api_url, params=params, headers=headers, timeout=self._timeout
            )
        return requests.get(
            self._api_url, params=params, headers=headers, timeout=self._timeout
        )

    async def get_exchange_rates(self, api_date: str) -> ExchangeRateResponse:
        self._logger.debug("privatbank_request", url=self._api_url, date=api_date)

        try:
            response = await asyncio.to_thread(self._get, api_date)
        except requests.RequestException as e:
            raise RateFetchError(f"Network error: {e}") from e

        if not response.ok:
            raise RateFetchError(f"Network or API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise RateFetchError("API response is not valid JSON.") from e

        if not isinstance(payload, dict):
            raise RateFetchError("API response does not contain exchange rates.")

        try:
            return ExchangeRateResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise RateFetchError(
                f"API response has an unexpected format ({e.error_count()} error(s))."
            ) from e
