"""Alpha Vantage API client."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Protocol

import requests

from fundamentals_etl.domain.exceptions import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"


class StatementKind(str, Enum):
    """Statement kinds served by the upstream API."""

    INCOME = "income"
    BALANCE = "balance"
    CASH_FLOW = "cashflow"

    @property
    def function_name(self) -> str:
        """Alpha Vantage ``function`` query parameter."""
        return _FUNCTION_NAMES[self]


_FUNCTION_NAMES = {
    StatementKind.INCOME: "INCOME_STATEMENT",
    StatementKind.BALANCE: "BALANCE_SHEET",
    StatementKind.CASH_FLOW: "CASH_FLOW",
}


class StatementClient(Protocol):
    """Protocol for an upstream statement fetcher.

    Degraded responses (rate limit, informational message, no data) are all
    returned as an empty list.
    """

    def fetch_annual_reports(self, symbol: str, kind: StatementKind) -> list[dict[str, Any]]:
        """Fetch the annual reports of one statement kind for a symbol."""
        ...


class ApiCallLog(Protocol):
    """Protocol for the per-day API call counter."""

    def get_api_calls_today(self) -> int:
        ...

    def increment_api_calls(self, count: int = 1) -> int:
        ...


def extract_annual_reports(symbol: str, kind: StatementKind, data: Any) -> list[dict[str, Any]]:
    """Pull ``annualReports`` out of a decoded response, or [] if degraded.

    Args:
        symbol: Stock ticker (for logging)
        kind: Statement kind (for logging)
        data: Decoded JSON body

    Returns:
        List of raw annual report dicts
    """
    if not isinstance(data, dict):
        logger.warning(f"Unexpected {kind.value} payload for {symbol}: {type(data).__name__}")
        return []

    if "Note" in data:
        logger.warning(f"Alpha Vantage rate limit reached for {symbol}: {data['Note']}")
        return []

    if "Information" in data:
        logger.warning(f"Alpha Vantage info for {symbol}: {data['Information']}")
        return []

    if "Error Message" in data:
        logger.warning(f"Alpha Vantage error for {symbol}: {data['Error Message']}")
        return []

    reports = data.get("annualReports")
    if not isinstance(reports, list) or not reports:
        logger.warning(f"No {kind.value} data returned from API for {symbol}")
        return []

    return [report for report in reports if isinstance(report, dict)]


class RealAlphaVantageClient:
    """Real Alpha Vantage API client with rate limiting."""

    def __init__(
        self,
        api_key: str,
        call_log: ApiCallLog | None = None,
        daily_limit: int = 25,
        request_delay: float = 12.0,  # ~5 requests/minute for free tier
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            api_key: Alpha Vantage API key
            call_log: Optional per-day call counter; without one the daily
                limit is not enforced
            daily_limit: Maximum API calls per day
            request_delay: Minimum seconds between requests
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.call_log = call_log
        self.daily_limit = daily_limit
        self.request_delay = request_delay
        self.timeout = timeout
        self._last_request_time: float = 0

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.request_delay:
            time.sleep(self.request_delay - elapsed)
        self._last_request_time = time.time()

    def _check_daily_limit(self) -> bool:
        """Check if daily API limit has been reached.

        Returns:
            True if we can make more calls, False if limit reached
        """
        if self.call_log is None:
            return True
        try:
            return self.call_log.get_api_calls_today() < self.daily_limit
        except StorageReadError as e:
            logger.warning(f"Could not read API call count, assuming quota left: {e}")
            return True

    def _record_call(self) -> None:
        if self.call_log is None:
            return
        try:
            self.call_log.increment_api_calls()
        except StorageWriteError as e:
            logger.warning(f"Could not record API call: {e}")

    def fetch_annual_reports(self, symbol: str, kind: StatementKind) -> list[dict[str, Any]]:
        """Fetch annual reports for a symbol.

        Args:
            symbol: Stock ticker
            kind: Statement kind to fetch

        Returns:
            Raw annual report dicts (newest first, as served), or [] if the
            response was degraded or the request failed
        """
        if not self._check_daily_limit():
            logger.warning(
                f"Daily Alpha Vantage limit ({self.daily_limit}) reached, "
                f"not fetching {kind.value} for {symbol}"
            )
            return []

        self._rate_limit()

        params = {
            "function": kind.function_name,
            "symbol": symbol,
            "apikey": self.api_key,
        }

        try:
            response = requests.get(ALPHA_VANTAGE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.warning(f"Timed out fetching {kind.value} for {symbol} after {self.timeout}s")
            return []
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching {kind.value} for {symbol}: {e}")
            return []

        self._record_call()
        return extract_annual_reports(symbol, kind, data)
