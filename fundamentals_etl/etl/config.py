"""Configuration for the fundamentals ETL pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from fundamentals_etl.core.config import env_bool, env_float, env_int
from fundamentals_etl.core.fundamentals.normalizer import (
    MissingValuePolicy,
    RevenueFieldPolicy,
)
from fundamentals_etl.core.fundamentals.reconciler import DEFAULT_LOOKBACK_YEARS
from fundamentals_etl.domain.exceptions import DataValidationError

logger = logging.getLogger(__name__)

# Environment variable names
ENV_ETL_SYMBOLS = "ETL_SYMBOLS"
ENV_ETL_COMPANY_NAMES = "ETL_COMPANY_NAMES"
ENV_ETL_COMPANY_DELAY_SECONDS = "ETL_COMPANY_DELAY_SECONDS"
ENV_ETL_LOOKBACK_YEARS = "ETL_LOOKBACK_YEARS"
ENV_ETL_REVENUE_POLICY = "ETL_REVENUE_POLICY"
ENV_ETL_MISSING_VALUES = "ETL_MISSING_VALUES"
ENV_ETL_FETCH_CASH_FLOW = "ETL_FETCH_CASH_FLOW"

DEFAULT_SYMBOLS = ("TEL", "ST", "DD")
DEFAULT_COMPANY_DELAY_SECONDS = 15.0


def parse_symbols(value: str) -> list[str]:
    """Parse "tel, st,DD" into ["TEL", "ST", "DD"], dropping blanks and duplicates."""
    symbols: list[str] = []
    for part in value.split(","):
        symbol = part.strip().upper()
        if symbol and symbol not in symbols:
            symbols.append(symbol)
    return symbols


def parse_company_names(value: str) -> dict[str, str]:
    """Parse "TEL=TE Connectivity;DD=DuPont" into a symbol -> name mapping."""
    names: dict[str, str] = {}
    for part in value.split(";"):
        symbol, sep, name = part.partition("=")
        if not sep or not symbol.strip() or not name.strip():
            continue
        names[symbol.strip().upper()] = name.strip()
    return names


@dataclass
class ETLConfig:
    """Configuration for one pipeline invocation.

    Attributes:
        symbols: Tickers to load, processed in order
        company_names: Display names by symbol (the symbol is used when absent)
        company_delay_seconds: Pause between companies to stay under the API quota
        lookback_years: Trailing window; fiscal years < current year - N are dropped
        revenue_policy: Which income field is read as revenue
        missing_values: Whether absent figures become null or zero
        fetch_cash_flow: Also fetch the cash flow statement (uses quota, not persisted)
    """

    symbols: list[str] = field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    company_names: dict[str, str] = field(default_factory=dict)
    company_delay_seconds: float = DEFAULT_COMPANY_DELAY_SECONDS
    lookback_years: int = DEFAULT_LOOKBACK_YEARS
    revenue_policy: RevenueFieldPolicy = RevenueFieldPolicy.TOTAL_REVENUE
    missing_values: MissingValuePolicy = MissingValuePolicy.NULL
    fetch_cash_flow: bool = False

    def __post_init__(self) -> None:
        """Normalize symbols and coerce string policies."""
        self.symbols = parse_symbols(",".join(self.symbols))
        if not isinstance(self.revenue_policy, RevenueFieldPolicy):
            self.revenue_policy = RevenueFieldPolicy.parse(str(self.revenue_policy))
        if not isinstance(self.missing_values, MissingValuePolicy):
            self.missing_values = MissingValuePolicy.parse(str(self.missing_values))
        if self.company_delay_seconds < 0:
            raise DataValidationError(
                "company_delay_seconds must be >= 0",
                field="company_delay_seconds",
                value=self.company_delay_seconds,
            )

    def company_name(self, symbol: str) -> str:
        return self.company_names.get(symbol, symbol)

    def to_dict(self) -> dict:
        return {
            "symbols": list(self.symbols),
            "company_delay_seconds": self.company_delay_seconds,
            "lookback_years": self.lookback_years,
            "revenue_policy": self.revenue_policy.value,
            "missing_values": self.missing_values.value,
            "fetch_cash_flow": self.fetch_cash_flow,
        }

    @classmethod
    def from_env(cls) -> ETLConfig:
        """Build a config from ETL_* environment variables.

        Unset variables keep their defaults; invalid policy names fall back
        to the default with a warning.
        """
        kwargs: dict = {}

        symbols = os.environ.get(ENV_ETL_SYMBOLS, "")
        if parse_symbols(symbols):
            kwargs["symbols"] = parse_symbols(symbols)

        names = os.environ.get(ENV_ETL_COMPANY_NAMES, "")
        if names:
            kwargs["company_names"] = parse_company_names(names)

        kwargs["company_delay_seconds"] = max(
            0.0, env_float(ENV_ETL_COMPANY_DELAY_SECONDS, DEFAULT_COMPANY_DELAY_SECONDS)
        )
        kwargs["lookback_years"] = env_int(ENV_ETL_LOOKBACK_YEARS, DEFAULT_LOOKBACK_YEARS)
        kwargs["fetch_cash_flow"] = env_bool(ENV_ETL_FETCH_CASH_FLOW, False)

        revenue_policy = os.environ.get(ENV_ETL_REVENUE_POLICY, "")
        if revenue_policy:
            try:
                kwargs["revenue_policy"] = RevenueFieldPolicy.parse(revenue_policy)
            except DataValidationError as e:
                logger.warning(f"{e}; using default")

        missing_values = os.environ.get(ENV_ETL_MISSING_VALUES, "")
        if missing_values:
            try:
                kwargs["missing_values"] = MissingValuePolicy.parse(missing_values)
            except DataValidationError as e:
                logger.warning(f"{e}; using default")

        return cls(**kwargs)
