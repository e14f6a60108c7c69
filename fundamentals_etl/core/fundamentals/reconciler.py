"""Merge income and balance sheet series by fiscal year."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from fundamentals_etl.core.fundamentals.models import (
    BalanceRecord,
    IncomeRecord,
    ReconciledYear,
    ReconcileResult,
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_YEARS = 3


def resolve_year_limit(
    today: date | None = None,
    lookback_years: int = DEFAULT_LOOKBACK_YEARS,
) -> int:
    """Oldest fiscal year kept by the trailing window.

    Args:
        today: Reference date (defaults to today)
        lookback_years: Number of calendar years to look back

    Returns:
        ``today.year - lookback_years``
    """
    today = today or date.today()
    return today.year - lookback_years


def reconcile_years(
    symbol: str,
    income: Iterable[IncomeRecord],
    balance: Iterable[BalanceRecord],
    year_limit: int,
) -> ReconcileResult:
    """Combine income and balance records for one company.

    One row is produced per income year >= ``year_limit`` that has a balance
    sheet for the same year. Income years without a balance counterpart are
    skipped. If a series repeats a year, the last record wins.

    Args:
        symbol: Stock ticker (for logging and the result)
        income: Normalized income records
        balance: Normalized balance records
        year_limit: Oldest fiscal year to keep

    Returns:
        ReconcileResult with rows sorted by fiscal year ascending
    """
    income_by_year = {record.fiscal_year: record for record in income}
    balance_by_year = {record.fiscal_year: record for record in balance}

    result = ReconcileResult(symbol=symbol)

    for year in sorted(income_by_year):
        if year < year_limit:
            result.excluded_years.append(year)
            continue

        bal = balance_by_year.get(year)
        if bal is None:
            logger.info(f"{symbol}: missing balance sheet for {year}, skipping")
            result.skipped_years.append(year)
            continue

        inc = income_by_year[year]
        result.rows.append(
            ReconciledYear(
                fiscal_year=year,
                revenue=inc.revenue,
                net_income=inc.net_income,
                total_assets=bal.total_assets,
                total_liabilities=bal.total_liabilities,
            )
        )

    return result
