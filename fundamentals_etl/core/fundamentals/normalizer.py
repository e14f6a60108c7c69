"""Normalization of raw Alpha Vantage annual reports into typed records."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from fundamentals_etl.core.fundamentals.models import BalanceRecord, IncomeRecord
from fundamentals_etl.core.numeric import parse_fiscal_year, parse_number
from fundamentals_etl.domain.exceptions import DataValidationError

logger = logging.getLogger(__name__)

FISCAL_DATE_FIELD = "fiscalDateEnding"
TOTAL_REVENUE_FIELD = "totalRevenue"
GROSS_PROFIT_FIELD = "grossProfit"
NET_INCOME_FIELD = "netIncome"
TOTAL_ASSETS_FIELD = "totalAssets"
TOTAL_LIABILITIES_FIELD = "totalLiabilities"


class RevenueFieldPolicy(str, Enum):
    """Which income statement field is read as revenue.

    Some filings omit totalRevenue, in which case grossProfit is used as a
    proxy. The primary field always wins when both are present.
    """

    TOTAL_REVENUE = "total_revenue"  # totalRevenue, fallback grossProfit
    GROSS_PROFIT = "gross_profit"  # grossProfit, fallback totalRevenue

    @property
    def field_order(self) -> tuple[str, str]:
        if self is RevenueFieldPolicy.GROSS_PROFIT:
            return (GROSS_PROFIT_FIELD, TOTAL_REVENUE_FIELD)
        return (TOTAL_REVENUE_FIELD, GROSS_PROFIT_FIELD)

    @classmethod
    def parse(cls, name: str) -> RevenueFieldPolicy:
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            raise DataValidationError(
                f"Unknown revenue policy: {name!r}. Must be one of: {[p.value for p in cls]}",
                field="revenue_policy",
                value=name,
            ) from e


class MissingValuePolicy(str, Enum):
    """What an absent or unparseable figure normalizes to."""

    NULL = "null"  # Keep "unknown" distinct from zero
    ZERO = "zero"  # Treat unknown as 0

    @property
    def default(self) -> float | None:
        return 0.0 if self is MissingValuePolicy.ZERO else None

    @classmethod
    def parse(cls, name: str) -> MissingValuePolicy:
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            raise DataValidationError(
                f"Unknown missing value policy: {name!r}. Must be one of: {[p.value for p in cls]}",
                field="missing_values",
                value=name,
            ) from e


def _select_revenue(
    report: dict[str, Any],
    policy: RevenueFieldPolicy,
    missing: MissingValuePolicy,
) -> tuple[float | None, str | None]:
    """Read revenue following the policy's field order.

    Returns:
        Tuple of (revenue, name of the field used)
    """
    for field_name in policy.field_order:
        value = parse_number(report.get(field_name))
        if value is not None:
            return value, field_name
    return missing.default, None


def normalize_income_report(
    report: dict[str, Any],
    policy: RevenueFieldPolicy = RevenueFieldPolicy.TOTAL_REVENUE,
    missing: MissingValuePolicy = MissingValuePolicy.NULL,
) -> IncomeRecord | None:
    """Normalize one raw annual income statement.

    Returns:
        IncomeRecord, or None if the report has no usable fiscal date
    """
    fiscal_year = parse_fiscal_year(report.get(FISCAL_DATE_FIELD))
    if fiscal_year is None:
        return None

    revenue, revenue_source = _select_revenue(report, policy, missing)
    primary = policy.field_order[0]
    if revenue_source is not None and revenue_source != primary:
        logger.debug(f"{fiscal_year}: {primary} absent, revenue read from {revenue_source}")

    return IncomeRecord(
        fiscal_year=fiscal_year,
        revenue=revenue,
        net_income=parse_number(report.get(NET_INCOME_FIELD), missing.default),
        revenue_source=revenue_source,
    )


def normalize_balance_report(
    report: dict[str, Any],
    missing: MissingValuePolicy = MissingValuePolicy.NULL,
) -> BalanceRecord | None:
    """Normalize one raw annual balance sheet.

    Returns:
        BalanceRecord, or None if the report has no usable fiscal date
    """
    fiscal_year = parse_fiscal_year(report.get(FISCAL_DATE_FIELD))
    if fiscal_year is None:
        return None

    return BalanceRecord(
        fiscal_year=fiscal_year,
        total_assets=parse_number(report.get(TOTAL_ASSETS_FIELD), missing.default),
        total_liabilities=parse_number(report.get(TOTAL_LIABILITIES_FIELD), missing.default),
    )


def normalize_income_reports(
    reports: Iterable[dict[str, Any]],
    policy: RevenueFieldPolicy = RevenueFieldPolicy.TOTAL_REVENUE,
    missing: MissingValuePolicy = MissingValuePolicy.NULL,
) -> list[IncomeRecord]:
    """Normalize an income series, dropping reports without a fiscal year."""
    records = []
    for report in reports:
        record = normalize_income_report(report, policy, missing) if isinstance(report, dict) else None
        if record is None:
            logger.debug(f"Dropping income report without fiscal date: {report!r}")
            continue
        records.append(record)
    return records


def normalize_balance_reports(
    reports: Iterable[dict[str, Any]],
    missing: MissingValuePolicy = MissingValuePolicy.NULL,
) -> list[BalanceRecord]:
    """Normalize a balance sheet series, dropping reports without a fiscal year."""
    records = []
    for report in reports:
        record = normalize_balance_report(report, missing) if isinstance(report, dict) else None
        if record is None:
            logger.debug(f"Dropping balance report without fiscal date: {report!r}")
            continue
        records.append(record)
    return records
