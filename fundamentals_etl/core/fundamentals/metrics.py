"""Derived ratio and year-over-year metrics.

Everything here is pure: rows in, metric rows out. Serialization and
rounding belong to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from fundamentals_etl.core.fundamentals.models import DerivedMetricRow, StatementRow


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _safe_ratio(numerator: float | None, denominator: float | None) -> float | None:
    """numerator / denominator, or None unless both are present and the quotient is finite."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return _finite(numerator / denominator)


def _percent(numerator: float | None, denominator: float | None) -> float | None:
    """numerator / denominator * 100 with the same null rules as _safe_ratio."""
    ratio = _safe_ratio(numerator, denominator)
    return None if ratio is None else _finite(ratio * 100)


def _percent_change(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None:
        return None
    return _percent(current - previous, previous)


def derive_metrics(rows: Iterable[StatementRow]) -> list[DerivedMetricRow]:
    """Compute ratios and YoY growth for every statement row.

    The prior year is found by (symbol, fiscal_year - 1), not by position,
    so gaps in the series are handled. If the input repeats a key, the last
    row for that key is the one used as a prior year.

    Args:
        rows: Statement rows, typically ordered by (symbol, fiscal_year)

    Returns:
        One DerivedMetricRow per input row, in input order
    """
    rows = list(rows)
    by_key = {(row.symbol, row.fiscal_year): row for row in rows}

    metrics = []
    for row in rows:
        prev = by_key.get((row.symbol, row.fiscal_year - 1))
        metrics.append(
            DerivedMetricRow(
                symbol=row.symbol,
                name=row.name,
                fiscal_year=row.fiscal_year,
                net_margin=_percent(row.net_income, row.revenue),
                current_ratio=_safe_ratio(row.total_assets, row.total_liabilities),
                revenue_yoy=_percent_change(row.revenue, prev.revenue) if prev else None,
                net_income_yoy=_percent_change(row.net_income, prev.net_income) if prev else None,
            )
        )
    return metrics
