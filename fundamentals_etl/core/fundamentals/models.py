"""Data models for fundamentals module."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class IncomeRecord:
    """A normalized annual income statement."""

    fiscal_year: int
    revenue: float | None
    net_income: float | None
    revenue_source: str | None = None  # Raw field the revenue was read from


@dataclass(frozen=True)
class BalanceRecord:
    """A normalized annual balance sheet."""

    fiscal_year: int
    total_assets: float | None
    total_liabilities: float | None


@dataclass(frozen=True)
class ReconciledYear:
    """Income and balance figures merged for one (company, fiscal_year)."""

    fiscal_year: int
    revenue: float | None
    net_income: float | None
    total_assets: float | None
    total_liabilities: float | None

    @property
    def is_empty(self) -> bool:
        """True when every financial field is null."""
        return all(
            value is None
            for value in (
                self.revenue,
                self.net_income,
                self.total_assets,
                self.total_liabilities,
            )
        )


@dataclass
class ReconcileResult:
    """Output of reconciling one company's income and balance series."""

    symbol: str
    rows: list[ReconciledYear] = field(default_factory=list)
    skipped_years: list[int] = field(default_factory=list)  # No balance counterpart
    excluded_years: list[int] = field(default_factory=list)  # Outside trailing window


@dataclass(frozen=True)
class StatementRow:
    """A persisted yearly statement joined with its company."""

    symbol: str
    name: str | None
    fiscal_year: int
    revenue: float | None
    net_income: float | None
    total_assets: float | None
    total_liabilities: float | None


@dataclass(frozen=True)
class DerivedMetricRow:
    """Ratios and growth metrics for one (symbol, fiscal_year).

    Percentages are expressed in percent (10.0 means 10%). Every field is
    independently None when its inputs are missing or its denominator is zero.
    """

    symbol: str
    name: str | None
    fiscal_year: int
    net_margin: float | None  # net_income / revenue * 100
    current_ratio: float | None  # total_assets / total_liabilities
    revenue_yoy: float | None  # % change vs fiscal_year - 1
    net_income_yoy: float | None  # % change vs fiscal_year - 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
