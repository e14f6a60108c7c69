"""Fundamentals module for annual statement loading and analysis.

Pipeline stages, leaves first:
- client: fetch annual reports from Alpha Vantage (degraded responses -> [])
- normalizer: raw string fields -> typed, nullable records keyed by fiscal year
- reconciler: merge income + balance sheet by fiscal year, trailing window
- metrics: ratios and year-over-year growth from persisted rows
"""

# Client
from fundamentals_etl.core.fundamentals.client import (
    ApiCallLog,
    RealAlphaVantageClient,
    StatementClient,
    StatementKind,
    extract_annual_reports,
)

# Metrics
from fundamentals_etl.core.fundamentals.metrics import derive_metrics

# Models
from fundamentals_etl.core.fundamentals.models import (
    BalanceRecord,
    DerivedMetricRow,
    IncomeRecord,
    ReconciledYear,
    ReconcileResult,
    StatementRow,
)

# Normalizer
from fundamentals_etl.core.fundamentals.normalizer import (
    MissingValuePolicy,
    RevenueFieldPolicy,
    normalize_balance_report,
    normalize_balance_reports,
    normalize_income_report,
    normalize_income_reports,
)

# Reconciler
from fundamentals_etl.core.fundamentals.reconciler import (
    reconcile_years,
    resolve_year_limit,
)

__all__ = [
    # Client
    "ApiCallLog",
    "RealAlphaVantageClient",
    "StatementClient",
    "StatementKind",
    "extract_annual_reports",
    # Models
    "BalanceRecord",
    "DerivedMetricRow",
    "IncomeRecord",
    "ReconciledYear",
    "ReconcileResult",
    "StatementRow",
    # Normalizer
    "MissingValuePolicy",
    "RevenueFieldPolicy",
    "normalize_balance_report",
    "normalize_balance_reports",
    "normalize_income_report",
    "normalize_income_reports",
    # Reconciler
    "reconcile_years",
    "resolve_year_limit",
    # Metrics
    "derive_metrics",
]
