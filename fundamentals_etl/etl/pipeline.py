"""Fundamentals ETL pipeline.

One invocation walks the configured symbols strictly in sequence:
fetch income + balance sheet, normalize, reconcile by fiscal year,
upsert each reconciled year, then pause before the next company so the
shared Alpha Vantage quota is not exhausted mid-batch. Only an unreachable
store aborts the cycle; everything else is logged and skipped.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any, Literal

from fundamentals_etl.core.fundamentals.client import StatementClient, StatementKind
from fundamentals_etl.core.fundamentals.normalizer import (
    normalize_balance_reports,
    normalize_income_reports,
)
from fundamentals_etl.core.fundamentals.reconciler import (
    reconcile_years,
    resolve_year_limit,
)
from fundamentals_etl.domain.exceptions import (
    StorageError,
    StorageUnavailableError,
    StorageWriteError,
)
from fundamentals_etl.etl.config import ETLConfig
from fundamentals_etl.storage.statement_store import StatementStore

logger = logging.getLogger(__name__)

CompanyStatus = Literal["loaded", "skipped", "failed"]


@dataclass
class CompanyOutcome:
    """What happened to one symbol during a run."""

    symbol: str
    status: CompanyStatus
    company_id: int | None = None
    rows_written: int = 0
    rows_failed: int = 0
    skipped_years: list[int] = field(default_factory=list)
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "status": self.status,
            "company_id": self.company_id,
            "rows_written": self.rows_written,
            "rows_failed": self.rows_failed,
            "skipped_years": list(self.skipped_years),
            "reason": self.reason,
        }


@dataclass
class ETLRunSummary:
    """Result of one pipeline invocation."""

    started_at: datetime
    year_limit: int
    config: dict[str, Any] = field(default_factory=dict)
    companies: list[CompanyOutcome] = field(default_factory=list)
    finished_at: datetime | None = None
    run_recorded: bool = False

    @property
    def rows_written(self) -> int:
        return sum(c.rows_written for c in self.companies)

    @property
    def rows_failed(self) -> int:
        return sum(c.rows_failed for c in self.companies)

    def symbols_with_status(self, status: CompanyStatus) -> list[str]:
        return [c.symbol for c in self.companies if c.status == status]

    @property
    def elapsed_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
            "year_limit": self.year_limit,
            "config": self.config,
            "rows_written": self.rows_written,
            "rows_failed": self.rows_failed,
            "symbols_loaded": self.symbols_with_status("loaded"),
            "symbols_skipped": self.symbols_with_status("skipped"),
            "symbols_failed": self.symbols_with_status("failed"),
            "run_recorded": self.run_recorded,
            "companies": [c.to_dict() for c in self.companies],
        }


def load_company(
    symbol: str,
    config: ETLConfig,
    client: StatementClient,
    store: StatementStore,
    year_limit: int,
) -> CompanyOutcome:
    """Fetch, reconcile and persist one company.

    Args:
        symbol: Stock ticker
        config: ETL configuration
        client: Upstream statement fetcher
        store: Statement store
        year_limit: Oldest fiscal year to keep

    Returns:
        CompanyOutcome describing what was written or why it was skipped

    Raises:
        StorageUnavailableError: If the store cannot be reached
    """
    income_reports = client.fetch_annual_reports(symbol, StatementKind.INCOME)
    if not income_reports:
        logger.info(f"{symbol}: No API data (income missing), skipping")
        return CompanyOutcome(symbol=symbol, status="skipped", reason="no income statement data")

    balance_reports = client.fetch_annual_reports(symbol, StatementKind.BALANCE)
    if not balance_reports:
        logger.info(f"{symbol}: No API data (balance missing), skipping")
        return CompanyOutcome(symbol=symbol, status="skipped", reason="no balance sheet data")

    if config.fetch_cash_flow:
        cash_flow_reports = client.fetch_annual_reports(symbol, StatementKind.CASH_FLOW)
        logger.info(f"{symbol}: fetched {len(cash_flow_reports)} cash flow reports")

    try:
        company_id = store.upsert_company(symbol, config.company_name(symbol))
    except StorageWriteError as e:
        logger.error(f"{symbol}: failed to create/get company row, skipping symbol: {e}")
        return CompanyOutcome(symbol=symbol, status="failed", reason=str(e))

    income = normalize_income_reports(
        income_reports, config.revenue_policy, config.missing_values
    )
    balance = normalize_balance_reports(balance_reports, config.missing_values)
    reconciled = reconcile_years(symbol, income, balance, year_limit)

    outcome = CompanyOutcome(
        symbol=symbol,
        status="loaded",
        company_id=company_id,
        skipped_years=list(reconciled.skipped_years),
    )

    for row in reconciled.rows:
        logger.debug(
            f"{symbol} {row.fiscal_year} -> companyId={company_id}, revenue={row.revenue}, "
            f"netIncome={row.net_income}, totalAssets={row.total_assets}, "
            f"totalLiabilities={row.total_liabilities}"
        )
        try:
            store.upsert_yearly_statement(
                company_id,
                row.fiscal_year,
                row.revenue,
                row.net_income,
                row.total_assets,
                row.total_liabilities,
            )
            outcome.rows_written += 1
        except StorageWriteError as e:
            logger.error(f"{symbol} {row.fiscal_year}: DB insert failed: {e}")
            outcome.rows_failed += 1

    logger.info(
        f"{symbol}: loaded {outcome.rows_written} year(s), "
        f"{outcome.rows_failed} failed, {len(outcome.skipped_years)} without balance sheet"
    )
    return outcome


def run_pipeline(
    config: ETLConfig,
    client: StatementClient,
    store: StatementStore,
    sleep: Callable[[float], None] = time.sleep,
    today: date | None = None,
    progress_callback: Callable[[dict[str, Any]], None] | None = None,
) -> ETLRunSummary:
    """Run one full ETL cycle.

    Args:
        config: ETL configuration
        client: Upstream statement fetcher
        store: Statement store
        sleep: Called with the inter-company delay (injectable for tests)
        today: Reference date for the trailing window (defaults to today)
        progress_callback: Optional callback for progress updates (for API jobs)

    Returns:
        ETLRunSummary with per-company outcomes

    Raises:
        StorageUnavailableError: If the store cannot be reached; the remaining
            companies are not processed
    """
    year_limit = resolve_year_limit(today, config.lookback_years)
    summary = ETLRunSummary(
        started_at=datetime.now(UTC),
        year_limit=year_limit,
        config=config.to_dict(),
    )

    def update_progress(progress: dict[str, Any]) -> None:
        if progress_callback:
            progress_callback(progress)

    store.ensure_schema()

    total = len(config.symbols)
    logger.info(f"Starting ETL for {total} symbol(s), keeping fiscal years >= {year_limit}")

    for index, symbol in enumerate(config.symbols):
        update_progress({"status": "running", "symbol": symbol, "completed": index, "total": total})

        try:
            outcome = load_company(symbol, config, client, store, year_limit)
        except StorageUnavailableError:
            logger.error(f"Store unavailable while loading {symbol}, aborting run")
            raise
        except Exception as e:
            logger.exception(f"Load error for {symbol}: {e}")
            outcome = CompanyOutcome(symbol=symbol, status="failed", reason=str(e))

        summary.companies.append(outcome)

        if index < total - 1 and config.company_delay_seconds > 0:
            logger.info(f"Waiting {config.company_delay_seconds:.0f}s before next company")
            sleep(config.company_delay_seconds)

    summary.finished_at = datetime.now(UTC)

    try:
        store.record_etl_run(summary.finished_at)
        summary.run_recorded = True
    except StorageError as e:
        logger.error(f"Failed to record ETL run: {e}")

    update_progress({"status": "completed", "completed": total, "total": total, "output": summary.to_dict()})
    logger.info(
        f"ETL finished: {summary.rows_written} row(s) written, "
        f"{len(summary.symbols_with_status('skipped'))} skipped, "
        f"{len(summary.symbols_with_status('failed'))} failed"
    )
    return summary
