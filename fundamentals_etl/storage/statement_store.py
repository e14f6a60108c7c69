"""Relational store for companies, yearly statements and ETL runs.

Each operation acquires its own connection and releases it when done, so a
store handle can be shared freely between the pipeline and the API.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Protocol

from fundamentals_etl.core.fundamentals.models import StatementRow
from fundamentals_etl.domain.exceptions import (
    StorageReadError,
    StorageUnavailableError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS companies (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        symbol TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS financial_statements (
        company_id INTEGER NOT NULL,
        fiscal_year INTEGER NOT NULL,
        revenue REAL,
        net_income REAL,
        total_assets REAL,
        total_liabilities REAL,
        PRIMARY KEY (company_id, fiscal_year),
        FOREIGN KEY (company_id) REFERENCES companies(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS etl_runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        run_timestamp TEXT NOT NULL
    )
    """,
    # Track API rate limit usage
    """
    CREATE TABLE IF NOT EXISTS api_calls (
        call_date TEXT NOT NULL,
        call_count INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (call_date)
    )
    """,
)


class StatementStore(Protocol):
    """Operations the pipeline and API need from the store."""

    def ensure_schema(self) -> None:
        ...

    def ping(self) -> bool:
        ...

    def upsert_company(self, symbol: str, name: str) -> int:
        ...

    def upsert_yearly_statement(
        self,
        company_id: int,
        fiscal_year: int,
        revenue: float | None,
        net_income: float | None,
        total_assets: float | None,
        total_liabilities: float | None,
    ) -> None:
        ...

    def record_etl_run(self, timestamp: datetime) -> None:
        ...

    def get_company_id(self, symbol: str) -> int | None:
        ...

    def get_last_etl_run(self) -> datetime | None:
        ...

    def load_statement_rows(self) -> list[StatementRow]:
        ...


def _as_float(value: Any) -> float | None:
    return None if value is None else float(value)


class SQLiteStatementStore:
    """SQLite implementation of StatementStore.

    Also serves as the ApiCallLog for the Alpha Vantage client.
    """

    def __init__(self, db_path: Path, timeout: float = 30.0):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds to wait on a locked database
        """
        self.db_path = Path(db_path)
        self.timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success, roll back on error, always close."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        except sqlite3.Error as e:
            raise StorageUnavailableError(
                f"Cannot open database {self.db_path}: {e}", path=str(self.db_path)
            ) from e

        try:
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            conn.close()
            raise StorageUnavailableError(
                f"Cannot use database {self.db_path}: {e}", path=str(self.db_path)
            ) from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageWriteError(f"Commit failed: {e}", path=str(self.db_path)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        """Create the database file and tables if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create database directory: {e}", path=str(self.db_path)
            ) from e

        with self._connection() as conn:
            try:
                for statement in SCHEMA:
                    conn.execute(statement)
            except sqlite3.Error as e:
                raise StorageUnavailableError(
                    f"Schema initialization failed: {e}", path=str(self.db_path)
                ) from e

    def ping(self) -> bool:
        """Return True if the database exists and can be queried."""
        if not self.db_path.is_file():
            return False
        try:
            with self._connection() as conn:
                conn.execute("SELECT 1").fetchone()
        except (StorageUnavailableError, StorageWriteError, sqlite3.Error):
            return False
        return True

    # ------------------------------------------------------------------ #
    # Writes

    def upsert_company(self, symbol: str, name: str) -> int:
        """Insert a company, or refresh its name if the symbol exists.

        Returns:
            The company id (stable across calls for the same symbol)
        """
        with self._connection() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO companies (symbol, name)
                    VALUES (?, ?)
                    ON CONFLICT(symbol) DO UPDATE SET name = excluded.name
                    """,
                    (symbol, name),
                )
                row = conn.execute(
                    "SELECT id FROM companies WHERE symbol = ?", (symbol,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageWriteError(
                    f"Failed to upsert company {symbol}: {e}", path=str(self.db_path)
                ) from e

        if row is None:
            raise StorageWriteError(f"Company row missing after upsert: {symbol}")
        return row[0]

    def upsert_yearly_statement(
        self,
        company_id: int,
        fiscal_year: int,
        revenue: float | None,
        net_income: float | None,
        total_assets: float | None,
        total_liabilities: float | None,
    ) -> None:
        """Insert or fully replace the statement row for (company_id, fiscal_year)."""
        with self._connection() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO financial_statements
                    (company_id, fiscal_year, revenue, net_income, total_assets, total_liabilities)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(company_id, fiscal_year) DO UPDATE SET
                        revenue = excluded.revenue,
                        net_income = excluded.net_income,
                        total_assets = excluded.total_assets,
                        total_liabilities = excluded.total_liabilities
                    """,
                    (company_id, fiscal_year, revenue, net_income, total_assets, total_liabilities),
                )
            except sqlite3.Error as e:
                raise StorageWriteError(
                    f"Failed to upsert statement {company_id}/{fiscal_year}: {e}",
                    path=str(self.db_path),
                ) from e

    def record_etl_run(self, timestamp: datetime) -> None:
        """Append an ETL run entry."""
        with self._connection() as conn:
            try:
                conn.execute(
                    "INSERT INTO etl_runs (run_timestamp) VALUES (?)",
                    (timestamp.astimezone(UTC).isoformat(),),
                )
            except sqlite3.Error as e:
                raise StorageWriteError(
                    f"Failed to record ETL run: {e}", path=str(self.db_path)
                ) from e

    # ------------------------------------------------------------------ #
    # Reads

    def get_company_id(self, symbol: str) -> int | None:
        """Get the id of a company by symbol."""
        with self._connection() as conn:
            try:
                row = conn.execute(
                    "SELECT id FROM companies WHERE symbol = ?", (symbol,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageReadError(str(e), path=str(self.db_path)) from e
        return row[0] if row else None

    def get_last_etl_run(self) -> datetime | None:
        """Get the timestamp of the most recent ETL run."""
        with self._connection() as conn:
            try:
                row = conn.execute(
                    """
                    SELECT run_timestamp FROM etl_runs
                    ORDER BY run_timestamp DESC, id DESC
                    LIMIT 1
                    """
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageReadError(str(e), path=str(self.db_path)) from e
        return datetime.fromisoformat(row[0]) if row else None

    def load_statement_rows(self) -> list[StatementRow]:
        """Load every yearly statement, ordered by (symbol, fiscal_year)."""
        with self._connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    SELECT c.symbol, c.name, f.fiscal_year, f.revenue, f.net_income,
                           f.total_assets, f.total_liabilities
                    FROM financial_statements f
                    JOIN companies c ON f.company_id = c.id
                    ORDER BY c.symbol, f.fiscal_year
                    """
                )
                rows = cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageReadError(str(e), path=str(self.db_path)) from e

        return [
            StatementRow(
                symbol=row[0],
                name=row[1],
                fiscal_year=row[2],
                revenue=_as_float(row[3]),
                net_income=_as_float(row[4]),
                total_assets=_as_float(row[5]),
                total_liabilities=_as_float(row[6]),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------ #
    # API call log

    def get_api_calls_today(self) -> int:
        """Get the number of API calls made today."""
        today = date.today().isoformat()
        with self._connection() as conn:
            try:
                row = conn.execute(
                    "SELECT call_count FROM api_calls WHERE call_date = ?", (today,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageReadError(str(e), path=str(self.db_path)) from e
        return row[0] if row else 0

    def increment_api_calls(self, count: int = 1) -> int:
        """Increment the API call counter for today.

        Returns:
            New total for today
        """
        today = date.today().isoformat()
        with self._connection() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO api_calls (call_date, call_count)
                    VALUES (?, ?)
                    ON CONFLICT(call_date) DO UPDATE SET
                    call_count = call_count + excluded.call_count
                    """,
                    (today, count),
                )
            except sqlite3.Error as e:
                raise StorageWriteError(str(e), path=str(self.db_path)) from e
        return self.get_api_calls_today()
