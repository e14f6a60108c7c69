"""Dependency injection for API endpoints."""

from pathlib import Path
from typing import Annotated

from fastapi import Depends

from fundamentals_etl.core import config
from fundamentals_etl.core.fundamentals.client import RealAlphaVantageClient, StatementClient
from fundamentals_etl.etl.config import ETLConfig
from fundamentals_etl.storage.statement_store import SQLiteStatementStore, StatementStore


def get_db_path() -> Path:
    """Get the SQLite database path."""
    return config.get_db_path()


def get_alpha_vantage_api_key() -> str:
    """Get Alpha Vantage API key from environment."""
    return config.get_alpha_vantage_api_key()


def get_statement_store(
    db_path: Annotated[Path, Depends(get_db_path)],
) -> StatementStore:
    """Get the statement store for the configured database."""
    return SQLiteStatementStore(db_path)


def get_statement_client(
    api_key: Annotated[str, Depends(get_alpha_vantage_api_key)],
    store: Annotated[StatementStore, Depends(get_statement_store)],
) -> StatementClient:
    """Get the Alpha Vantage client, counting calls in the store."""
    return RealAlphaVantageClient(
        api_key=api_key,
        call_log=store if isinstance(store, SQLiteStatementStore) else None,
        daily_limit=config.get_daily_limit(),
        request_delay=config.get_request_delay(),
        timeout=config.get_request_timeout(),
    )


def get_etl_config() -> ETLConfig:
    """Get the base ETL config from environment."""
    return ETLConfig.from_env()
