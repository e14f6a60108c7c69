"""Pytest configuration and fixtures for all tests.

This module ensures tests run in isolation from production environment variables.
"""

import os

import pytest

# Environment variables that must not leak a real API key or database into tests
ETL_ENV_VARS = [
    "ALPHA_VANTAGE_API_KEY",
    "ALPHA_VANTAGE_DAILY_LIMIT",
    "ALPHA_VANTAGE_REQUEST_DELAY",
    "ALPHA_VANTAGE_TIMEOUT",
    "FUNDAMENTALS_DB_PATH",
    "ETL_SYMBOLS",
    "ETL_COMPANY_NAMES",
    "ETL_COMPANY_DELAY_SECONDS",
    "ETL_LOOKBACK_YEARS",
    "ETL_REVENUE_POLICY",
    "ETL_MISSING_VALUES",
    "ETL_FETCH_CASH_FLOW",
]


@pytest.fixture(autouse=True)
def isolate_from_env():
    """Clear ETL env vars before each test, restoring them afterwards."""
    original_values = {}
    for var in ETL_ENV_VARS:
        if var in os.environ:
            original_values[var] = os.environ.pop(var)

    yield

    for var in ETL_ENV_VARS:
        os.environ.pop(var, None)
    for var, value in original_values.items():
        os.environ[var] = value
