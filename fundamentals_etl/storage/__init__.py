"""Relational storage for companies, yearly statements and ETL runs."""

from fundamentals_etl.storage.statement_store import (
    SQLiteStatementStore,
    StatementStore,
)

__all__ = [
    "SQLiteStatementStore",
    "StatementStore",
]
