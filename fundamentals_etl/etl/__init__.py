"""ETL pipeline for annual fundamentals.

Fetches income statements and balance sheets per symbol, reconciles them by
fiscal year and upserts the result into the statement store.
"""

from fundamentals_etl.etl.config import ETLConfig
from fundamentals_etl.etl.pipeline import CompanyOutcome, ETLRunSummary, run_pipeline

__all__ = [
    "CompanyOutcome",
    "ETLConfig",
    "ETLRunSummary",
    "run_pipeline",
]
