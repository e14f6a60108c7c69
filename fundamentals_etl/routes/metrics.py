"""Derived metrics endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from fundamentals_etl.core.fundamentals.metrics import derive_metrics
from fundamentals_etl.domain.exceptions import StorageError
from fundamentals_etl.routes.dependencies import get_statement_store
from fundamentals_etl.storage.statement_store import StatementStore

router = APIRouter()
logger = logging.getLogger(__name__)


class MetricRowResponse(BaseModel):
    """Ratios and growth for one company and fiscal year (percentages in percent)."""

    symbol: str
    name: str | None
    fiscal_year: int
    net_margin: float | None
    current_ratio: float | None
    revenue_yoy: float | None
    net_income_yoy: float | None


@router.get("", response_model=list[MetricRowResponse])
def get_metrics(
    store: Annotated[StatementStore, Depends(get_statement_store)],
) -> list[MetricRowResponse]:
    """Derived metrics for every stored (symbol, fiscal_year), ordered by symbol then year.

    Values are full precision; rounding is left to the consumer.
    """
    try:
        rows = store.load_statement_rows()
    except StorageError as e:
        logger.error(f"Error fetching metrics: {e}")
        raise HTTPException(status_code=500, detail="Error fetching metrics") from e

    return [MetricRowResponse(**metric.to_dict()) for metric in derive_metrics(rows)]
