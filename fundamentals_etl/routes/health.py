"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from fundamentals_etl.routes.dependencies import get_statement_store
from fundamentals_etl.storage.statement_store import StatementStore

router = APIRouter()


@router.get("")
def health_check() -> dict:
    """Generic health check."""
    return {"status": "healthy"}


@router.get("/live")
def liveness() -> dict:
    """Liveness probe - is the process running?"""
    return {"status": "alive"}


@router.get("/ready")
def readiness(store: Annotated[StatementStore, Depends(get_statement_store)]) -> dict:
    """Readiness probe - can the statement store be queried?"""
    if not store.ping():
        raise HTTPException(status_code=503, detail="Statement store unavailable")
    return {"status": "ready"}
