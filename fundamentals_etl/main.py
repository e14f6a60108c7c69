"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fundamentals_etl import __version__
from fundamentals_etl.core.config import get_db_path
from fundamentals_etl.domain.exceptions import StorageError
from fundamentals_etl.routes import etl, health, metrics, root
from fundamentals_etl.storage.statement_store import SQLiteStatementStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the schema on startup; readiness reports if that failed."""
    try:
        SQLiteStatementStore(get_db_path()).ensure_schema()
    except StorageError as e:
        logger.error(f"Statement store initialization failed: {e}")
    yield


app = FastAPI(
    title="Fundamentals ETL",
    description="Annual statement ETL and derived fundamentals metrics",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(root.router)
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])
app.include_router(etl.router, prefix="/etl", tags=["etl"])
