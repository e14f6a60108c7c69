"""ETL endpoints for triggering the fundamentals load.

Provides an async job-based API: a load runs in a background task and
is polled by job id. Only one load may be pending or running at a time.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from fundamentals_etl.core.fundamentals.client import StatementClient
from fundamentals_etl.core.fundamentals.normalizer import (
    MissingValuePolicy,
    RevenueFieldPolicy,
)
from fundamentals_etl.domain.exceptions import StorageError
from fundamentals_etl.etl.config import ETLConfig, parse_symbols
from fundamentals_etl.etl.pipeline import run_pipeline
from fundamentals_etl.routes.dependencies import (
    get_etl_config,
    get_statement_client,
    get_statement_store,
)
from fundamentals_etl.storage.statement_store import StatementStore

router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================================================
# Job State Management (in-memory for single-instance deployment)
# ============================================================================


@dataclass
class LoadJob:
    """A fundamentals load job and its state."""

    job_id: str
    status: Literal["pending", "running", "completed", "failed"]
    started_at: datetime
    completed_at: datetime | None = None
    progress: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    result: dict[str, Any] | None = None
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status in ("pending", "running")


_jobs: dict[str, LoadJob] = {}
_jobs_lock = threading.Lock()

MAX_JOBS_IN_MEMORY = 100


def _cleanup_old_jobs() -> None:
    """Remove oldest finished jobs if we exceed the limit."""
    if len(_jobs) <= MAX_JOBS_IN_MEMORY:
        return

    finished = sorted(
        (j for j in _jobs.values() if not j.is_active), key=lambda j: j.started_at
    )
    for job in finished[: len(_jobs) - MAX_JOBS_IN_MEMORY]:
        del _jobs[job.job_id]


def _active_job() -> LoadJob | None:
    return next((j for j in _jobs.values() if j.is_active), None)


def _update_job_progress(job_id: str, progress: dict[str, Any]) -> None:
    """Update job progress from the pipeline callback."""
    job = _jobs.get(job_id)
    if job is None:
        return
    job.progress = {k: v for k, v in progress.items() if k != "output"}
    if progress.get("status") == "completed":
        job.result = progress.get("output")


def _run_load_job(
    job_id: str,
    config: ETLConfig,
    client: StatementClient,
    store: StatementStore,
) -> None:
    """Run the pipeline in a background task."""
    job = _jobs.get(job_id)
    if not job:
        return

    job.status = "running"

    try:
        summary = run_pipeline(
            config=config,
            client=client,
            store=store,
            progress_callback=lambda p: _update_job_progress(job_id, p),
        )
        job.result = summary.to_dict()
        job.status = "completed"
    except Exception as e:
        logger.exception(f"Load job {job_id} failed: {e}")
        job.error = str(e)
        job.status = "failed"
    finally:
        job.completed_at = datetime.now(UTC)


# ============================================================================
# Request / Response Models
# ============================================================================


class LoadJobRequest(BaseModel):
    """Overrides for a single load; unset fields come from the environment."""

    symbols: list[str] | None = Field(
        None,
        min_length=1,
        description="Tickers to load, in order",
        examples=[["TEL", "ST", "DD"]],
    )
    company_delay_seconds: float | None = Field(
        None,
        ge=0.0,
        description="Seconds to wait between companies",
    )
    lookback_years: int | None = Field(
        None,
        ge=0,
        description="Keep fiscal years >= current year minus this many years",
    )
    revenue_policy: RevenueFieldPolicy | None = Field(
        None,
        description="Which income field is read as revenue",
    )
    missing_values: MissingValuePolicy | None = Field(
        None,
        description="Normalize absent figures to null or zero",
    )


class LoadJobResponse(BaseModel):
    """Response model for job creation."""

    job_id: str
    status: str
    message: str


class LoadJobStatusResponse(BaseModel):
    """Response model for job status."""

    job_id: str
    status: str
    started_at: str
    completed_at: str | None
    progress: dict[str, Any]
    error: str | None
    result: dict[str, Any] | None
    config: dict[str, Any]


class LoadJobListResponse(BaseModel):
    """Response model for listing jobs."""

    jobs: list[LoadJobStatusResponse]
    total: int


class LastRunResponse(BaseModel):
    """Timestamp of the most recent recorded ETL run."""

    last_run: str | None


def _to_status_response(job: LoadJob) -> LoadJobStatusResponse:
    return LoadJobStatusResponse(
        job_id=job.job_id,
        status=job.status,
        started_at=job.started_at.isoformat(),
        completed_at=job.completed_at.isoformat() if job.completed_at else None,
        progress=job.progress,
        error=job.error,
        result=job.result,
        config=job.config,
    )


def _apply_overrides(base: ETLConfig, request: LoadJobRequest) -> ETLConfig:
    symbols = parse_symbols(",".join(request.symbols)) if request.symbols else base.symbols
    if not symbols:
        raise HTTPException(status_code=422, detail="No valid symbols given")

    return ETLConfig(
        symbols=symbols,
        company_names=base.company_names,
        company_delay_seconds=(
            request.company_delay_seconds
            if request.company_delay_seconds is not None
            else base.company_delay_seconds
        ),
        lookback_years=(
            request.lookback_years if request.lookback_years is not None else base.lookback_years
        ),
        revenue_policy=request.revenue_policy or base.revenue_policy,
        missing_values=request.missing_values or base.missing_values,
        fetch_cash_flow=base.fetch_cash_flow,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/load", response_model=LoadJobResponse, status_code=202)
def start_load(
    background_tasks: BackgroundTasks,
    base_config: Annotated[ETLConfig, Depends(get_etl_config)],
    client: Annotated[StatementClient, Depends(get_statement_client)],
    store: Annotated[StatementStore, Depends(get_statement_store)],
    request: LoadJobRequest | None = None,
) -> LoadJobResponse:
    """Start a fundamentals load job.

    For each configured symbol the job fetches annual income statements and
    balance sheets, reconciles them by fiscal year and upserts the result.
    Poll GET /etl/load/{job_id} for status and the run summary.

    Returns:
        LoadJobResponse with job_id for polling
    """
    config = _apply_overrides(base_config, request or LoadJobRequest())

    with _jobs_lock:
        active = _active_job()
        if active is not None:
            raise HTTPException(
                status_code=409,
                detail=f"Load job {active.job_id} is already {active.status}",
            )

        job_id = str(uuid.uuid4())[:8]
        _jobs[job_id] = LoadJob(
            job_id=job_id,
            status="pending",
            started_at=datetime.now(UTC),
            config=config.to_dict(),
        )
        _cleanup_old_jobs()

    background_tasks.add_task(_run_load_job, job_id, config, client, store)
    logger.info(f"Queued load job {job_id} for {', '.join(config.symbols)}")

    return LoadJobResponse(
        job_id=job_id,
        status="pending",
        message=f"Load job {job_id} started. Poll GET /etl/load/{job_id} for status.",
    )


@router.get("/load/jobs", response_model=LoadJobListResponse)
def list_load_jobs() -> LoadJobListResponse:
    """List all load jobs (most recent first)."""
    sorted_jobs = sorted(_jobs.values(), key=lambda j: j.started_at, reverse=True)
    job_responses = [_to_status_response(job) for job in sorted_jobs]
    return LoadJobListResponse(jobs=job_responses, total=len(job_responses))


@router.get("/load/{job_id}", response_model=LoadJobStatusResponse)
def get_load_job_status(job_id: str) -> LoadJobStatusResponse:
    """Get the status of a load job.

    Args:
        job_id: The job ID returned from POST /etl/load
    """
    job = _jobs.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return _to_status_response(job)


@router.get("/last-run", response_model=LastRunResponse)
def get_last_run(
    store: Annotated[StatementStore, Depends(get_statement_store)],
) -> LastRunResponse:
    """Timestamp of the most recent recorded ETL run, or null if none."""
    try:
        last_run = store.get_last_etl_run()
    except StorageError as e:
        logger.error(f"Error reading last ETL run: {e}")
        raise HTTPException(status_code=500, detail="Error reading last ETL run") from e
    return LastRunResponse(last_run=last_run.isoformat() if last_run else None)
