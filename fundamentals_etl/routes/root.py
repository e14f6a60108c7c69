"""Root endpoint."""

from fastapi import APIRouter

from fundamentals_etl import __version__

router = APIRouter(tags=["root"])


@router.get("/")
def read_root() -> dict:
    """Service banner."""
    return {"message": "Fundamentals ETL API", "service": "fundamentals-etl", "version": __version__}
