"""Health check endpoints."""

from fastapi import APIRouter

from src.api.schemas import HealthResponse
from src.config import is_mock_mode
from src.db.migrations import get_current_revision

router = APIRouter(tags=["health"])


@router.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    try:
        revision = get_current_revision()
    except Exception:
        revision = None

    return HealthResponse(
        status="ok",
        mock_mode=is_mock_mode(),
        db_revision=revision,
    )
