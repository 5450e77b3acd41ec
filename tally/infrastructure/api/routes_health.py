"""Health check endpoint."""

from fastapi import APIRouter, Depends

from tally.application.ports.counter_repo import CounterRepository
from tally.config import settings
from tally.infrastructure.api.dependencies import get_counter_repo

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(repo: CounterRepository = Depends(get_counter_repo)):
    """Check API and counter store connectivity."""
    try:
        await repo.find_row(settings.default_slug)
        store_status = "connected"
    except Exception as e:
        store_status = f"error: {e}"

    return {
        "status": "ok" if store_status == "connected" else "degraded",
        "backend": settings.counter_backend,
        "store": store_status,
        "service": "Tally - counter backend",
    }
