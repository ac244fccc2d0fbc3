"""Health Probe — liveness endpoint for container orchestration.

Invariants:
    - GET /api/v1/health/ returns 200 whenever the process is up
    - Registered before the render catch-all so it is never shadowed
"""

from fastapi import APIRouter, status

from hclrender import __version__

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    return {"status": "healthy", "service": "hclrender", "version": __version__}
