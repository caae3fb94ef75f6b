from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(prefix="/api")


@router.get("/health")
async def health():
    """Liveness check."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
