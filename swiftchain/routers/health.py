from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health():
    return {
        "status": "OK",
        "message": "SwiftChain API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
