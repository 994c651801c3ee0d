"""Health check endpoint."""
from fastapi import APIRouter, Depends
from loginguard.config import APP_VERSION
from loginguard.dependencies import get_limiter
from loginguard.limiter import LoginRateLimiter

router = APIRouter()


@router.get("/health")
def health(limiter: LoginRateLimiter = Depends(get_limiter)):
    checks = {"app": "ok"}

    # Decisions stay correct without the reaper, but memory is no longer bounded.
    if limiter.reaper_running:
        checks["reaper"] = "ok"
    else:
        checks["reaper"] = "stopped"
        return {"status": "degraded", "version": APP_VERSION, "checks": checks}

    return {"status": "ok", "version": APP_VERSION, "checks": checks}
