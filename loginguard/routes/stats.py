from fastapi import APIRouter, Depends, Header
from loginguard.auth import auth_header_key
from loginguard.dependencies import get_limiter
from loginguard.limiter import LoginRateLimiter

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("")
def api_stats(
    key: str | None = None,
    x_guard_key: str | None = Header(default=None),
    limiter: LoginRateLimiter = Depends(get_limiter),
):
    auth_header_key(x_guard_key or key)
    return limiter.get_stats().to_dict()
