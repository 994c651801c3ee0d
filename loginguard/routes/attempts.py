"""Endpoints the upstream login flow calls around password verification.

Routes:
  POST /api/attempts                  record an attempt before checking the password
  GET  /api/attempts/{identifier}     is the identifier currently limited?
  POST /api/attempts/reset            clear the identifier after a successful login
"""

import logging
import math
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from loginguard.auth import auth_header_key, normalize_identifier
from loginguard.dependencies import get_limiter
from loginguard.limiter import LoginRateLimiter
from loginguard.models import AttemptPayload, ResetPayload

router = APIRouter(prefix="/api/attempts", tags=["attempts"])
logger = logging.getLogger(__name__)


@router.post("")
def api_record_attempt(
    payload: AttemptPayload,
    key: str | None = None,
    x_guard_key: str | None = Header(default=None),
    limiter: LoginRateLimiter = Depends(get_limiter),
):
    auth_header_key(x_guard_key or key)
    identifier = normalize_identifier(payload.identifier)
    result = limiter.record_attempt(identifier)
    if result.allowed:
        return result.to_dict()

    retry_after_ms = result.retry_after_ms or 0
    logger.warning("login attempt denied, retry in %d ms", retry_after_ms)
    logger.debug("denied identifier %r", identifier)
    return JSONResponse(
        status_code=429,
        content=result.to_dict(),
        headers={"Retry-After": str(max(1, math.ceil(retry_after_ms / 1000)))},
    )


@router.post("/reset")
def api_reset_attempts(
    payload: ResetPayload,
    key: str | None = None,
    x_guard_key: str | None = Header(default=None),
    limiter: LoginRateLimiter = Depends(get_limiter),
):
    auth_header_key(x_guard_key or key)
    identifier = normalize_identifier(payload.identifier)
    limiter.reset(identifier)
    return {"ok": True, "identifier": identifier}


@router.get("/{identifier}")
def api_attempt_status(
    identifier: str,
    key: str | None = None,
    x_guard_key: str | None = Header(default=None),
    limiter: LoginRateLimiter = Depends(get_limiter),
):
    auth_header_key(x_guard_key or key)
    identifier = normalize_identifier(identifier)
    return {"identifier": identifier, "rateLimited": limiter.is_rate_limited(identifier)}
