"""FastAPI dependencies backed by state the lifespan puts on app.state."""

from fastapi import Request

from loginguard.limiter import LoginRateLimiter


def get_limiter(request: Request) -> LoginRateLimiter:
    """Retrieve the app's LoginRateLimiter from app.state."""
    return request.app.state.limiter
