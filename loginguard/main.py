import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loginguard.routes import attempts, stats, health
from loginguard.config import APP_VERSION, MAX_ATTEMPTS, WINDOW_MS, BLOCK_MS, SHARDS
from loginguard.limiter import LoginRateLimiter, RateLimiterConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = RateLimiterConfig(
        max_attempts=MAX_ATTEMPTS,
        window_ms=WINDOW_MS,
        block_duration_ms=BLOCK_MS,
    )
    limiter = LoginRateLimiter(config, shard_count=SHARDS)
    app.state.limiter = limiter
    logger.info(
        "login limiter ready: %d attempts per %d ms, block %d ms",
        config.max_attempts,
        config.window_ms,
        config.effective_block_ms,
    )
    try:
        yield
    finally:
        limiter.close()


app = FastAPI(
    title="loginguard",
    version=APP_VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
)

@app.middleware("http")
async def no_store_middleware(request, call_next):
    response = await call_next(request)
    response.headers["Cache-Control"] = "no-store"
    return response


app.include_router(health.router)
app.include_router(attempts.router)
app.include_router(stats.router)
