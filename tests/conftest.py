import sys

import pytest
from fastapi.testclient import TestClient


TEST_GUARD_SECRET = "test-guard-secret"


@pytest.fixture()
def app_ctx(monkeypatch: pytest.MonkeyPatch) -> dict:
    monkeypatch.setenv("GUARD_SECRET", TEST_GUARD_SECRET)
    monkeypatch.setenv("LOGIN_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("LOGIN_WINDOW_MS", "60000")
    monkeypatch.setenv("LOGIN_BLOCK_MS", "120000")
    monkeypatch.setenv("LOGIN_SHARDS", "4")
    monkeypatch.setenv("APP_VERSION", "test")

    for name in list(sys.modules.keys()):
        if name == "loginguard" or name.startswith("loginguard."):
            del sys.modules[name]

    import importlib

    main = importlib.import_module("loginguard.main")
    return {"app": main.app, "secret": TEST_GUARD_SECRET}


@pytest.fixture()
def client(app_ctx: dict):
    with TestClient(app_ctx["app"]) as c:
        yield c


@pytest.fixture()
def guard_secret(app_ctx: dict) -> str:
    return app_ctx["secret"]


@pytest.fixture()
def limiter():
    from loginguard.limiter import LoginRateLimiter, RateLimiterConfig

    rl = LoginRateLimiter(
        RateLimiterConfig(max_attempts=3, window_ms=1000, block_duration_ms=2000),
        start_reaper=False,
    )
    yield rl
    rl.close()
