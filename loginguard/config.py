import os
from pathlib import Path

GUARD_SECRET = os.environ.get("GUARD_SECRET", "")
MAX_ATTEMPTS = int(os.environ.get("LOGIN_MAX_ATTEMPTS", "5"))
WINDOW_MS = int(os.environ.get("LOGIN_WINDOW_MS", str(15 * 60 * 1000)))
# Empty means "block for one window".
_block_ms = os.environ.get("LOGIN_BLOCK_MS", str(30 * 60 * 1000)).strip()
BLOCK_MS = int(_block_ms) if _block_ms else None
SHARDS = int(os.environ.get("LOGIN_SHARDS", "16"))
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _resolve_app_version(root: Path = _PROJECT_ROOT) -> str:
    """APP_VERSION wins, then a .version file written at build time."""
    env_version = (os.environ.get("APP_VERSION") or "").strip()
    if env_version:
        return env_version
    file_version = root / ".version"
    if file_version.exists():
        from_file = file_version.read_text(encoding="utf-8").strip()
        if from_file:
            return from_file
    return "dev"


APP_VERSION = _resolve_app_version()

if not GUARD_SECRET:
    raise RuntimeError("GUARD_SECRET is required")
