import hmac
import re
from fastapi import HTTPException
from loginguard.config import GUARD_SECRET

MAX_IDENTIFIER_LEN = 254
CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
SPACE_RE = re.compile(r" +")


def normalize_identifier(identifier: str) -> str:
    """Trim, case-fold and collapse spaces so "Bob@X.com " and "bob@x.com" share a window."""
    identifier = identifier.strip()
    if not identifier or CONTROL_RE.search(identifier):
        raise HTTPException(status_code=400, detail="invalid identifier")
    identifier = SPACE_RE.sub(" ", identifier).casefold()
    if len(identifier) > MAX_IDENTIFIER_LEN:
        raise HTTPException(status_code=400, detail="identifier too long")
    return identifier


def auth_header_key(x_guard_key: str | None):
    if x_guard_key is None or not hmac.compare_digest(
        x_guard_key.encode("utf-8"), GUARD_SECRET.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="invalid key")
