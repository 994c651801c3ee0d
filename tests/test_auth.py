import pytest


def test_normalize_identifier_trims_and_casefolds(app_ctx):
    from loginguard.auth import normalize_identifier

    assert normalize_identifier("  Bob@Example.COM ") == "bob@example.com"
    assert normalize_identifier("Jane   Doe") == "jane doe"
    assert normalize_identifier("203.0.113.7") == "203.0.113.7"


def test_normalize_identifier_rejects_empty(app_ctx):
    from fastapi import HTTPException
    from loginguard.auth import normalize_identifier

    with pytest.raises(HTTPException) as e:
        normalize_identifier("   ")
    assert e.value.status_code == 400


def test_normalize_identifier_rejects_control_characters(app_ctx):
    from fastapi import HTTPException
    from loginguard.auth import normalize_identifier

    with pytest.raises(HTTPException):
        normalize_identifier("bad\nname")
    with pytest.raises(HTTPException):
        normalize_identifier("bad\x00name")


def test_normalize_identifier_rejects_overlong(app_ctx):
    from fastapi import HTTPException
    from loginguard.auth import normalize_identifier

    assert len(normalize_identifier("a" * 254)) == 254
    with pytest.raises(HTTPException) as e:
        normalize_identifier("a" * 255)
    assert e.value.status_code == 400


def test_auth_header_key(app_ctx, guard_secret):
    from fastapi import HTTPException
    from loginguard.auth import auth_header_key

    auth_header_key(guard_secret)
    for bad in (None, "", "wrong", "ключ"):
        with pytest.raises(HTTPException) as e:
            auth_header_key(bad)
        assert e.value.status_code == 401
