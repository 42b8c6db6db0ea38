from datetime import timedelta
from typing import Iterator

import pytest
from booking_calendar.config import get_settings
from booking_calendar.deps import get_current_principal, require_admin
from booking_calendar.utils.auth import Principal, create_access_token, decode_access_token
from fastapi import HTTPException


@pytest.fixture(autouse=True)
def _set_auth_secret(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("AUTH_SECRET", "testsecret")
    monkeypatch.setenv("ADMIN_USER_IDS", "admin-1, admin-2")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_resolves_principal_from_bearer_token() -> None:
    token = create_access_token(user_id="u-123", email="u@example.com", secret="testsecret")
    principal = await get_current_principal(authorization=f"Bearer {token}")
    assert principal == Principal(user_id="u-123", email="u@example.com")


@pytest.mark.asyncio
async def test_email_claim_is_optional() -> None:
    token = create_access_token(user_id="u-123", secret="testsecret")
    principal = await get_current_principal(authorization=f"bearer {token}")
    assert principal.email is None


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "Bearer not-a-jwt"])
@pytest.mark.asyncio
async def test_rejects_missing_or_malformed_header(header: str | None) -> None:
    with pytest.raises(HTTPException) as excinfo:
        await get_current_principal(authorization=header)
    assert excinfo.value.status_code == 401
    assert excinfo.value.headers == {"WWW-Authenticate": "Bearer"}


@pytest.mark.asyncio
async def test_rejects_expired_token() -> None:
    token = create_access_token(user_id="u-1", secret="testsecret", expires_delta=timedelta(seconds=-1))
    with pytest.raises(HTTPException) as excinfo:
        await get_current_principal(authorization=f"Bearer {token}")
    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_rejects_token_signed_with_other_secret() -> None:
    token = create_access_token(user_id="u-1", secret="othersecret")
    with pytest.raises(HTTPException) as excinfo:
        await get_current_principal(authorization=f"Bearer {token}")
    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_require_admin() -> None:
    assert await require_admin(Principal(user_id="admin-2")) == Principal(user_id="admin-2")
    with pytest.raises(HTTPException) as excinfo:
        await require_admin(Principal(user_id="u-1"))
    assert excinfo.value.status_code == 403


def test_decode_rejects_token_without_subject() -> None:
    import jwt

    token = jwt.encode({"email": "x@example.com"}, "testsecret", algorithm="HS256")
    with pytest.raises(ValueError):
        decode_access_token(token, secret="testsecret", algorithms=["HS256"])
