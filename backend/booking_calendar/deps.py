from datetime import datetime
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import async_session
from .infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemyResourceRepository
from .utils.auth import Principal, decode_access_token
from .utils.time import local_now

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


async def get_current_principal(authorization: str | None = Header(default=None)) -> Principal:
    if authorization is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers=_BEARER_CHALLENGE,
        )
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token required",
            headers=_BEARER_CHALLENGE,
        )
    settings = get_settings()
    try:
        return decode_access_token(token.strip(), secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired token",
            headers=_BEARER_CHALLENGE,
        ) from exc


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.user_id not in get_settings().admin_user_ids:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="administrator role required")
    return principal


def get_now() -> datetime:
    return local_now(get_settings().timezone)


async def get_resource_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyResourceRepository:
    return SqlAlchemyResourceRepository(session)


async def get_booking_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyBookingRepository:
    return SqlAlchemyBookingRepository(session)
