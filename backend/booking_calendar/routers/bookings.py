import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..deps import get_current_principal, get_now, get_session
from ..domain.errors import (
    BookingNotFoundError,
    InvalidInputError,
    NotOwnerError,
    ResourceNotFoundError,
    SlotConflictError,
)
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemyResourceRepository
from ..schemas import BookingCreate, BookingRead
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import emit_audit_log
from ..utils.auth import Principal

router = APIRouter(prefix="", tags=["bookings"], dependencies=[Depends(get_current_principal)])


@router.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    start_date: dt.date = Query(...),
    end_date: dt.date = Query(...),
    resource_id: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[BookingRead]:
    booking_repo = SqlAlchemyBookingRepository(session)
    try:
        bookings = await booking_usecase.list_bookings_in_range(
            booking_repo,
            start_day=start_date,
            end_day=end_date,
            resource_id=resource_id,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return [BookingRead.from_db(booking=booking) for booking in bookings]


@router.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
    now: dt.datetime = Depends(get_now),
) -> BookingRead:
    resource_repo = SqlAlchemyResourceRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            booking = await booking_usecase.create_booking(
                resource_repo,
                booking_repo,
                resource_id=payload.resource_id,
                day=payload.date,
                time=payload.time,
                owner_id=principal.user_id,
                owner_email=principal.email,
                now=now,
                allow_past=get_settings().allow_past_bookings,
            )
        except ResourceNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
        except SlotConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

        try:
            emit_audit_log(
                action="booking.created",
                actor_id=principal.user_id,
                resource_id=booking.resource_id,
                booking_id=booking.id,
                day=booking.date,
                time=booking.time,
                status_to=booking.status,
            )
        except RuntimeError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to record audit log")

    return BookingRead.from_db(booking=booking)


@router.get("/me/bookings", response_model=List[BookingRead])
async def list_my_bookings(
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
    now: dt.datetime = Depends(get_now),
) -> list[BookingRead]:
    booking_repo = SqlAlchemyBookingRepository(session)
    bookings = await booking_usecase.list_my_bookings(booking_repo, owner_id=principal.user_id, now=now)
    return [BookingRead.from_db(booking=booking) for booking in bookings]


@router.post("/me/bookings/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> BookingRead:
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            booking, previous = await booking_usecase.cancel_booking(
                booking_repo,
                booking_id=booking_id,
                requester_id=principal.user_id,
            )
        except BookingNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
        except NotOwnerError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)

        if previous != booking.status:
            try:
                emit_audit_log(
                    action="booking.cancelled",
                    actor_id=principal.user_id,
                    resource_id=booking.resource_id,
                    booking_id=booking.id,
                    day=booking.date,
                    time=booking.time,
                    status_from=previous,
                    status_to=booking.status,
                )
            except RuntimeError:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="failed to record audit log",
                )

    return BookingRead.from_db(booking=booking)
