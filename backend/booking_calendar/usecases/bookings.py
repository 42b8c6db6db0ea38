import logging
from datetime import date, datetime
from typing import Optional

from ..domain.errors import BookingNotFoundError, InvalidInputError, NotOwnerError
from ..domain.repositories import BookingRepository, ResourceRepository
from ..domain.services import SlotRequest, config_of, ensure_bookable, validate_booking_slot
from ..models import Booking, BookingStatus
from ..utils.time import to_day

logger = logging.getLogger(__name__)


async def create_booking(
    resource_repo: ResourceRepository,
    booking_repo: BookingRepository,
    *,
    resource_id: str,
    day: date,
    time: str,
    owner_id: str,
    owner_email: Optional[str],
    now: Optional[datetime] = None,
    allow_past: bool = True,
) -> Booking:
    day = to_day(day)
    resource = ensure_bookable(await resource_repo.get(resource_id), resource_id)
    canonical_time = validate_booking_slot(
        config_of(resource),
        SlotRequest(day=day, time=time, now=now, allow_past=allow_past),
    )

    # SlotConflictError from the ledger is passed through untouched.
    booking = await booking_repo.insert_confirmed(
        resource_id=resource.resource_id,
        resource_name=resource.name,
        owner_id=owner_id,
        owner_email=owner_email,
        day=day,
        time=canonical_time,
    )
    logger.info("booked %s on %s at %s for %s", resource_id, day.isoformat(), canonical_time, owner_id)
    return booking


async def cancel_booking(
    booking_repo: BookingRepository,
    *,
    booking_id: int,
    requester_id: str,
) -> tuple[Booking, BookingStatus]:
    """Cancel an owned booking. Returns the booking and its status before the call."""
    booking = await booking_repo.get_for_update(booking_id)
    if booking is None:
        raise BookingNotFoundError("booking not found")
    if booking.owner_id != requester_id:
        raise NotOwnerError("you can only cancel your own bookings")
    previous = booking.status
    # Idempotent: already cancelled returns as-is
    if previous == BookingStatus.CANCELLED:
        return booking, previous

    updated = await booking_repo.cancel(booking)
    logger.info("cancelled booking %s", booking_id)
    return updated, previous


async def list_bookings_in_range(
    booking_repo: BookingRepository,
    *,
    start_day: date,
    end_day: date,
    resource_id: Optional[str] = None,
) -> list[Booking]:
    start_day, end_day = to_day(start_day), to_day(end_day)
    if start_day > end_day:
        raise InvalidInputError("start_date must not be after end_date")
    return await booking_repo.list_confirmed_in_range(start_day, end_day, resource_id)


async def list_my_bookings(
    booking_repo: BookingRepository,
    *,
    owner_id: str,
    now: datetime,
) -> list[Booking]:
    return await booking_repo.list_future_for_owner(owner_id, now)
