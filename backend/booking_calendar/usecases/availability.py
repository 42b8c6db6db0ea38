from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..domain.repositories import BookingRepository, ResourceRepository
from ..domain.services import config_of, ensure_bookable, slot_starts_before
from ..domain.slot_grid import BookingConfig
from ..models import Booking, BookingStatus
from ..utils.time import to_day


@dataclass(frozen=True)
class ResourceSummary:
    resource_id: str
    name: str
    description: str
    config: BookingConfig


@dataclass(frozen=True)
class BookingSummary:
    booking_id: int
    owner_id: str
    owner_email: Optional[str]
    status: BookingStatus


@dataclass(frozen=True)
class SlotState:
    time: str
    is_available: bool
    booking: Optional[BookingSummary]
    is_past: bool = False


@dataclass(frozen=True)
class DayAvailability:
    resource: ResourceSummary
    day: date
    slots: list[SlotState]


def _occupant(bookings: list[Booking]) -> Optional[Booking]:
    """Confirmed booking if any, else the latest cancelled one."""
    for booking in bookings:
        if booking.status == BookingStatus.CONFIRMED:
            return booking
    return bookings[-1] if bookings else None


async def compute_availability(
    resource_repo: ResourceRepository,
    booking_repo: BookingRepository,
    *,
    resource_id: str,
    day: date,
    now: Optional[datetime] = None,
) -> DayAvailability:
    day = to_day(day)
    resource = ensure_bookable(await resource_repo.get(resource_id), resource_id)
    config = config_of(resource)

    by_time: dict[str, list[Booking]] = {}
    for booking in await booking_repo.list_for_resource_and_date(resource_id, day):
        by_time.setdefault(booking.time, []).append(booking)

    slots: list[SlotState] = []
    for time in config.slots():
        occupant = _occupant(by_time.get(time, []))
        slots.append(
            SlotState(
                time=time,
                is_available=occupant is None or occupant.status != BookingStatus.CONFIRMED,
                booking=(
                    BookingSummary(
                        booking_id=occupant.id,
                        owner_id=occupant.owner_id,
                        owner_email=occupant.owner_email,
                        status=occupant.status,
                    )
                    if occupant is not None
                    else None
                ),
                is_past=now is not None and slot_starts_before(day, time, now),
            )
        )

    return DayAvailability(
        resource=ResourceSummary(
            resource_id=resource.resource_id,
            name=resource.name,
            description=resource.description,
            config=config,
        ),
        day=day,
        slots=slots,
    )
