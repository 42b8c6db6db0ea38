from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from datetime import time as dt_time
from typing import Optional

from ..models import Resource
from .errors import InvalidSlotError, PastSlotError, ResourceNotFoundError
from .slot_grid import BookingConfig, is_valid_slot, normalize_slot, parse_time


@dataclass(frozen=True)
class SlotRequest:
    day: date
    time: str
    now: Optional[datetime] = None
    allow_past: bool = True


def config_of(resource: Resource) -> BookingConfig:
    return BookingConfig(
        duration=resource.duration,
        start_time=resource.start_time,
        end_time=resource.end_time,
    )


def ensure_bookable(resource: Optional[Resource], resource_id: str) -> Resource:
    if resource is None or not resource.is_active:
        raise ResourceNotFoundError(f"resource {resource_id!r} not found")
    return resource


def slot_starts_before(day: date, time: str, now: datetime) -> bool:
    minutes = parse_time(time)
    slot_start = datetime.combine(day, dt_time(minutes // 60, minutes % 60))
    return slot_start < now.replace(tzinfo=None)


def validate_booking_slot(config: BookingConfig, request: SlotRequest) -> str:
    """
    Pure pre-commit validation of a requested slot.
    Returns the canonical ``HH:MM`` label to store. Raises domain errors otherwise.
    """
    if not is_valid_slot(request.time, config):
        raise InvalidSlotError(f"{request.time} is not a valid time slot. Must be {config.describe()}.")
    time = normalize_slot(request.time)
    if not request.allow_past and request.now is not None and slot_starts_before(request.day, time, request.now):
        raise PastSlotError(f"{request.day.isoformat()} {time} is in the past")
    return time
