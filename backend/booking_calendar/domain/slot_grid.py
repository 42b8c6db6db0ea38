from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidBookingConfigError, InvalidSlotError

MIN_DURATION = 15
MAX_DURATION = 480
MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_time(value: str) -> int:
    """Return minutes since midnight for a 24h ``H:MM``/``HH:MM`` label."""
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidSlotError(f"{value!r} is not a valid HH:MM time")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError("minutes must be within a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_slot(value: str) -> str:
    """Canonical zero-padded form of a time label, e.g. ``9:00`` -> ``09:00``."""
    return format_time(parse_time(value))


def generate_slots(start_time: str, end_time: str, duration: int) -> list[str]:
    """
    Ordered slot labels of the half-open window ``[start_time, end_time)``.

    A label is emitted every ``duration`` minutes starting at ``start_time``;
    a trailing remainder shorter than ``duration`` produces no slot.
    """
    if duration <= 0:
        raise InvalidBookingConfigError("duration must be positive")
    start = parse_time(start_time)
    end = parse_time(end_time)
    return [format_time(minute) for minute in range(start, end, duration)]


@dataclass(frozen=True)
class BookingConfig:
    duration: int = 60
    start_time: str = "09:00"
    end_time: str = "17:00"

    def validate(self) -> "BookingConfig":
        """Check bounds and return the config with canonical time labels."""
        if not MIN_DURATION <= self.duration <= MAX_DURATION:
            raise InvalidBookingConfigError(
                f"duration must be between {MIN_DURATION} and {MAX_DURATION} minutes"
            )
        try:
            start = parse_time(self.start_time)
            end = parse_time(self.end_time)
        except InvalidSlotError as exc:
            raise InvalidBookingConfigError(exc.message) from exc
        if start >= end:
            raise InvalidBookingConfigError("start_time must be earlier than end_time")
        return BookingConfig(duration=self.duration, start_time=format_time(start), end_time=format_time(end))

    def slots(self) -> list[str]:
        return generate_slots(self.start_time, self.end_time, self.duration)

    def describe(self) -> str:
        return f"between {self.start_time} and {self.end_time} with {self.duration} minute intervals"


def is_valid_slot(time: str, config: BookingConfig) -> bool:
    """True iff ``time`` is a well-formed label that lies on the config's grid."""
    try:
        minute = parse_time(time)
        start = parse_time(config.start_time)
        end = parse_time(config.end_time)
    except InvalidSlotError:
        return False
    if config.duration <= 0 or not start <= minute < end:
        return False
    return (minute - start) % config.duration == 0
