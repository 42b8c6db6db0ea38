from datetime import date, datetime

import pytest
from booking_calendar.domain.errors import (
    BookingNotFoundError,
    InvalidInputError,
    InvalidSlotError,
    NotOwnerError,
    PastSlotError,
    ResourceNotFoundError,
    SlotConflictError,
)
from booking_calendar.models import BookingStatus
from booking_calendar.usecases import bookings as uc
from fakes import FakeBookingRepo, FakeResourceRepo, make_resource

DAY = date(2024, 6, 10)


async def _book(resources: FakeResourceRepo, ledger: FakeBookingRepo, *, time: str = "09:00", owner: str = "u1"):
    return await uc.create_booking(
        resources,
        ledger,
        resource_id="room-2",
        day=DAY,
        time=time,
        owner_id=owner,
        owner_email=f"{owner}@example.com",
    )


@pytest.mark.asyncio
async def test_create_booking_snapshots_resource_name() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    booking = await _book(resources, ledger)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.resource_name == "Meeting Room 2"
    assert booking.owner_email == "u1@example.com"

    resources.resources["room-2"].name = "Renamed Room"
    assert ledger.bookings[0].resource_name == "Meeting Room 2"


@pytest.mark.asyncio
async def test_create_booking_truncates_datetime_to_day() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    booking = await uc.create_booking(
        resources,
        ledger,
        resource_id="room-2",
        day=datetime(2024, 6, 10, 15, 42),
        time="9:30",
        owner_id="u1",
        owner_email=None,
    )
    assert booking.date == DAY
    assert booking.time == "09:30"


@pytest.mark.asyncio
async def test_create_booking_unknown_or_inactive_resource() -> None:
    resources = FakeResourceRepo(make_resource("room-old", is_active=False))
    ledger = FakeBookingRepo()
    with pytest.raises(ResourceNotFoundError):
        await _book(resources, ledger)
    with pytest.raises(ResourceNotFoundError):
        await uc.create_booking(
            resources,
            ledger,
            resource_id="room-old",
            day=DAY,
            time="09:00",
            owner_id="u1",
            owner_email=None,
        )
    assert ledger.bookings == []


@pytest.mark.asyncio
async def test_create_booking_invalid_slot_is_not_written() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    with pytest.raises(InvalidSlotError):
        await _book(resources, ledger, time="09:10")
    with pytest.raises(InvalidSlotError):
        await _book(resources, ledger, time="17:00")
    assert ledger.bookings == []


@pytest.mark.asyncio
async def test_second_create_on_same_slot_conflicts() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    await _book(resources, ledger, owner="u1")
    with pytest.raises(SlotConflictError) as excinfo:
        await _book(resources, ledger, owner="u2")
    assert excinfo.value.message == "time slot is already booked"


@pytest.mark.asyncio
async def test_create_booking_rejects_past_when_not_allowed() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    with pytest.raises(PastSlotError):
        await uc.create_booking(
            resources,
            ledger,
            resource_id="room-2",
            day=DAY,
            time="09:00",
            owner_id="u1",
            owner_email=None,
            now=datetime(2024, 6, 12, 8, 0),
            allow_past=False,
        )


@pytest.mark.asyncio
async def test_cancel_by_owner() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    booking = await _book(resources, ledger)
    updated, previous = await uc.cancel_booking(ledger, booking_id=booking.id, requester_id="u1")
    assert previous == BookingStatus.CONFIRMED
    assert updated.status == BookingStatus.CANCELLED
    assert ledger.cancel_calls == 1


@pytest.mark.asyncio
async def test_cancel_is_idempotent() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    booking = await _book(resources, ledger)
    await uc.cancel_booking(ledger, booking_id=booking.id, requester_id="u1")
    updated, previous = await uc.cancel_booking(ledger, booking_id=booking.id, requester_id="u1")
    assert previous == BookingStatus.CANCELLED
    assert updated is booking
    assert ledger.cancel_calls == 1


@pytest.mark.asyncio
async def test_cancel_by_non_owner_is_forbidden() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    booking = await _book(resources, ledger)
    with pytest.raises(NotOwnerError):
        await uc.cancel_booking(ledger, booking_id=booking.id, requester_id="intruder")
    assert booking.status == BookingStatus.CONFIRMED
    assert ledger.cancel_calls == 0


@pytest.mark.asyncio
async def test_cancel_missing_booking() -> None:
    with pytest.raises(BookingNotFoundError):
        await uc.cancel_booking(FakeBookingRepo(), booking_id=42, requester_id="u1")


@pytest.mark.asyncio
async def test_cancelled_booking_frees_the_slot() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    first = await _book(resources, ledger, owner="u1")
    await uc.cancel_booking(ledger, booking_id=first.id, requester_id="u1")
    second = await _book(resources, ledger, owner="u2")
    assert second.status == BookingStatus.CONFIRMED
    assert second.id != first.id


@pytest.mark.asyncio
async def test_list_bookings_in_range_rejects_inverted_range() -> None:
    with pytest.raises(InvalidInputError):
        await uc.list_bookings_in_range(FakeBookingRepo(), start_day=date(2024, 6, 30), end_day=date(2024, 6, 1))


@pytest.mark.asyncio
async def test_list_bookings_in_range_only_confirmed() -> None:
    resources = FakeResourceRepo(make_resource())
    ledger = FakeBookingRepo()
    kept = await _book(resources, ledger, time="10:00")
    dropped = await _book(resources, ledger, time="11:00")
    await uc.cancel_booking(ledger, booking_id=dropped.id, requester_id="u1")
    rows = await uc.list_bookings_in_range(ledger, start_day=date(2024, 6, 1), end_day=date(2024, 6, 30))
    assert rows == [kept]
