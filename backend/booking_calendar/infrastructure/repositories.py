from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import ResourceAlreadyExistsError, SlotConflictError
from ..domain.repositories import BookingRepository, ResourceRepository
from ..domain.slot_grid import BookingConfig, format_time
from ..models import CONFIRMED_SLOT_MARKER, Booking, BookingStatus, Resource
from ..utils.time import to_day, utc_now_naive

logger = logging.getLogger(__name__)


class SqlAlchemyResourceRepository(ResourceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, resource_id: str) -> Resource | None:
        result = await self.session.scalar(select(Resource).where(Resource.resource_id == resource_id))
        return result if isinstance(result, Resource) else None

    async def list_active(self) -> List[Resource]:
        stmt = select(Resource).where(Resource.is_active.is_(True)).order_by(Resource.resource_id)
        return list((await self.session.scalars(stmt)).all())

    async def create(
        self,
        *,
        resource_id: str,
        name: str,
        description: str,
        is_active: bool,
        config: BookingConfig,
    ) -> Resource:
        now = utc_now_naive()
        resource = Resource(
            resource_id=resource_id,
            name=name,
            description=description,
            is_active=is_active,
            duration=config.duration,
            start_time=config.start_time,
            end_time=config.end_time,
            created_at=now,
            updated_at=now,
        )
        self.session.add(resource)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ResourceAlreadyExistsError(f"resource {resource_id!r} already exists") from exc
        return resource

    async def update(self, resource: Resource) -> Resource:
        resource.updated_at = utc_now_naive()
        self.session.add(resource)
        await self.session.flush()
        return resource


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, booking_id: int) -> Booking | None:
        result = await self.session.scalar(select(Booking).where(Booking.id == booking_id))
        return result if isinstance(result, Booking) else None

    async def get_for_update(self, booking_id: int) -> Booking | None:
        result = await self.session.scalar(select(Booking).where(Booking.id == booking_id).with_for_update())
        return result if isinstance(result, Booking) else None

    async def find_confirmed(self, resource_id: str, day: date, time: str) -> Booking | None:
        stmt = select(Booking).where(
            Booking.resource_id == resource_id,
            Booking.date == to_day(day),
            Booking.time == time,
            Booking.status == BookingStatus.CONFIRMED,
        )
        result = await self.session.scalar(stmt)
        return result if isinstance(result, Booking) else None

    async def list_for_resource_and_date(self, resource_id: str, day: date) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.resource_id == resource_id, Booking.date == to_day(day))
            .order_by(Booking.time, Booking.id)
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_confirmed_in_range(
        self,
        start_day: date,
        end_day: date,
        resource_id: Optional[str] = None,
    ) -> List[Booking]:
        stmt: Select[tuple[Booking]] = (
            select(Booking)
            .where(
                Booking.status == BookingStatus.CONFIRMED,
                Booking.date >= to_day(start_day),
                Booking.date <= to_day(end_day),
            )
            .order_by(Booking.date, Booking.time, Booking.resource_id)
        )
        if resource_id is not None:
            stmt = stmt.where(Booking.resource_id == resource_id)
        return list((await self.session.scalars(stmt)).all())

    async def list_future_for_owner(self, owner_id: str, now: datetime) -> List[Booking]:
        today = now.date()
        current = format_time(now.hour * 60 + now.minute)
        stmt = (
            select(Booking)
            .where(
                Booking.owner_id == owner_id,
                or_(
                    Booking.date > today,
                    and_(Booking.date == today, Booking.time >= current),
                ),
            )
            .order_by(Booking.date, Booking.time, Booking.id)
        )
        return list((await self.session.scalars(stmt)).all())

    async def insert_confirmed(
        self,
        *,
        resource_id: str,
        resource_name: str,
        owner_id: str,
        owner_email: Optional[str],
        day: date,
        time: str,
    ) -> Booking:
        # No pre-read: uq_bookings_confirmed_slot decides between concurrent inserts.
        now = utc_now_naive()
        day = to_day(day)
        booking = Booking(
            resource_id=resource_id,
            resource_name=resource_name,
            owner_id=owner_id,
            owner_email=owner_email,
            date=day,
            time=time,
            status=BookingStatus.CONFIRMED,
            confirmed_slot=CONFIRMED_SLOT_MARKER,
            created_at=now,
            updated_at=now,
        )
        self.session.add(booking)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            logger.info("slot conflict on %s %s %s", resource_id, day.isoformat(), time)
            raise SlotConflictError("time slot is already booked") from exc
        return booking

    async def cancel(self, booking: Booking) -> Booking:
        booking.status = BookingStatus.CANCELLED
        booking.confirmed_slot = None
        booking.updated_at = utc_now_naive()
        self.session.add(booking)
        await self.session.flush()
        return booking
