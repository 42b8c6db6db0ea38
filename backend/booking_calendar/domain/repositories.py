from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from ..models import Booking, Resource
from .slot_grid import BookingConfig


class ResourceRepository(Protocol):
    async def get(self, resource_id: str) -> Resource | None: ...

    async def list_active(self) -> list[Resource]: ...

    async def create(
        self,
        *,
        resource_id: str,
        name: str,
        description: str,
        is_active: bool,
        config: BookingConfig,
    ) -> Resource: ...

    async def update(self, resource: Resource) -> Resource: ...


class BookingRepository(Protocol):
    async def get(self, booking_id: int) -> Booking | None: ...

    async def get_for_update(self, booking_id: int) -> Booking | None: ...

    async def find_confirmed(self, resource_id: str, day: date, time: str) -> Booking | None: ...

    async def list_for_resource_and_date(self, resource_id: str, day: date) -> list[Booking]: ...

    async def list_confirmed_in_range(
        self,
        start_day: date,
        end_day: date,
        resource_id: str | None = None,
    ) -> list[Booking]: ...

    async def list_future_for_owner(self, owner_id: str, now: datetime) -> list[Booking]: ...

    async def insert_confirmed(
        self,
        *,
        resource_id: str,
        resource_name: str,
        owner_id: str,
        owner_email: str | None,
        day: date,
        time: str,
    ) -> Booking: ...

    async def cancel(self, booking: Booking) -> Booking: ...
