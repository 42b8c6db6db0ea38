import datetime as dt
from typing import Optional, Union

from pydantic import BaseModel, Field

from .models import Booking, BookingStatus, Resource
from .usecases.availability import DayAvailability, SlotState


class BookingConfigSchema(BaseModel):
    duration: int = 60
    start_time: str = "09:00"
    end_time: str = "17:00"


class ResourceCreate(BaseModel):
    resource_id: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9._\-]+$")
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=1024)
    is_active: bool = True
    booking_config: BookingConfigSchema = Field(default_factory=BookingConfigSchema)


class ResourceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1024)
    is_active: Optional[bool] = None
    duration: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ResourceRead(BaseModel):
    resource_id: str
    name: str
    description: str
    is_active: bool
    booking_config: BookingConfigSchema

    @classmethod
    def from_db(cls, *, resource: Resource) -> "ResourceRead":
        return cls(
            resource_id=resource.resource_id,
            name=resource.name,
            description=resource.description,
            is_active=resource.is_active,
            booking_config=BookingConfigSchema(
                duration=resource.duration,
                start_time=resource.start_time,
                end_time=resource.end_time,
            ),
        )


class BookingCreate(BaseModel):
    resource_id: str
    # Any time-of-day part is dropped before the booking is stored.
    date: Union[dt.date, dt.datetime]
    time: str


class BookingRead(BaseModel):
    booking_id: int
    resource_id: str
    resource_name: str
    owner_id: str
    owner_email: Optional[str]
    date: dt.date
    time: str
    status: BookingStatus
    created_at: dt.datetime

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            booking_id=booking.id,
            resource_id=booking.resource_id,
            resource_name=booking.resource_name,
            owner_id=booking.owner_id,
            owner_email=booking.owner_email,
            date=booking.date,
            time=booking.time,
            status=booking.status,
            created_at=booking.created_at,
        )


class SlotBookingRead(BaseModel):
    booking_id: int
    owner_id: str
    owner_email: Optional[str]
    status: BookingStatus


class SlotStateRead(BaseModel):
    time: str
    is_available: bool
    is_past: bool
    booking: Optional[SlotBookingRead]

    @classmethod
    def from_domain(cls, slot: SlotState) -> "SlotStateRead":
        booking = None
        if slot.booking is not None:
            booking = SlotBookingRead(
                booking_id=slot.booking.booking_id,
                owner_id=slot.booking.owner_id,
                owner_email=slot.booking.owner_email,
                status=slot.booking.status,
            )
        return cls(time=slot.time, is_available=slot.is_available, is_past=slot.is_past, booking=booking)


class ResourceSummaryRead(BaseModel):
    resource_id: str
    name: str
    description: str
    booking_config: BookingConfigSchema


class AvailabilityRead(BaseModel):
    resource: ResourceSummaryRead
    date: dt.date
    availability: list[SlotStateRead]

    @classmethod
    def from_domain(cls, view: DayAvailability) -> "AvailabilityRead":
        config = view.resource.config
        return cls(
            resource=ResourceSummaryRead(
                resource_id=view.resource.resource_id,
                name=view.resource.name,
                description=view.resource.description,
                booking_config=BookingConfigSchema(
                    duration=config.duration,
                    start_time=config.start_time,
                    end_time=config.end_time,
                ),
            ),
            date=view.day,
            availability=[SlotStateRead.from_domain(slot) for slot in view.slots],
        )
