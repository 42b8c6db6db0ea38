from __future__ import annotations

import datetime as dt
from enum import StrEnum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, Date, DateTime, Integer, SmallInteger, String

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
_PK = BigInteger().with_variant(Integer(), "sqlite")

# Value of Booking.confirmed_slot while the booking is confirmed; NULL otherwise.
CONFIRMED_SLOT_MARKER = 1


class Base(DeclarativeBase):
    pass


class BookingStatus(StrEnum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Resource(Base):
    __tablename__ = "resources"
    __table_args__ = (
        UniqueConstraint("resource_id", name="uq_resources_resource_id"),
        CheckConstraint("duration >= 15 AND duration <= 480", name="chk_resources_duration"),
        CheckConstraint("start_time < end_time", name="chk_resources_window"),
        Index("idx_resources_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False, default="09:00")
    end_time: Mapped[str] = mapped_column(String(5), nullable=False, default="17:00")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    bookings: Mapped[list["Booking"]] = relationship(back_populates="resource")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # NULLs are distinct in a unique constraint, so any number of cancelled
        # rows may share a triple while only one confirmed row can exist.
        UniqueConstraint("resource_id", "date", "time", "confirmed_slot", name="uq_bookings_confirmed_slot"),
        CheckConstraint(
            "(status = 'confirmed' AND confirmed_slot = 1) OR (status = 'cancelled' AND confirmed_slot IS NULL)",
            name="chk_bookings_confirmed_slot",
        ),
        Index("idx_bookings_resource_date", "resource_id", "date"),
        Index("idx_bookings_owner", "owner_id"),
    )

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    resource_id: Mapped[str] = mapped_column(ForeignKey("resources.resource_id"), nullable=False)
    resource_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    owner_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            native_enum=False,
        ),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )
    confirmed_slot: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True, default=CONFIRMED_SLOT_MARKER)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    resource: Mapped["Resource"] = relationship(back_populates="bookings")
