from pathlib import Path
from typing import AsyncIterator

import pytest_asyncio
from booking_calendar.database import create_schema
from booking_calendar.domain.slot_grid import BookingConfig
from booking_calendar.infrastructure.repositories import SqlAlchemyResourceRepository
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

SEED_RESOURCES = [
    ("room-1", "Meeting Room 1", "Main conference room", BookingConfig(60, "09:00", "17:00")),
    ("room-2", "Meeting Room 2", "Small meeting room", BookingConfig(30, "09:00", "17:00")),
    ("projector-1", "Projector", "Portable projector", BookingConfig(120, "10:00", "16:00")),
]


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # File database: every connection must see the same tables and locks.
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    await create_schema(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        async with session.begin():
            repo = SqlAlchemyResourceRepository(session)
            for resource_id, name, description, config in SEED_RESOURCES:
                await repo.create(
                    resource_id=resource_id,
                    name=name,
                    description=description,
                    is_active=True,
                    config=config,
                )
            await repo.create(
                resource_id="room-old",
                name="Retired Room",
                description="",
                is_active=False,
                config=BookingConfig(),
            )
    return factory
