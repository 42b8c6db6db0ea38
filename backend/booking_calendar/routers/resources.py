import datetime as dt
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_principal, get_now, get_session, require_admin
from ..domain.errors import InvalidInputError, ResourceAlreadyExistsError, ResourceNotFoundError
from ..domain.slot_grid import BookingConfig
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemyResourceRepository
from ..schemas import AvailabilityRead, ResourceCreate, ResourceRead, ResourceUpdate
from ..usecases import availability as availability_usecase
from ..usecases import resources as resource_usecase
from ..utils.audit_log import emit_audit_log
from ..utils.auth import Principal

router = APIRouter(prefix="/resources", tags=["resources"], dependencies=[Depends(get_current_principal)])


@router.get("", response_model=List[ResourceRead])
async def list_resources(session: AsyncSession = Depends(get_session)) -> list[ResourceRead]:
    resource_repo = SqlAlchemyResourceRepository(session)
    resources = await resource_usecase.list_resources(resource_repo)
    return [ResourceRead.from_db(resource=resource) for resource in resources]


@router.post("", response_model=ResourceRead, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    session: AsyncSession = Depends(get_session),
    admin: Principal = Depends(require_admin),
) -> ResourceRead:
    resource_repo = SqlAlchemyResourceRepository(session)
    async with session.begin():
        try:
            resource = await resource_usecase.create_resource(
                resource_repo,
                resource_id=payload.resource_id,
                name=payload.name,
                description=payload.description,
                is_active=payload.is_active,
                config=BookingConfig(**payload.booking_config.model_dump()),
            )
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
        except ResourceAlreadyExistsError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

        try:
            emit_audit_log(action="resource.created", actor_id=admin.user_id, resource_id=resource.resource_id)
        except RuntimeError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to record audit log")

    return ResourceRead.from_db(resource=resource)


@router.patch("/{resource_id}", response_model=ResourceRead)
async def update_resource(
    resource_id: str,
    payload: ResourceUpdate,
    session: AsyncSession = Depends(get_session),
    admin: Principal = Depends(require_admin),
) -> ResourceRead:
    resource_repo = SqlAlchemyResourceRepository(session)
    changes = payload.model_dump(exclude_unset=True)
    async with session.begin():
        try:
            resource = await resource_usecase.update_resource(resource_repo, resource_id=resource_id, **changes)
        except ResourceNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)

        try:
            emit_audit_log(
                action="resource.updated",
                actor_id=admin.user_id,
                resource_id=resource.resource_id,
                extra={"fields": sorted(changes)},
            )
        except RuntimeError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to record audit log")

    return ResourceRead.from_db(resource=resource)


@router.get("/{resource_id}/availability", response_model=AvailabilityRead)
async def get_availability(
    resource_id: str,
    day: dt.date = Query(..., alias="date", description="Calendar date (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
    now: dt.datetime = Depends(get_now),
) -> AvailabilityRead:
    resource_repo = SqlAlchemyResourceRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    try:
        view = await availability_usecase.compute_availability(
            resource_repo,
            booking_repo,
            resource_id=resource_id,
            day=day,
            now=now,
        )
    except ResourceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    return AvailabilityRead.from_domain(view)
