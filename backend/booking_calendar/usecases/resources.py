import logging
from typing import Optional

from ..domain.errors import ResourceNotFoundError
from ..domain.repositories import ResourceRepository
from ..domain.services import config_of
from ..domain.slot_grid import BookingConfig
from ..models import Resource

logger = logging.getLogger(__name__)


async def list_resources(resource_repo: ResourceRepository) -> list[Resource]:
    return await resource_repo.list_active()


async def get_resource(resource_repo: ResourceRepository, *, resource_id: str) -> Resource:
    resource = await resource_repo.get(resource_id)
    if resource is None:
        raise ResourceNotFoundError(f"resource {resource_id!r} not found")
    return resource


async def create_resource(
    resource_repo: ResourceRepository,
    *,
    resource_id: str,
    name: str,
    description: str = "",
    is_active: bool = True,
    config: Optional[BookingConfig] = None,
) -> Resource:
    checked = (config or BookingConfig()).validate()
    resource = await resource_repo.create(
        resource_id=resource_id,
        name=name,
        description=description,
        is_active=is_active,
        config=checked,
    )
    logger.info("created resource %s (%s)", resource_id, checked.describe())
    return resource


async def update_resource(
    resource_repo: ResourceRepository,
    *,
    resource_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    is_active: Optional[bool] = None,
    duration: Optional[int] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> Resource:
    """
    Apply an administrative change. Booking config fields are merged with the
    current values and the result is validated before anything is written.
    Existing bookings keep their labels even if they fall off the new grid.
    """
    resource = await get_resource(resource_repo, resource_id=resource_id)
    current = config_of(resource)
    checked = BookingConfig(
        duration=duration if duration is not None else current.duration,
        start_time=start_time if start_time is not None else current.start_time,
        end_time=end_time if end_time is not None else current.end_time,
    ).validate()

    if name is not None:
        resource.name = name
    if description is not None:
        resource.description = description
    if is_active is not None:
        resource.is_active = is_active
    resource.duration = checked.duration
    resource.start_time = checked.start_time
    resource.end_time = checked.end_time
    return await resource_repo.update(resource)


async def deactivate_resource(resource_repo: ResourceRepository, *, resource_id: str) -> Resource:
    return await update_resource(resource_repo, resource_id=resource_id, is_active=False)
