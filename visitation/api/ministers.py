"""Minister management endpoints. Admin only."""

from fastapi import APIRouter

from visitation.api.dependencies import MinisterManager, ServicesDep
from visitation.models.api import MinisterResponse
from visitation.models.minister import MinisterInput, MinisterUpdate
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/ministers", tags=["Ministers"])


@router.get("", response_model=list[MinisterResponse])
async def list_ministers(services: ServicesDep, manager: MinisterManager) -> list[MinisterResponse]:
    """List every minister."""
    return [MinisterResponse.from_minister(minister) for minister in await services.ministers.list_all()]


@router.get("/{minister_id}", response_model=MinisterResponse)
async def get_minister(minister_id: int, services: ServicesDep, manager: MinisterManager) -> MinisterResponse:
    """Get one minister."""
    return MinisterResponse.from_minister(await services.ministers.require(minister_id))


@router.post("", response_model=MinisterResponse, status_code=201)
async def create_minister(
    data: MinisterInput, services: ServicesDep, manager: MinisterManager
) -> MinisterResponse:
    """Register a minister account."""
    minister = await services.ministers.create(data)
    logger.info(f"Minister {manager.username} created minister {minister.username}")
    return MinisterResponse.from_minister(minister)


@router.patch("/{minister_id}", response_model=MinisterResponse)
async def update_minister(
    minister_id: int, patch: MinisterUpdate, services: ServicesDep, manager: MinisterManager
) -> MinisterResponse:
    """Change the fields sent in the body."""
    return MinisterResponse.from_minister(await services.ministers.update(minister_id, patch))


@router.delete("/{minister_id}", status_code=204)
async def delete_minister(minister_id: int, services: ServicesDep, manager: MinisterManager) -> None:
    """Remove a minister account."""
    await services.ministers.delete(minister_id)
    logger.info(f"Minister {manager.username} deleted minister {minister_id}")
