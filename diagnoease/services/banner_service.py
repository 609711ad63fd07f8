from typing import List, Optional

from beanie import UpdateResponse
from beanie.operators import Set
from fastapi import HTTPException

from diagnoease.database import store_transaction
from diagnoease.models import Banner
from diagnoease.schemas import BannerCreate, DeleteAck, UpdateAck
from diagnoease.utils.ids import parse_object_id
from diagnoease.utils.logger import get_logger

logger = get_logger("banner_service")


async def create_banner(data: BannerCreate) -> Banner:
    """New banners start inactive; use activate_banner to show one."""
    banner = Banner(**data.model_dump(), isActive=False)
    await banner.insert()
    return banner


async def list_banners() -> List[Banner]:
    return await Banner.find_all().to_list()


async def get_active_banner() -> Optional[Banner]:
    return await Banner.find_one(Banner.isActive == True)  # noqa: E712


async def delete_banner(banner_id: str) -> DeleteAck:
    result = await Banner.find_one(Banner.id == parse_object_id(banner_id)).delete()
    return DeleteAck.from_result(result)


async def activate_banner(banner_id: str) -> UpdateAck:
    """Deactivate every banner, then activate the target.

    Clearing first keeps "at most one active" true at every step; inside a
    transaction readers never see the gap between the two writes.
    """
    oid = parse_object_id(banner_id)
    if not await Banner.get(oid):
        raise HTTPException(status_code=404, detail="Banner not found")

    async with store_transaction() as session:
        await Banner.find(Banner.isActive == True, session=session).update(  # noqa: E712
            Set({Banner.isActive: False}), session=session
        )
        result = await Banner.find_one(Banner.id == oid, session=session).update(
            Set({Banner.isActive: True}),
            session=session,
            response_type=UpdateResponse.UPDATE_RESULT,
        )
    logger.info(f"Banner {banner_id} activated")
    return UpdateAck.from_result(result)
