from typing import List, Optional

from fastapi import APIRouter, Depends

from diagnoease.constants import Access
from diagnoease.models import Banner
from diagnoease.schemas import BannerCreate, DeleteAck, InsertAck, UpdateAck
from diagnoease.security import require
from diagnoease.services import banner_service

router = APIRouter(tags=["banners"])

admin_only = [Depends(require(Access.ADMIN_ONLY))]


@router.post("/banner", response_model=InsertAck, dependencies=admin_only)
async def create_banner(payload: BannerCreate):
    banner = await banner_service.create_banner(payload)
    return InsertAck(insertedId=str(banner.id))


@router.get("/banner", response_model=List[Banner])
async def list_banners():
    return await banner_service.list_banners()


@router.delete("/banner/{banner_id}", response_model=DeleteAck, dependencies=admin_only)
async def delete_banner(banner_id: str):
    return await banner_service.delete_banner(banner_id)


@router.put("/banner/{banner_id}/activate", response_model=UpdateAck, dependencies=admin_only)
async def activate_banner(banner_id: str):
    return await banner_service.activate_banner(banner_id)


@router.get("/active-banner", response_model=Optional[Banner])
async def active_banner():
    return await banner_service.get_active_banner()
