from typing import List

from fastapi import APIRouter, Depends

from diagnoease.constants import Access
from diagnoease.schemas import AdminStatOut, FeaturedTest
from diagnoease.security import require
from diagnoease.services import report_service

router = APIRouter(tags=["reports"])


@router.get("/featured-tests", response_model=List[FeaturedTest])
async def featured_tests():
    """Top five most booked tests."""
    return await report_service.featured_tests()


@router.get(
    "/admin-stat",
    response_model=AdminStatOut,
    dependencies=[Depends(require(Access.ADMIN_ONLY))],
)
async def admin_stat():
    return await report_service.admin_stats()
