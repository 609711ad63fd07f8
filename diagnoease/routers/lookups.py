from typing import List, Optional

from fastapi import APIRouter, Query

from diagnoease.models import District, Recommendation, Upazila

router = APIRouter(tags=["lookups"])


@router.get("/districts", response_model=List[District])
async def list_districts():
    return await District.find_all().to_list()


@router.get("/upazilas", response_model=List[Upazila])
async def list_upazilas(district_id: Optional[str] = Query(None)):
    query = Upazila.find_all()
    if district_id:
        query = Upazila.find(Upazila.district_id == district_id)
    return await query.to_list()


@router.get("/recommendations", response_model=List[Recommendation])
async def list_recommendations():
    return await Recommendation.find_all().to_list()
