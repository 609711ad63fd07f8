from typing import List, Optional, Tuple

from beanie import UpdateResponse
from beanie.operators import Set
from fastapi import HTTPException
from pymongo.errors import PyMongoError

from diagnoease.models import LabTest
from diagnoease.schemas import DeleteAck, LabTestCreate, LabTestUpdate, UpdateAck
from diagnoease.utils.dates import now_iso, utc_day_bounds
from diagnoease.utils.ids import parse_object_id
from diagnoease.utils.logger import get_logger

logger = get_logger("lab_test_service")

MAX_PAGE_SIZE = 100
NULLABLE_FIELDS = {"description", "image"}


async def create_test(data: LabTestCreate) -> LabTest:
    test = LabTest(**data.model_dump())
    await test.insert()
    logger.info(f"Created test '{test.name}' ({test.id}) with {test.slots} slots")
    return test


async def list_tests() -> List[LabTest]:
    return await LabTest.find_all().to_list()


def available_tests_filter(filter_date: Optional[str]) -> dict:
    """Upcoming tests by default; a single UTC day when filter_date is given."""
    if not filter_date:
        return {"date": {"$gte": now_iso()}}
    try:
        start, end = utc_day_bounds(filter_date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid filterDate")
    return {"date": {"$gte": start, "$lte": end}}


async def list_available_tests(
    *, page: int = 1, size: int = 10, filter_date: Optional[str] = None
) -> Tuple[List[LabTest], int]:
    """One page of matching tests plus the total match count."""
    size = max(1, min(size, MAX_PAGE_SIZE))
    skip = (max(1, page) - 1) * size
    query = available_tests_filter(filter_date)
    logger.debug(f"available-tests query={query} skip={skip} limit={size}")
    try:
        items = await (
            LabTest.find(query)
            .sort([("date", 1), ("_id", 1)])
            .skip(skip)
            .limit(size)
            .to_list()
        )
        total = await LabTest.find(query).count()
    except PyMongoError as e:
        logger.error(f"available-tests query failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="An error occurred")
    return items, total


async def get_test(test_id: str) -> Optional[LabTest]:
    return await LabTest.get(parse_object_id(test_id))


async def update_test(test_id: str, data: LabTestUpdate) -> UpdateAck:
    oid = parse_object_id(test_id)
    fields = {
        k: v
        for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if not fields:
        return UpdateAck(matchedCount=await LabTest.find(LabTest.id == oid).count())
    result = await LabTest.find_one(LabTest.id == oid).update(
        Set(fields), response_type=UpdateResponse.UPDATE_RESULT
    )
    return UpdateAck.from_result(result)


async def delete_test(test_id: str) -> DeleteAck:
    """Existing appointments keep their snapshot of the deleted test."""
    result = await LabTest.find_one(LabTest.id == parse_object_id(test_id)).delete()
    return DeleteAck.from_result(result)
