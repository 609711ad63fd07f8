from typing import Any, Dict, List

from diagnoease.constants import ADMIN_STAT_TESTS_LIMIT, FEATURED_TESTS_LIMIT
from diagnoease.models import Appointment
from diagnoease.schemas import AdminStatOut, FeaturedTest
from diagnoease.utils.logger import get_logger

logger = get_logger("report_service")

BOOKED_TESTS_HEADER = ["Test Name", "Total Booked"]
DELIVERY_STATUS_HEADER = ["Delivery Status", "count"]


def most_booked_pipeline(limit: int, with_details: bool = True) -> List[Dict[str, Any]]:
    """Group appointments per booked test, most booked first.

    Snapshot fields come from the first appointment seen in each group.
    """
    group: Dict[str, Any] = {
        "_id": "$testData._id",
        "name": {"$first": "$testData.name"},
        "count": {"$sum": 1},
    }
    if with_details:
        for field in ("image", "description", "price", "date", "slots"):
            group[field] = {"$first": f"$testData.{field}"}
    return [
        {"$group": group},
        {"$sort": {"count": -1, "_id": 1}},
        {"$limit": limit},
    ]


def delivery_status_pipeline() -> List[Dict[str, Any]]:
    return [
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
        {"$project": {"_id": 0, "status": "$_id", "count": 1}},
    ]


def to_chart(header: List[str], rows: List[Dict[str, Any]], label: str) -> List[List[Any]]:
    """[header, [label, count], ...] as consumed by the dashboard charts."""
    return [header] + [[row.get(label), row.get("count", 0)] for row in rows]


async def featured_tests() -> List[FeaturedTest]:
    rows = await Appointment.aggregate(most_booked_pipeline(FEATURED_TESTS_LIMIT)).to_list()
    return [FeaturedTest.model_validate(row) for row in rows]


async def admin_stats() -> AdminStatOut:
    booked = await Appointment.aggregate(
        most_booked_pipeline(ADMIN_STAT_TESTS_LIMIT, with_details=False)
    ).to_list()
    statuses = await Appointment.aggregate(delivery_status_pipeline()).to_list()
    logger.debug(f"admin-stat: {len(booked)} booked tests, {len(statuses)} statuses")
    return AdminStatOut(
        mostlyBookedChartData=to_chart(BOOKED_TESTS_HEADER, booked, "name"),
        deliveryStatusChartData=to_chart(DELIVERY_STATUS_HEADER, statuses, "status"),
    )
