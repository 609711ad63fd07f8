from typing import List, Optional

from beanie import PydanticObjectId as OID
from beanie import UpdateResponse
from beanie.operators import Inc, Set
from fastapi import HTTPException

from diagnoease.constants import AppointmentStatus
from diagnoease.database import store_transaction
from diagnoease.models import Appointment, LabTest, TestSnapshot
from diagnoease.schemas import BookingCreate, DeleteAck, ReportSubmit, UpdateAck
from diagnoease.utils.ids import parse_object_id, try_object_id
from diagnoease.utils.logger import get_logger

logger = get_logger("booking_service")


def _snapshot(test: LabTest) -> TestSnapshot:
    return TestSnapshot(
        id=str(test.id),
        name=test.name,
        price=test.price,
        date=test.date,
        slots=test.slots,
        description=test.description,
        image=test.image,
    )


async def _release_slot(test_id: OID, session=None) -> None:
    await LabTest.find_one(LabTest.id == test_id, session=session).update(
        Inc({LabTest.slots: 1}), session=session
    )


async def book_test(data: BookingCreate) -> Appointment:
    """Take one slot of the test and record a pending appointment.

    The decrement only matches while slots > 0, so concurrent bookings can
    never drive the count negative. Both writes share a transaction when
    enabled; otherwise a failed insert gives the slot back.
    """
    test_oid = parse_object_id(data.testData.id, "test id")
    test = await LabTest.get(test_oid)
    if not test:
        raise HTTPException(status_code=404, detail="Test not found")

    async with store_transaction() as session:
        taken = await LabTest.find_one(
            LabTest.id == test_oid, LabTest.slots > 0, session=session
        ).update(
            Inc({LabTest.slots: -1}),
            session=session,
            response_type=UpdateResponse.UPDATE_RESULT,
        )
        if not taken or taken.modified_count != 1:
            logger.info(f"Booking refused for {data.user.email}: test {test_oid} is full")
            raise HTTPException(status_code=409, detail="No slots available for this test")

        appointment = Appointment(
            testData=_snapshot(test),
            user=data.user,
            status=AppointmentStatus.PENDING.value,
            transactionId=data.transactionId,
            price=data.price if data.price is not None else test.price,
        )
        try:
            await appointment.insert(session=session)
        except Exception:
            if session is None:
                logger.error(f"Appointment insert failed, releasing slot of test {test_oid}")
                await _release_slot(test_oid)
            raise

    logger.info(f"{data.user.email} booked test {test_oid} (appointment {appointment.id})")
    return appointment


async def cancel_booking(appointment_id: str) -> DeleteAck:
    """Delete the appointment; a pending one gives its slot back."""
    oid = parse_object_id(appointment_id)
    async with store_transaction() as session:
        appointment = await Appointment.get(oid, session=session)
        result = await Appointment.find_one(Appointment.id == oid, session=session).delete(
            session=session
        )
        ack = DeleteAck.from_result(result)
        if appointment and ack.deletedCount and appointment.status == AppointmentStatus.PENDING.value:
            test_oid = try_object_id(appointment.testData.id)
            if test_oid is not None:
                await _release_slot(test_oid, session=session)
    return ack


async def submit_report(email: str, appointment_id: str, data: ReportSubmit) -> UpdateAck:
    """Mark the appointment delivered. Matches only when id and owner email agree."""
    oid = parse_object_id(appointment_id)
    result = await Appointment.find_one(
        Appointment.id == oid, {"user.email": email}
    ).update(
        Set(
            {
                "result": data.result,
                "resultDeliveryDate": data.resultDeliveryDate,
                "status": AppointmentStatus.DELIVERED.value,
            }
        ),
        response_type=UpdateResponse.UPDATE_RESULT,
    )
    ack = UpdateAck.from_result(result)
    if not ack.matchedCount:
        logger.warning(f"Report for appointment {appointment_id} did not match owner {email}")
    return ack


async def appointments_for_test(test_id: str, email: Optional[str] = None) -> List[Appointment]:
    query = {"testData._id": test_id}
    if email:
        query["user.email"] = email
    return await Appointment.find(query).to_list()


async def appointments_for_user(email: str, status: Optional[AppointmentStatus] = None) -> List[Appointment]:
    query = {"user.email": email}
    if status is not None:
        query["status"] = status.value
    return await Appointment.find(query).to_list()
