from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from diagnoease.constants import Access, AppointmentStatus, BOOKING_SUCCESS_MESSAGE
from diagnoease.models import Appointment
from diagnoease.schemas import BookingCreate, DeleteAck, ReportSubmit, SuccessOut, UpdateAck
from diagnoease.security import Identity, appointment_owner, evaluate_access, require
from diagnoease.services import booking_service

router = APIRouter(tags=["appointments"])

admin_only = [Depends(require(Access.ADMIN_ONLY))]
self_or_admin = [Depends(require(Access.SELF_OR_ADMIN))]


@router.post("/booking", response_model=SuccessOut)
async def book(
    payload: BookingCreate,
    identity: Identity = Depends(require(Access.AUTHENTICATED)),
):
    """Book a test for the signed-in user (admins may book for anyone)."""
    await evaluate_access(Access.SELF_OR_ADMIN, identity, payload.user.email)
    await booking_service.book_test(payload)
    return SuccessOut(success=True, message=BOOKING_SUCCESS_MESSAGE)


@router.delete(
    "/booking/{appointment_id}",
    response_model=DeleteAck,
    dependencies=[Depends(require(Access.SELF_OR_ADMIN, owner=appointment_owner))],
)
async def cancel(appointment_id: str):
    return await booking_service.cancel_booking(appointment_id)


@router.get("/appointments/{test_id}", response_model=List[Appointment], dependencies=admin_only)
async def test_appointments(test_id: str, email: Optional[str] = Query(None)):
    """Appointments of one test, optionally narrowed to one user."""
    return await booking_service.appointments_for_test(test_id, email)


@router.get("/user-appointments/{email}", response_model=List[Appointment], dependencies=admin_only)
async def user_appointments(email: str):
    return await booking_service.appointments_for_user(email)


@router.get("/upcomming-appointments/{email}", response_model=List[Appointment], dependencies=self_or_admin)
async def upcoming_appointments(email: str):
    return await booking_service.appointments_for_user(email, AppointmentStatus.PENDING)


@router.get("/test-results/{email}", response_model=List[Appointment], dependencies=self_or_admin)
async def test_results(email: str):
    return await booking_service.appointments_for_user(email, AppointmentStatus.DELIVERED)


@router.patch("/report-submit/{email}/{appointment_id}", response_model=UpdateAck, dependencies=admin_only)
async def report_submit(email: str, appointment_id: str, payload: ReportSubmit):
    """Deliver a result. The id must belong to `email`, otherwise nothing changes."""
    return await booking_service.submit_report(email, appointment_id, payload)
