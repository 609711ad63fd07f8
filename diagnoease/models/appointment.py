from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from diagnoease.constants import AppointmentStatus


class TestSnapshot(BaseModel):
    """Copy of the test as it was when booked; `_id` holds the test id as a string."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str | None = None
    price: float | None = None
    date: str | None = None
    slots: int | None = None
    description: str | None = None
    image: str | None = None


class BookingUser(BaseModel):
    email: str
    name: str | None = None


class Appointment(Document):
    """A booking of one test by one user."""
    testData: TestSnapshot
    user: BookingUser
    status: Indexed(str) = AppointmentStatus.PENDING.value  # pending|delivered
    transactionId: str | None = None
    price: float | None = None
    result: str | None = None
    resultDeliveryDate: str | None = None
    bookedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "appointments"
