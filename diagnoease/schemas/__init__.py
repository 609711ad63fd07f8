from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from diagnoease.constants import Role, UserStatus
from diagnoease.models import BookingUser, LabTest
from diagnoease.utils.dates import parse_iso, to_iso

# -------------------- Store acknowledgments --------------------


class InsertAck(BaseModel):
    acknowledged: bool = True
    insertedId: Optional[str] = None


class UpdateAck(BaseModel):
    acknowledged: bool = True
    matchedCount: int = 0
    modifiedCount: int = 0

    @classmethod
    def from_result(cls, result) -> "UpdateAck":
        """Build from a pymongo UpdateResult (None when nothing was sent)."""
        if result is None:
            return cls()
        return cls(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
        )


class DeleteAck(BaseModel):
    acknowledged: bool = True
    deletedCount: int = 0

    @classmethod
    def from_result(cls, result) -> "DeleteAck":
        if result is None:
            return cls()
        return cls(acknowledged=result.acknowledged, deletedCount=result.deleted_count)


class SuccessOut(BaseModel):
    success: bool = True
    message: Optional[str] = None


# -------------------- Auth Schemas --------------------


class TokenRequest(BaseModel):
    """Body of POST /jwt. Only the email is signed; other keys are dropped."""
    email: str = Field(min_length=3, max_length=254)

    @field_validator("email")
    @classmethod
    def looks_like_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("email must be a valid address")
        return v


class TokenOut(BaseModel):
    token: str


# -------------------- User Schemas --------------------


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    name: Optional[str] = None
    avatar: Optional[str] = None
    bloodGroup: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None


class UserUpdate(BaseModel):
    """Partial profile update. `role` and `status` are admin-only fields."""
    name: Optional[str] = None
    avatar: Optional[str] = None
    bloodGroup: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None
    status: Optional[UserStatus] = None
    role: Optional[Role] = None


# -------------------- Test Schemas --------------------


def _normalize_date(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        return to_iso(parse_iso(v))
    except ValueError:
        raise ValueError("date must be an ISO-8601 date or datetime")


class LabTestCreate(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    date: str
    slots: int = Field(ge=0)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_date(v)


class LabTestUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    date: Optional[str] = None
    slots: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_date(v)


class AvailableTestsPage(BaseModel):
    data: List[LabTest]
    totalTests: int


# -------------------- Booking Schemas --------------------


class TestRef(BaseModel):
    """Client copy of the booked test; only `_id` is trusted."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", min_length=1)


class BookingCreate(BaseModel):
    testData: TestRef
    user: BookingUser
    transactionId: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)


class ReportSubmit(BaseModel):
    # Delivery date is stored exactly as the client sent it
    result: str = Field(min_length=1)
    resultDeliveryDate: str = Field(min_length=1)


# -------------------- Banner Schemas --------------------


class BannerCreate(BaseModel):
    name: str = Field(min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    couponCode: Optional[str] = None
    couponRate: Optional[float] = Field(None, ge=0, le=100)


# -------------------- Report Schemas --------------------


class FeaturedTest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    date: Optional[str] = None
    slots: Optional[int] = None
    count: int


class AdminStatOut(BaseModel):
    """Chart series: a header row followed by [label, count] rows."""
    mostlyBookedChartData: List[List[Any]]
    deliveryStatusChartData: List[List[Any]]


# -------------------- Payment Schemas --------------------


class PaymentIntentIn(BaseModel):
    """Amount in major currency units (e.g. dollars)."""
    price: float


class PaymentIntentOut(BaseModel):
    clientSecret: str
