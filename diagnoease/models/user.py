from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone
from diagnoease.constants import Role, UserStatus


class User(Document):
    """Registered platform user.

    Identity is proven by the external sign-in provider on the client; the
    API only knows the email carried by the issued token. Profile fields
    mirror the registration form.
    """

    email: Indexed(str, unique=True)
    name: str | None = None
    avatar: str | None = None
    bloodGroup: str | None = None
    district: str | None = None
    upazila: str | None = None
    status: UserStatus = UserStatus.ACTIVE
    role: Role = Role.USER

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
