from enum import Enum


class Role(str, Enum):
    """Stored user roles."""
    ADMIN = "admin"
    USER = "user"


class AppointmentStatus(str, Enum):
    """Booking lifecycle: pending -> delivered."""
    PENDING = "pending"
    DELIVERED = "delivered"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class Access(str, Enum):
    """Authorization policies attached to routes."""
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    SELF_OR_ADMIN = "self-or-admin"
    ADMIN_ONLY = "admin-only"


BOOKING_SUCCESS_MESSAGE = "Appointment Booked Successfully"
FEATURED_TESTS_LIMIT = 5
ADMIN_STAT_TESTS_LIMIT = 10
