# Re-export Beanie documents
from .user import User
from .lab_test import LabTest
from .appointment import Appointment, TestSnapshot, BookingUser
from .banner import Banner
from .lookup import District, Upazila, Recommendation

DOCUMENT_MODELS = [
    User,
    LabTest,
    Appointment,
    Banner,
    District,
    Upazila,
    Recommendation,
]
