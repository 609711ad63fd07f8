import os
import tempfile

# Settings are read once and cached; configure before importing the app
os.environ["APP_DEBUG"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MONGODB_TRANSACTIONS"] = "false"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "diagnoease-test-logs")
os.environ.pop("STRIPE_SECRET_KEY", None)

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from diagnoease.constants import Role
from diagnoease.database import init_db
from diagnoease.main import app
from diagnoease.models import LabTest, User
from diagnoease.security import create_access_token
from diagnoease.utils.dates import to_iso

ADMIN_EMAIL = "admin@lab.test"
PATIENT_EMAIL = "patient@lab.test"
OTHER_EMAIL = "other@lab.test"


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email)}"}


def doc_id(doc: dict) -> str:
    return doc.get("_id") or doc.get("id")


def days_from_now(days: float) -> str:
    return to_iso(datetime.now(timezone.utc) + timedelta(days=days))


@pytest.fixture(autouse=True)
async def db():
    """Fresh in-memory database per test."""
    await init_db(client=AsyncMongoMockClient())
    yield


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def admin() -> User:
    user = User(email=ADMIN_EMAIL, name="Admin", role=Role.ADMIN)
    await user.insert()
    return user


@pytest.fixture
async def patient() -> User:
    user = User(email=PATIENT_EMAIL, name="Patient")
    await user.insert()
    return user


@pytest.fixture
async def other() -> User:
    user = User(email=OTHER_EMAIL, name="Other")
    await user.insert()
    return user


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
def patient_headers(patient) -> dict:
    return auth_headers(PATIENT_EMAIL)


@pytest.fixture
def make_test():
    async def _make(name: str = "CBC", slots: int = 5, date: str | None = None, price: float = 20.0) -> LabTest:
        test = LabTest(name=name, price=price, date=date or days_from_now(3), slots=slots)
        await test.insert()
        return test

    return _make
