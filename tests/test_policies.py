import pytest
from pymongo.errors import DuplicateKeyError

from diagnoease.constants import Role
from diagnoease.models import User
from tests.conftest import ADMIN_EMAIL, OTHER_EMAIL, PATIENT_EMAIL, auth_headers

SOME_ID = "65a000000000000000000001"

ADMIN_ONLY_ROUTES = [
    ("GET", "/users", None),
    ("POST", "/test", {"name": "CBC", "price": 10, "date": "2030-01-01", "slots": 3}),
    ("GET", "/tests", None),
    ("PATCH", f"/test/{SOME_ID}", {"name": "x"}),
    ("DELETE", f"/test/{SOME_ID}", None),
    ("GET", f"/appointments/{SOME_ID}", None),
    ("GET", f"/user-appointments/{PATIENT_EMAIL}", None),
    ("PATCH", f"/report-submit/{PATIENT_EMAIL}/{SOME_ID}", {"result": "ok", "resultDeliveryDate": "2030-01-02"}),
    ("GET", "/admin-stat", None),
    ("POST", "/banner", {"name": "Summer"}),
    ("DELETE", f"/banner/{SOME_ID}", None),
    ("PUT", f"/banner/{SOME_ID}/activate", None),
]

AUTHENTICATED_ROUTES = ADMIN_ONLY_ROUTES + [
    ("GET", f"/user/{PATIENT_EMAIL}", None),
    ("PATCH", f"/user/{SOME_ID}", {"name": "x"}),
    ("GET", f"/test/{SOME_ID}", None),
    ("POST", "/booking", {"testData": {"_id": SOME_ID}, "user": {"email": PATIENT_EMAIL}}),
    ("DELETE", f"/booking/{SOME_ID}", None),
    ("GET", f"/upcomming-appointments/{PATIENT_EMAIL}", None),
    ("GET", f"/test-results/{PATIENT_EMAIL}", None),
    ("POST", "/create-payment-intent", {"price": 10}),
]

PUBLIC_ROUTES = [
    "/",
    "/healthz",
    "/districts",
    "/upazilas",
    "/recommendations",
    "/available-tests",
    "/featured-tests",
    "/banner",
    "/active-banner",
]


@pytest.mark.parametrize("method,path,body", AUTHENTICATED_ROUTES)
async def test_protected_routes_require_token(client, method, path, body):
    resp = await client.request(method, path, json=body)
    assert resp.status_code == 401


@pytest.mark.parametrize("method,path,body", ADMIN_ONLY_ROUTES)
async def test_admin_routes_forbid_non_admin(client, patient_headers, method, path, body):
    resp = await client.request(method, path, json=body, headers=patient_headers)
    assert resp.status_code == 403


@pytest.mark.parametrize("method,path,body", ADMIN_ONLY_ROUTES[:3])
async def test_admin_routes_forbid_unknown_user(client, method, path, body):
    resp = await client.request(method, path, json=body, headers=auth_headers("ghost@lab.test"))
    assert resp.status_code == 403


@pytest.mark.parametrize("path", PUBLIC_ROUTES)
async def test_public_routes_need_no_token(client, path):
    resp = await client.get(path)
    assert resp.status_code == 200


async def test_self_can_read_own_profile(client, patient_headers):
    resp = await client.get(f"/user/{PATIENT_EMAIL}", headers=patient_headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == PATIENT_EMAIL


async def test_user_cannot_read_someone_else(client, patient_headers, other):
    resp = await client.get(f"/user/{OTHER_EMAIL}", headers=patient_headers)
    assert resp.status_code == 403


async def test_admin_can_read_anyone(client, admin_headers, other):
    resp = await client.get(f"/user/{OTHER_EMAIL}", headers=admin_headers)
    assert resp.status_code == 200


async def test_unknown_profile_is_null(client, admin_headers):
    resp = await client.get("/user/nobody@lab.test", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() is None


async def test_register_then_update_own_profile(client):
    resp = await client.post("/user", json={"email": "new@lab.test", "name": "New", "role": "admin"})
    assert resp.status_code == 200
    user_id = resp.json()["insertedId"]
    stored = await User.find_one(User.email == "new@lab.test")
    assert stored.role == Role.USER

    resp = await client.patch(
        f"/user/{user_id}", json={"bloodGroup": "O+"}, headers=auth_headers("new@lab.test")
    )
    assert resp.status_code == 200
    assert resp.json()["modifiedCount"] == 1
    stored = await User.get(stored.id)
    assert stored.bloodGroup == "O+"
    assert stored.name == "New"


async def test_duplicate_registration_is_400(client, patient):
    resp = await client.post("/user", json={"email": PATIENT_EMAIL})
    assert resp.status_code == 400


async def test_registration_losing_unique_index_race_is_400(client, patient, monkeypatch):
    async def no_existing_user(*args, **kwargs):
        return None

    async def duplicate_insert(self, *args, **kwargs):
        raise DuplicateKeyError("E11000 duplicate key error collection: users index: email_1")

    # both requests passed the lookup; the second insert hits the unique index
    monkeypatch.setattr(User, "find_one", no_existing_user)
    monkeypatch.setattr(User, "insert", duplicate_insert)
    resp = await client.post("/user", json={"email": PATIENT_EMAIL})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"


async def test_user_cannot_promote_self(client, patient, patient_headers):
    resp = await client.patch(f"/user/{patient.id}", json={"role": "admin"}, headers=patient_headers)
    assert resp.status_code == 403
    stored = await User.get(patient.id)
    assert stored.role == Role.USER


async def test_user_cannot_edit_someone_else(client, patient_headers, other):
    resp = await client.patch(f"/user/{other.id}", json={"name": "hijack"}, headers=patient_headers)
    assert resp.status_code == 403


async def test_admin_can_promote_and_block(client, admin_headers, other):
    resp = await client.patch(
        f"/user/{other.id}", json={"role": "admin", "status": "blocked"}, headers=admin_headers
    )
    assert resp.status_code == 200
    stored = await User.get(other.id)
    assert stored.role == Role.ADMIN
    assert stored.status.value == "blocked"


async def test_admin_lists_users(client, admin_headers, patient):
    resp = await client.get("/users", headers=admin_headers)
    assert resp.status_code == 200
    emails = {u["email"] for u in resp.json()}
    assert emails == {ADMIN_EMAIL, PATIENT_EMAIL}


async def test_malformed_user_id_is_400(client, admin_headers):
    resp = await client.patch("/user/not-an-id", json={"name": "x"}, headers=admin_headers)
    assert resp.status_code == 400
