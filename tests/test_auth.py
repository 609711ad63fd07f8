from datetime import datetime, timedelta, timezone

from jose import jwt

from diagnoease.config import get_settings
from diagnoease.security import create_access_token, decode_token
from tests.conftest import PATIENT_EMAIL

settings = get_settings()


async def test_issue_token_signs_only_email(client, patient):
    resp = await client.post("/jwt", json={"email": PATIENT_EMAIL, "role": "admin", "name": "x"})
    assert resp.status_code == 200
    claims = decode_token(resp.json()["token"])
    assert claims["email"] == PATIENT_EMAIL
    assert "role" not in claims
    assert "name" not in claims


async def test_issued_token_expires_in_a_year(client):
    resp = await client.post("/jwt", json={"email": PATIENT_EMAIL})
    claims = decode_token(resp.json()["token"])
    lifetime = claims["exp"] - claims["iat"]
    assert lifetime == settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 3600


async def test_issued_token_opens_protected_route(client, patient):
    token = (await client.post("/jwt", json={"email": PATIENT_EMAIL})).json()["token"]
    resp = await client.get(f"/user/{PATIENT_EMAIL}", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == PATIENT_EMAIL


async def test_issue_token_rejects_missing_email(client):
    resp = await client.post("/jwt", json={"name": "no email"})
    assert resp.status_code == 422


async def test_issue_token_rejects_non_email(client):
    resp = await client.post("/jwt", json={"email": "not-an-email"})
    assert resp.status_code == 422


async def test_missing_header_is_401(client):
    resp = await client.get("/test/000000000000000000000000")
    assert resp.status_code == 401


async def test_wrong_scheme_is_401(client):
    token = create_access_token(PATIENT_EMAIL)
    resp = await client.get("/test/000000000000000000000000", headers={"Authorization": f"Token {token}"})
    assert resp.status_code == 401


async def test_bad_signature_is_401(client):
    forged = jwt.encode(
        {"email": PATIENT_EMAIL, "type": "access", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        "someone-elses-secret",
        algorithm="HS256",
    )
    resp = await client.get("/test/000000000000000000000000", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401
    assert resp.headers.get("www-authenticate") == "Bearer"


async def test_expired_token_is_401(client):
    expired = create_access_token(PATIENT_EMAIL, expires_delta=timedelta(seconds=-10))
    resp = await client.get("/test/000000000000000000000000", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401


async def test_token_without_email_is_401(client):
    token = jwt.encode(
        {"type": "access", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    resp = await client.get("/test/000000000000000000000000", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_logout_clears_cookie(client):
    resp = await client.post("/logout")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    cookie = resp.headers.get("set-cookie", "")
    assert cookie.startswith("token=")
    assert "Max-Age=0" in cookie
