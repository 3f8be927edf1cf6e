import pytest
from headphoneweb.auth.utils import decode_session_token
from tests.conftest import ADMIN_PASSWORD, ADMIN_USERNAME


@pytest.mark.asyncio
async def test_login_requires_both_fields(client, admin_account):
    resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Username and password are required"


@pytest.mark.asyncio
async def test_login_failures_look_identical(client, admin_account):
    unknown = await client.post("/api/admin/login", json={"username": "ghost", "password": "whatever"})
    wrong = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": "wrong"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["error"] == wrong.json()["error"] == "Invalid credentials"
    assert "set-cookie" not in unknown.headers
    assert "set-cookie" not in wrong.headers


@pytest.mark.asyncio
async def test_login_issues_admin_scoped_cookie(app, client, admin_account):
    resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    token = client.cookies.get("admin_session")
    claims = decode_session_token(app.state.settings, token, "admin")
    assert claims is not None
    assert claims["sub"] == str(admin_account)

    resp = await client.get("/api/admin/messages")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_login_works_without_site_session(anon_client, admin_account):
    resp = await anon_client.post("/api/admin/login",
                                  json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_logout_clears_admin_cookie(admin_client):
    resp = await admin_client.post("/api/admin/logout")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert 'admin_session=""' in resp.headers["set-cookie"] or "admin_session=;" in resp.headers["set-cookie"]

    resp = await admin_client.get("/api/admin/messages")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_admin_session_still_succeeds(client):
    resp = await client.post("/api/admin/logout")
    assert resp.status_code == 200
