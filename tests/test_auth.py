from conftest import auth_headers, make_user
from eventdesk.config import settings
from eventdesk.database import ensure_default_admin
from eventdesk.models import ActivityLog, User
from eventdesk.utils.auth import Hash


async def test_signup_login_and_me(client):
    signup = await client.post(
        "/api/auth/signup",
        json={"firstName": "Grace", "lastName": "Hopper", "email": "Grace@Example.com", "password": "cobol-1959"},
    )
    assert signup.status_code == 201
    assert settings.SESSION_COOKIE in signup.headers["set-cookie"]

    user = await User.find_one(User.email == "grace@example.com")
    assert user is not None
    assert Hash.check("cobol-1959", user.password) == (True, None)

    login = await client.post("/api/auth/login", json={"email": "grace@example.com", "password": "cobol-1959"})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "user"

    me = await client.get("/api/auth/me", headers=auth_headers(user))
    assert me.json()["user"]["email"] == "grace@example.com"


async def test_duplicate_signup(client):
    payload = {"firstName": "Ada", "email": "ada@example.com", "password": "analytical"}

    assert (await client.post("/api/auth/signup", json=payload)).status_code == 201
    assert (await client.post("/api/auth/signup", json=payload)).status_code == 400


async def test_bad_login_is_logged(client):
    response = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"})

    assert response.status_code == 401
    log = await ActivityLog.find_one(ActivityLog.action == "login_failed")
    assert log.level == "WARNING"


async def test_invalid_session_cookie(client):
    response = await client.get("/api/auth/me", headers={"Cookie": f"{settings.SESSION_COOKIE}=forged"})

    assert response.status_code == 401


async def test_default_admin_bootstrap():
    admin = await ensure_default_admin()

    assert admin.role == "super-admin"
    assert admin.email == settings.ADMIN_EMAIL.lower()
    assert await ensure_default_admin() is None
    assert await User.count() == 1


async def test_login_with_unrecognised_stored_hash(client):
    await make_user("legacy@example.com")

    response = await client.post("/api/auth/login", json={"email": "legacy@example.com", "password": "whatever"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"
