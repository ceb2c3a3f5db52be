"""
Auth and user endpoint tests: sign-up, login via bearer token and cookie,
token failures and the public profile.
"""
import asyncio
import time

import pytest
from httpx import AsyncClient

from newsdesk.config import settings
from newsdesk.security import create_access_token


# ---------------------------------------------------------------------------
# Sign-up
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_signup(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "name": "New Writer",
        "email": "Writer@Example.com",
        "password": "hunter22",
    })
    assert resp.status_code == 201
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["email"] == "writer@example.com"
    assert data["user"]["role"] == "author"
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_signup_duplicate_email_returns_409(async_client: AsyncClient):
    payload = {"name": "One", "email": "dup@example.com", "password": "hunter22"}
    assert (await async_client.post("/api/v1/auth/signup", json=payload)).status_code == 201
    payload["name"] = "Two"
    resp = await async_client.post("/api/v1/auth/signup", json=payload)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_signup_short_password(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "name": "Weak", "email": "weak@example.com", "password": "123",
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_signup_does_not_stall_event_loop(async_client: AsyncClient, monkeypatch):
    """Hashing at production cost runs in the threadpool; other tasks keep ticking."""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 12)
    gaps: list[float] = []
    done = asyncio.Event()

    async def ticker():
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(0.005)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    resp = await async_client.post("/api/v1/auth/signup", json={
        "name": "Patient", "email": "patient@example.com", "password": "hunter22",
    })
    done.set()
    await task

    assert resp.status_code == 201
    assert gaps
    assert max(gaps) < 0.1, f"event loop stalled for {max(gaps) * 1000:.1f} ms"


# ---------------------------------------------------------------------------
# Login / identity resolution
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_and_me_with_bearer(async_client: AsyncClient, users):
    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "alice@example.com", "password": "secret123",
    })
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    async_client.cookies.clear()

    me = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == users["alice"].id


@pytest.mark.asyncio
async def test_login_sets_cookie_used_for_auth(async_client: AsyncClient, users):
    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "bob@example.com", "password": "secret123",
    })
    assert resp.status_code == 200
    assert "token" in resp.cookies

    me = await async_client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "bob@example.com"

    await async_client.post("/api/v1/auth/logout")
    async_client.cookies.clear()
    assert (await async_client.get("/api/v1/auth/me")).status_code == 401


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, users):
    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "alice@example.com", "password": "nope-nope",
    })
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_me_without_token(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_expired_token(async_client: AsyncClient, users):
    token = create_access_token(users["alice"].id, "author", expires_minutes=-1)
    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token expired"


@pytest.mark.asyncio
async def test_token_for_unknown_user(async_client: AsyncClient):
    token = create_access_token(424242, "admin")
    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Public profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_profile_lists_published_articles_only(async_client: AsyncClient, users, headers):
    await async_client.post(
        "/api/v1/articles",
        json={"title": "Out There", "category": "World", "published": True},
        headers=headers["alice"],
    )
    await async_client.post(
        "/api/v1/articles",
        json={"title": "Still Drafting", "category": "World"},
        headers=headers["alice"],
    )

    resp = await async_client.get(f"/api/v1/users/{users['alice'].id}")
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["name"] == "Alice"
    assert [a["title"] for a in profile["articles"]] == ["Out There"]


@pytest.mark.asyncio
async def test_profile_not_found(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/users/99999")
    assert resp.status_code == 404
