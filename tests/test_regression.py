"""
Regression tests for issues found during code review.

1. Unique constraint violations must return 409 (not 500)
   and unexpected exceptions must still render the JSON error shape
2. Deleting a comment that has replies must not fail on the parent FK
3. X-Query-Count header must report actual query count (not always 0)
4. CORS must not set allow_credentials=true with allow_origins=*
"""
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

from newsdesk.errors import integrity_error_handler, register_exception_handlers


# ---------------------------------------------------------------------------
# 1. Unique constraint violations -> 409
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_duplicate_email_differing_in_case_returns_409(async_client: AsyncClient):
    """Emails are normalised before the uniqueness check."""
    resp1 = await async_client.post("/api/v1/auth/signup", json={
        "name": "First", "email": "same@example.com", "password": "hunter22",
    })
    assert resp1.status_code == 201

    resp2 = await async_client.post("/api/v1/auth/signup", json={
        "name": "Second", "email": "SAME@example.com", "password": "hunter22",
    })
    assert resp2.status_code == 409


@pytest.mark.asyncio
async def test_integrity_error_renders_conflict():
    """An IntegrityError escaping a service is rendered as 409."""
    request = Request({"type": "http", "method": "POST", "path": "/x", "headers": []})
    exc = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))
    resp = await integrity_error_handler(request, exc)
    assert resp.status_code == 409
    assert b"Resource already exists" in resp.body


@pytest.mark.asyncio
async def test_unexpected_exception_renders_json_500():
    """A bug outside the error taxonomy still yields the {message, error} body."""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error", "error": "kaboom"}


# ---------------------------------------------------------------------------
# 2. Deleting a replied-to comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_parent_comment_with_replies(async_client: AsyncClient, headers):
    article = await async_client.post(
        "/api/v1/articles", json={"title": "Thread", "category": "Science"}, headers=headers["alice"]
    )
    article_id = article.json()["id"]
    parent = await async_client.post(
        "/api/v1/comments", json={"content": "Root", "article_id": article_id}, headers=headers["alice"]
    )
    parent_id = parent.json()["id"]
    for text in ("First reply", "Second reply"):
        await async_client.post(
            "/api/v1/comments",
            json={"content": text, "article_id": article_id, "parent_comment_id": parent_id},
            headers=headers["bob"],
        )

    resp = await async_client.delete(f"/api/v1/comments/{parent_id}", headers=headers["alice"])
    assert resp.status_code == 200

    top_level = (await async_client.get(f"/api/v1/comments/article/{article_id}")).json()
    assert {c["content"] for c in top_level} == {"First reply", "Second reply"}
    assert (await async_client.get(f"/api/v1/comments/{parent_id}/replies")).json() == []


# ---------------------------------------------------------------------------
# 3. X-Query-Count reports actual query count
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_query_count_header_exact_for_article_list(async_client: AsyncClient, headers):
    """
    X-Query-Count must reflect ALL SQL statements including selectinload
    internals.  Article list issues: COUNT + SELECT(joinedload author) +
    selectinload(tags) = 3 queries.
    """
    await async_client.post(
        "/api/v1/articles",
        json={"title": "QC Article", "category": "Science", "published": True},
        headers=headers["alice"],
    )

    resp = await async_client.get("/api/v1/articles")
    assert resp.status_code == 200
    count = int(resp.headers["x-query-count"])
    assert count == 3, f"Expected exactly 3 queries for article list, got {count}"


@pytest.mark.asyncio
async def test_query_count_header_exact_for_comment_list(async_client: AsyncClient, headers):
    """
    Comment listing issues: SELECT(joinedload author) + selectinload(likes)
    = 2 queries.
    """
    article = await async_client.post(
        "/api/v1/articles", json={"title": "QC Comments", "category": "Science"}, headers=headers["alice"]
    )
    article_id = article.json()["id"]
    await async_client.post(
        "/api/v1/comments", json={"content": "Counted", "article_id": article_id}, headers=headers["bob"]
    )

    resp = await async_client.get(f"/api/v1/comments/article/{article_id}")
    assert resp.status_code == 200
    count = int(resp.headers["x-query-count"])
    assert count == 2, f"Expected exactly 2 queries for comment list, got {count}"


# ---------------------------------------------------------------------------
# 4. CORS headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_no_credentials_with_wildcard_origin(async_client: AsyncClient):
    """
    When allow_origins=["*"], the response must NOT include
    Access-Control-Allow-Credentials: true, per the CORS specification.
    """
    resp = await async_client.options(
        "/api/v1/articles",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    cred_header = resp.headers.get("access-control-allow-credentials", "").lower()
    assert cred_header != "true", (
        "CORS must not combine allow_origins=* with allow_credentials=true"
    )
