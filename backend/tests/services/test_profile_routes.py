"""Profile Routes: lazy creation, degraded reads, client-writable fields.

Invariants:
    - First GET creates the profile and an empty purchase ledger
    - Missing or rejected bearer token is 401 before any store access
    - Store failure on read returns a default profile plus a warning (200)
    - PUT changes onboarding_completed only
"""

from httpx import ASGITransport, AsyncClient

from stoic_journal.main import create_app
from stoic_journal.services.app_context import AppContext
from stoic_journal.services.profile_service import PROFILE_UNAVAILABLE_WARNING

from tests.services.fakes import ALICE_HEADERS, FailingStore


async def test_get_profile_requires_bearer_token(client):
    res = await client.get("/api/v1/user/profile")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_get_profile_rejects_malformed_header(client):
    res = await client.get(
        "/api/v1/user/profile", headers={"Authorization": "Token abc"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["message"] == "Invalid authorization header"


async def test_get_profile_rejects_unknown_token(client):
    res = await client.get(
        "/api/v1/user/profile", headers={"Authorization": "Bearer nope"},
    )
    assert res.status_code == 401


async def test_first_read_creates_default_profile(client, store):
    res = await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["id"] == "user-alice"
    assert body["user"]["email"] == "alice@example.com"
    assert body["profile"]["current_track"] is None
    assert body["profile"]["current_day"] == 0
    assert body["profile"]["tracks_completed"] == []
    assert "warning" not in body

    assert (await store.get("profile:user-alice"))["current_day"] == 0
    assert await store.get("purchases:user-alice") == []


async def test_second_read_returns_stored_profile(client):
    first = await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    second = await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    assert first.json()["profile"]["created_at"] == second.json()["profile"]["created_at"]


async def test_read_normalizes_legacy_completion_strings(client, store):
    await store.set("profile:user-alice", {
        "current_track": None, "current_day": 0, "streak": 30,
        "total_days_completed": 30, "tracks_completed": ["Money"],
    })
    res = await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    completed = res.json()["profile"]["tracks_completed"]
    assert completed == [{"track": "Money", "completed_at": None, "days_completed": 30}]


async def test_store_failure_degrades_to_default_profile(settings, identity, gateway):
    context = AppContext(
        settings=settings, store=FailingStore(), identity=identity, payments=gateway,
    )
    app = create_app(context=context)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        res = await c.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    assert res.status_code == 200
    body = res.json()
    assert body["warning"] == PROFILE_UNAVAILABLE_WARNING
    assert body["profile"]["current_track"] is None


async def test_update_sets_onboarding_completed(client):
    await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    res = await client.put(
        "/api/v1/user/profile", headers=ALICE_HEADERS,
        json={"onboarding_completed": True},
    )
    assert res.status_code == 200
    assert res.json()["profile"]["onboarding_completed"] is True
    assert "updated_at" in res.json()["profile"]


async def test_update_ignores_progress_fields(client):
    await client.get("/api/v1/user/profile", headers=ALICE_HEADERS)
    res = await client.put(
        "/api/v1/user/profile", headers=ALICE_HEADERS,
        json={"current_track": "Money", "current_day": 29, "streak": 500},
    )
    profile = res.json()["profile"]
    assert profile["current_track"] is None
    assert profile["current_day"] == 0
    assert profile["streak"] == 0


async def test_update_without_profile_is_404(client):
    res = await client.put(
        "/api/v1/user/profile", headers=ALICE_HEADERS,
        json={"onboarding_completed": True},
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
