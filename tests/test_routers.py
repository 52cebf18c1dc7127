# tests/test_routers.py
"""
HTTP surface: health, the on-demand run trigger and the webhook guard.
The matching service is replaced with one wired to in-memory fakes.
"""
import random

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from main import app
from matchup.config.settings import settings
from matchup.domain.grouping import GroupingOptions
from matchup.services.matching_service import MatchingService
from matchup.services.runner import get_matching_service

from fakes import FakeDirectory, FakePreferences, RecordingChannel, make_members, make_team

pytestmark = pytest.mark.asyncio

HEADERS = {"X-Process-Key": settings.PROCESS_NOW_KEY}


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def use_service(directory, preferences=None):
    service = MatchingService(
        directory=directory,
        preferences=preferences or FakePreferences(),
        channel=RecordingChannel(),
        options=GroupingOptions(3),
        max_groups_per_team=10,
        rng=random.Random(3),
    )
    app.dependency_overrides[get_matching_service] = lambda: service
    return service


async def test_index(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_run_requires_key(client):
    use_service(FakeDirectory([]))
    resp = await client.post("/api/v1/matching/run")
    assert resp.status_code == 403

    resp = await client.post("/api/v1/matching/run", headers={"X-Process-Key": "wrong"})
    assert resp.status_code == 403


async def test_run_returns_summary(client):
    team = make_team("t1", make_members(7))
    use_service(FakeDirectory([team]))

    resp = await client.post("/api/v1/matching/run", headers=HEADERS)

    assert resp.status_code == 200
    body = resp.json()
    assert body["teams_count"] == 1
    assert body["groups_formed"] == 2
    assert body["members_notified"] == 7
    assert body["error"] is None


async def test_run_fatal_failure_is_503(client):
    use_service(FakeDirectory([]), preferences=FakePreferences(fail=True))

    resp = await client.post("/api/v1/matching/run", headers=HEADERS)

    assert resp.status_code == 503
    body = resp.json()
    assert body["groups_formed"] == 0
    assert "preference store unavailable" in body["error"]


async def test_webhook_rejects_wrong_token(client):
    resp = await client.post("/api/v1/matching/webhook/not-the-token", json={})
    assert resp.status_code == 403
