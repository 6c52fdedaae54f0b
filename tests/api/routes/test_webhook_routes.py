"""Tests for the GitHub webhook endpoint."""

import json

import pytest
from sqlalchemy import select

from vibeship.core.config import get_settings
from vibeship.core.security.webhook_signature import sign_payload
from vibeship.models.database import ActivityLogEntry

URL = "/api/webhooks/github"
WEBHOOK_SECRET = "test-webhook-secret"
TEST_REPO_ID = 424242


def delivery(payload, event="push", secret=WEBHOOK_SECRET, signature=None):
    """Body and headers for a signed delivery."""
    body = json.dumps(payload).encode()
    headers = {
        "Content-Type": "application/json",
        "X-Hub-Signature-256": signature or sign_payload(body, secret),
    }
    if event:
        headers["X-GitHub-Event"] = event
    return {"content": body, "headers": headers}


def star_payload(stars=5):
    return {
        "action": "created",
        "repository": {
            "id": TEST_REPO_ID,
            "name": "vibe-tracker",
            "full_name": "shipper/vibe-tracker",
            "stargazers_count": stars,
            "forks_count": 1,
            "open_issues_count": 2,
        },
        "sender": {"login": "fan"},
    }


async def all_activity(db_session):
    return (await db_session.execute(select(ActivityLogEntry))).scalars().all()


@pytest.mark.api
class TestWebhookEndpoint:
    """Test cases for POST /api/webhooks/github."""

    @pytest.mark.asyncio
    async def test_ping(self, client):
        response = await client.get(URL)
        assert response.status_code == 200
        assert response.json() == {"message": "GitHub webhook endpoint active"}

    @pytest.mark.asyncio
    async def test_star_delivery(self, client, db_session, sample_project):
        response = await client.post(URL, **delivery(star_payload(stars=5), event="star"))

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Webhook processed"
        assert data["event"] == "star"
        assert data["results"] == [{"project_id": sample_project.id, "success": True}]

        await db_session.refresh(sample_project)
        assert sample_project.github_stars == 5
        entries = await all_activity(db_session)
        assert [e.action for e in entries] == ["github_starred"]

    @pytest.mark.asyncio
    async def test_replayed_star_gives_same_stats(self, client, db_session, sample_project):
        for _ in range(2):
            response = await client.post(URL, **delivery(star_payload(stars=8), event="star"))
            assert response.status_code == 200

        await db_session.refresh(sample_project)
        assert (
            sample_project.github_stars,
            sample_project.github_forks,
            sample_project.github_open_issues,
        ) == (8, 1, 2)

    @pytest.mark.asyncio
    async def test_invalid_signature(self, client, db_session, sample_project):
        response = await client.post(
            URL, **delivery(star_payload(), event="star", secret="wrong-secret")
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid signature"}
        await db_session.refresh(sample_project)
        assert sample_project.github_stars == 0
        assert await all_activity(db_session) == []

    @pytest.mark.asyncio
    async def test_missing_signature(self, client):
        response = await client.post(
            URL,
            content=json.dumps(star_payload()).encode(),
            headers={"X-GitHub-Event": "star"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_signature_checked_before_parsing(self, client):
        response = await client.post(
            URL,
            content=b"not json",
            headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": "sha256=00"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        body = b"not json"
        response = await client.post(
            URL,
            content=body,
            headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": sign_payload(body, WEBHOOK_SECRET)},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON payload"}

    @pytest.mark.asyncio
    async def test_missing_event_type(self, client):
        response = await client.post(URL, **delivery(star_payload(), event=None))
        assert response.status_code == 400
        assert response.json() == {"error": "Missing event type"}

    @pytest.mark.asyncio
    async def test_missing_repository_id(self, client):
        response = await client.post(URL, **delivery({"zen": "Keep it simple"}, event="ping"))
        assert response.status_code == 400
        assert response.json() == {"error": "Missing repository ID"}

    @pytest.mark.asyncio
    async def test_unlinked_repository(self, client, db_session, sample_project):
        payload = star_payload()
        payload["repository"]["id"] = 1

        response = await client.post(URL, **delivery(payload, event="star"))

        assert response.status_code == 200
        assert response.json()["message"] == "No linked projects"
        assert await all_activity(db_session) == []

    @pytest.mark.asyncio
    async def test_missing_secret_is_server_error(self, client, test_app, test_settings):
        unconfigured = test_settings.model_copy(update={"github_webhook_secret": None})
        test_app.dependency_overrides[get_settings] = lambda: unconfigured

        response = await client.post(URL, **delivery(star_payload(), event="star"))

        assert response.status_code == 500
        assert response.json() == {"error": "Webhook not configured"}
