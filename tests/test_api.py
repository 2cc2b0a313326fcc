"""Tests for the webhook, admin and health endpoints."""

import hashlib
import hmac
import json

import httpx
import pytest
from procrastinate.exceptions import AlreadyEnqueued

from licore.api import admin as admin_api
from licore.api import webhooks as webhooks_api
from licore.config import settings
from licore.database import get_session
from licore.main import app
from licore.services.statistics import save_statistics


@pytest.fixture
def queued(monkeypatch) -> list[int]:
    """Pull request ids handed to the task queue."""
    deferred: list[int] = []

    async def fake_enqueue(pull_request):
        deferred.append(pull_request.id)

    monkeypatch.setattr(webhooks_api, "enqueue_review", fake_enqueue)
    monkeypatch.setattr(admin_api, "enqueue_review", fake_enqueue)
    return deferred


@pytest.fixture
async def client(db_session, queued, monkeypatch):
    monkeypatch.setattr(settings, "bitbucket_webhook_secret", None)

    async def override_session():
        yield db_session

    app.dependency_overrides[get_session] = override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def webhook(client, event_key: str, payload: dict | None = None, signature: str | None = None):
    headers = {"X-Event-Key": event_key, "Content-Type": "application/json"}
    if signature:
        headers["X-Hub-Signature"] = signature
    return client.post("/webhooks/bitbucket", content=json.dumps(payload or {}), headers=headers)


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ping(client):
    response = await webhook(client, "diagnostics:ping")

    assert response.json() == {"status": "pong"}


async def test_unhandled_event_is_ignored(client, queued):
    response = await webhook(client, "pr:comment:added")

    assert response.json() == {"status": "ignored", "event": "pr:comment:added"}
    assert queued == []


async def test_opened_pull_request_is_queued(client, project, pr_payload, queued):
    response = await webhook(client, "pr:opened", pr_payload)

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "queued"
    assert len(queued) == 1

    job = (await client.get(f"/admin/jobs/{body['job_id']}")).json()
    assert job["status"] == "pending"
    assert job["commit"] == "f" * 40
    assert job["pull_request_id"] == queued[0]


async def test_already_enqueued_is_not_an_error(client, project, pr_payload, monkeypatch):
    async def busy(pull_request):
        raise AlreadyEnqueued("pr:1")

    monkeypatch.setattr(webhooks_api, "enqueue_review", busy)

    response = await webhook(client, "pr:from_ref_updated", pr_payload)

    assert response.status_code == 200
    assert response.json()["status"] == "queued"


async def test_unknown_project_is_ignored(client, pr_payload, queued):
    response = await webhook(client, "pr:opened", pr_payload)

    assert response.json()["status"] == "ignored"
    assert queued == []


async def test_signature_is_enforced(client, project, pr_payload, monkeypatch):
    monkeypatch.setattr(settings, "bitbucket_webhook_secret", "s3cret")
    body = json.dumps(pr_payload).encode()
    good = "sha256=" + hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

    assert (await webhook(client, "pr:opened", pr_payload, "sha256=bad")).status_code == 401
    assert (await webhook(client, "pr:opened", pr_payload)).status_code == 401
    assert (await webhook(client, "pr:opened", pr_payload, good)).status_code == 200


async def test_missing_job_is_404(client):
    assert (await client.get("/admin/jobs/999")).status_code == 404


async def test_manual_review_and_job_list(client, pull_request, review_job, queued):
    response = await client.post(f"/admin/pull-requests/{pull_request.id}/review")

    body = response.json()
    assert body["job_id"] == review_job.id
    assert body["status"] == "pending"
    assert queued == [pull_request.id]

    jobs = (await client.get(f"/admin/pull-requests/{pull_request.id}/jobs")).json()["jobs"]
    assert [j["id"] for j in jobs] == [review_job.id]


async def test_developer_statistics(client, db_session, pull_request, developer):
    await save_statistics(db_session, developer.id, {"Line Length": 2}, pull_request.id)
    await save_statistics(db_session, developer.id, {"Line Length": 1, "Force Cast": 1})

    response = await client.get(f"/admin/developers/{developer.id}/statistics")

    assert response.json() == {
        "developer_id": developer.id,
        "name": "Jane Doe",
        "reviews": 2,
        "violations": {"Line Length": 3, "Force Cast": 1},
    }
    assert (await client.get("/admin/developers/999/statistics")).status_code == 404
