"""HTTP tests for the moderation API backed by in-memory repositories."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from jobboard.main import app, get_services
from jobboard.models.job import JobStatus

from tests.conftest import ADMIN_ID, NOW, make_job, make_request

ADMIN_HEADERS = {"X-Actor-Id": ADMIN_ID}


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/").json() == {"status": "ok"}


def test_get_job_includes_promotion_state(client, job_repository):
    job_repository.add(make_job(
        status=JobStatus.ACTIVE,
        is_featured=True,
        featured_until=NOW + timedelta(days=3),
    ))

    response = client.get("/jobs/job-1")

    assert response.status_code == 200
    body = response.json()
    assert body["job"]["status"] == "active"
    assert body["promotion"]["effective_featured"] is True
    assert body["promotion"]["display_status"] == "active"


def test_missing_job_is_404(client):
    response = client.get("/jobs/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Job with ID missing not found"


def test_illegal_status_change_is_409(client, job_repository):
    job_repository.add(make_job(status=JobStatus.REJECTED))

    response = client.post("/jobs/job-1/status", json={"status": "featured"}, headers=ADMIN_HEADERS)

    assert response.status_code == 409
    assert "rejected" in response.json()["detail"]


def test_missing_actor_is_403(client, job_repository):
    job_repository.add(make_job())

    response = client.post("/jobs/job-1/status", json={"status": "active"})

    assert response.status_code == 403
    assert job_repository.get_by_id("job-1").status == "pending"


def test_approve_and_reapprove_request(client, job_repository, request_repository):
    job_repository.add(make_job())
    request_repository.add(make_request(kind="freelance"))

    first = client.post("/promotion-requests/req-1/approve", json={}, headers=ADMIN_HEADERS)
    second = client.post("/promotion-requests/req-1/approve", json={}, headers=ADMIN_HEADERS)

    assert first.status_code == 200
    assert first.json()["job"]["is_freelance"] is True
    assert first.json()["request"]["status"] == "approved"
    assert second.status_code == 409


def test_approve_without_payment_evidence_is_400(client, job_repository, request_repository):
    job_repository.add(make_job())
    request_repository.add(make_request(transaction_reference=""))

    response = client.post("/promotion-requests/req-1/approve", json={}, headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert "payment evidence" in response.json()["detail"]


def test_reject_request_requires_reason(client, request_repository):
    request_repository.add(make_request())

    response = client.post("/promotion-requests/req-1/reject", json={"reason": ""}, headers=ADMIN_HEADERS)

    assert response.status_code == 400


def test_list_pending_requests(client, request_repository):
    request_repository.add(make_request("req-1"))
    request_repository.add(make_request("req-2", job_id="job-2", status="approved"))

    response = client.get("/promotion-requests", params={"status": "pending"})

    assert [r["id"] for r in response.json()] == ["req-1"]


def test_bulk_endpoint_reports_outcomes(client, job_repository, notification_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))

    response = client.post(
        "/jobs/bulk",
        json={
            "job_ids": ["job-1", "job-2"],
            "action": {"type": "status_change", "status": "rejected"},
            "reason": "spam",
        },
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["outcomes"]["job-1"]["result"] == "applied"
    assert body["outcomes"]["job-2"]["result"] == "failed"
    assert body["outcomes"]["job-2"]["error_type"] == "NotFound"
    assert body["notifications_sent"] == 1
    assert len(notification_repository.sent) == 1


def test_extend_promotion(client, job_repository):
    job_repository.add(make_job(
        status=JobStatus.ACTIVE,
        is_featured=True,
        featured_until=NOW + timedelta(days=10),
    ))

    response = client.post("/jobs/job-1/extend", json={"kind": "featured", "days": 5}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert job_repository.get_by_id("job-1").featured_until == NOW + timedelta(days=15)


def test_review_job_reject(client, job_repository, notification_repository):
    job_repository.add(make_job())

    response = client.post(
        "/jobs/job-1/review",
        json={"decision": "reject", "kind": "featured", "notes": "Unclear role"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["job"]["status"] == "inactive"
    assert response.json()["notified"] is True


def test_reconcile_endpoint(client, job_repository):
    job_repository.add(make_job(
        status=JobStatus.FEATURED,
        is_featured=True,
        featured_until=NOW - timedelta(hours=1),
    ))

    assert client.post("/promotions/reconcile").status_code == 403

    response = client.post("/promotions/reconcile", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["demoted_ids"] == ["job-1"]
    assert job_repository.get_by_id("job-1").status == "active"


def test_delete_job(client, job_repository):
    job_repository.add(make_job())

    response = client.delete("/jobs/job-1", headers=ADMIN_HEADERS)

    assert response.json() == {"deleted": True, "job_id": "job-1"}
    assert client.delete("/jobs/job-1", headers=ADMIN_HEADERS).status_code == 404
