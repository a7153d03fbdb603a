"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from jobboard.main import build_services
from jobboard.models.job import Job, JobStatus
from jobboard.models.promotion_request import PromotionRequest
from jobboard.repositories.memory_repository import (
    InMemoryJobRepository,
    InMemoryNotificationRepository,
    InMemoryPromotionRequestRepository,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ADMIN_ID = "admin-1"


def fixed_clock():
    return NOW


def admin_only(actor_id):
    return actor_id == ADMIN_ID


def make_job(job_id="job-1", **overrides):
    data = {
        "id": job_id,
        "employer_id": f"employer-{job_id}",
        "title": f"Backend Developer {job_id}",
        "status": JobStatus.PENDING,
        "deadline": NOW + timedelta(days=60),
    }
    data.update(overrides)
    return Job(**data)


def make_request(request_id="req-1", job_id="job-1", kind="featured", **overrides):
    data = {
        "id": request_id,
        "job_id": job_id,
        "employer_id": f"employer-{job_id}",
        "kind": kind,
        "amount": 500.0,
        "transaction_reference": f"TX-{request_id}",
        "submitted_at": NOW - timedelta(hours=2),
    }
    data.update(overrides)
    return PromotionRequest(**data)


@pytest.fixture
def job_repository():
    return InMemoryJobRepository()


@pytest.fixture
def request_repository():
    return InMemoryPromotionRequestRepository()


@pytest.fixture
def notification_repository():
    return InMemoryNotificationRepository()


@pytest.fixture
def services(job_repository, request_repository, notification_repository):
    return build_services(
        job_repository=job_repository,
        request_repository=request_repository,
        notification_repository=notification_repository,
        can_approve=admin_only,
        clock=fixed_clock,
    )
