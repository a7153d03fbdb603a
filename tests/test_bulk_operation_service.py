from datetime import timedelta

import pytest

from jobboard.exceptions import PermissionDenied
from jobboard.models.bulk import DeleteJobs, SetFeatured, SetFreelance, StatusChange
from jobboard.models.job import JobStatus

from tests.conftest import ADMIN_ID, NOW, make_job


@pytest.fixture
def coordinator(services):
    return services.bulk_coordinator


def test_bulk_reject_reports_per_item_and_notifies_applied_only(coordinator, job_repository, notification_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))

    report = coordinator.apply(["job-1", "job-2"], StatusChange(status=JobStatus.REJECTED), ADMIN_ID, "spam")

    assert report.outcomes["job-1"].result == "applied"
    assert report.outcomes["job-2"].result == "failed"
    assert report.outcomes["job-2"].error_type == "NotFound"
    assert report.notifications_sent == 1
    assert job_repository.get_by_id("job-1").status == "rejected"
    assert [n["job_id"] for n in notification_repository.sent] == ["job-1"]
    assert notification_repository.sent[0]["title"] == "Job Rejected"
    assert "Reason: spam" in notification_repository.sent[0]["message"]


def test_bulk_status_change_skips_jobs_already_in_state(coordinator, job_repository, notification_repository):
    job_repository.add(make_job("job-1", status=JobStatus.REJECTED))
    job_repository.add(make_job("job-2", status=JobStatus.PENDING))

    report = coordinator.apply(["job-1", "job-2"], StatusChange(status=JobStatus.REJECTED), ADMIN_ID)

    assert report.skipped_ids == ["job-1"]
    assert report.outcomes["job-1"].reason == "already rejected"
    assert report.applied_ids == ["job-2"]
    assert report.notifications_sent == 1
    assert len(notification_repository.sent) == 1


def test_illegal_transition_fails_item_without_stopping_batch(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.REJECTED))
    job_repository.add(make_job("job-2", status=JobStatus.INACTIVE))

    report = coordinator.apply(["job-1", "job-2"], StatusChange(status=JobStatus.ACTIVE), ADMIN_ID)

    assert report.failed_ids == ["job-1"]
    assert report.outcomes["job-1"].error_type == "InvalidTransition"
    assert report.applied_ids == ["job-2"]
    assert job_repository.get_by_id("job-1").status == "rejected"
    assert job_repository.get_by_id("job-2").status == "active"


def test_save_failure_is_isolated(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))
    job_repository.add(make_job("job-2", status=JobStatus.ACTIVE))
    job_repository.failing_saves.add("job-1")

    report = coordinator.apply(["job-1", "job-2"], StatusChange(status=JobStatus.INACTIVE), ADMIN_ID)

    assert report.failed_ids == ["job-1"]
    assert report.outcomes["job-1"].error_type == "StorePersistenceError"
    assert report.applied_ids == ["job-2"]


def test_duplicate_ids_are_processed_once(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))

    report = coordinator.apply(["job-1", "job-1"], StatusChange(status=JobStatus.INACTIVE), ADMIN_ID)

    assert list(report.outcomes) == ["job-1"]
    assert report.applied_ids == ["job-1"]


def test_set_freelance_grants_window(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))

    report = coordinator.apply(["job-1"], SetFreelance(enabled=True), ADMIN_ID)

    job = job_repository.get_by_id("job-1")
    assert report.applied_ids == ["job-1"]
    assert job.is_freelance is True
    assert job.freelance_until == NOW + timedelta(days=30)


def test_set_featured_skips_live_promotion(coordinator, job_repository):
    until = NOW + timedelta(days=5)
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE, is_featured=True, featured_until=until))

    report = coordinator.apply(["job-1"], SetFeatured(enabled=True), ADMIN_ID)

    assert report.skipped_ids == ["job-1"]
    assert job_repository.get_by_id("job-1").featured_until == until


def test_set_featured_on_rejected_job_fails(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.REJECTED))

    report = coordinator.apply(["job-1"], SetFeatured(enabled=True), ADMIN_ID)

    assert report.outcomes["job-1"].error_type == "PromotionNotAllowed"
    assert job_repository.get_by_id("job-1").is_featured is False


def test_disable_promotion_revokes_or_skips(coordinator, job_repository):
    job_repository.add(make_job(
        "job-1",
        status=JobStatus.ACTIVE,
        is_freelance=True,
        freelance_until=NOW + timedelta(days=3),
    ))
    job_repository.add(make_job("job-2", status=JobStatus.ACTIVE))

    report = coordinator.apply(["job-1", "job-2"], SetFreelance(enabled=False), ADMIN_ID)

    assert report.applied_ids == ["job-1"]
    assert report.outcomes["job-2"].reason == "not freelance"
    job = job_repository.get_by_id("job-1")
    assert job.is_freelance is False
    assert job.freelance_until is None


def test_bulk_delete(coordinator, job_repository):
    job_repository.add(make_job("job-1"))

    report = coordinator.apply(["job-1", "job-9"], DeleteJobs(), ADMIN_ID)

    assert report.applied_ids == ["job-1"]
    assert report.failed_ids == ["job-9"]
    assert job_repository.get_by_id("job-1") is None


def test_bulk_requires_authorized_actor(coordinator, job_repository):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))

    with pytest.raises(PermissionDenied):
        coordinator.apply(["job-1"], StatusChange(status=JobStatus.REJECTED), None)

    assert job_repository.get_by_id("job-1").status == "active"


def test_bulk_notification_failure_is_not_counted(job_repository, notification_repository, services):
    job_repository.add(make_job("job-1", status=JobStatus.ACTIVE))
    notification_repository.fail = True

    report = services.bulk_coordinator.apply(["job-1"], StatusChange(status=JobStatus.REJECTED), ADMIN_ID)

    assert report.applied_ids == ["job-1"]
    assert report.notifications_sent == 0
