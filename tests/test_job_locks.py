"""Tests for per-job serialization of concurrent admin actions."""

import threading
import time

import pytest

from jobboard.main import build_services
from jobboard.models.bulk import SetFeatured, StatusChange
from jobboard.models.job import JobStatus
from jobboard.repositories.memory_repository import InMemoryJobRepository
from jobboard.utils.job_locks import JobLocks

from tests.conftest import ADMIN_ID, admin_only, fixed_clock, make_job


class SlowJobRepository(InMemoryJobRepository):
    """Records reads and writes per thread and makes every write slow."""

    def __init__(self, delay: float = 0.05) -> None:
        super().__init__()
        self.delay = delay
        self.events = []

    def get_by_id(self, job_id):
        self.events.append(("read", threading.current_thread().name))
        return super().get_by_id(job_id)

    def save(self, job):
        time.sleep(self.delay)
        self.events.append(("write", threading.current_thread().name))
        return super().save(job)


@pytest.fixture
def slow_services(request_repository, notification_repository):
    return build_services(
        job_repository=SlowJobRepository(),
        request_repository=request_repository,
        notification_repository=notification_repository,
        can_approve=admin_only,
        clock=fixed_clock,
    )


def run_together(*targets):
    barrier = threading.Barrier(len(targets))
    errors = []

    def runner(target):
        barrier.wait()
        try:
            target()
        except Exception as error:
            errors.append(error)

    threads = [
        threading.Thread(target=runner, args=(target,), name=f"worker-{index}")
        for index, target in enumerate(targets)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)
    return errors


def test_status_change_and_bulk_promotion_on_same_job_do_not_lose_updates(slow_services):
    job_repository = slow_services.job_service.job_repository
    job_repository.add(make_job(status=JobStatus.ACTIVE))

    errors = run_together(
        lambda: slow_services.job_service.change_status("job-1", JobStatus.INACTIVE, ADMIN_ID),
        lambda: slow_services.bulk_coordinator.apply(["job-1"], SetFeatured(enabled=True), ADMIN_ID),
    )

    assert errors == []
    job = job_repository.get_by_id("job-1")
    assert job.status == "inactive"
    assert job.is_featured is True


def test_read_modify_write_cycles_do_not_interleave(slow_services):
    job_repository = slow_services.job_service.job_repository
    job_repository.add(make_job(status=JobStatus.ACTIVE))

    run_together(
        lambda: slow_services.job_service.change_status("job-1", JobStatus.INACTIVE, ADMIN_ID),
        lambda: slow_services.bulk_coordinator.apply(["job-1"], SetFeatured(enabled=True), ADMIN_ID),
    )

    events = job_repository.events[:4]
    assert [op for op, _ in events] == ["read", "write", "read", "write"]
    assert events[0][1] == events[1][1]
    assert events[2][1] == events[3][1]
    assert events[0][1] != events[2][1]


def test_registry_is_empty_after_work_completes(services):
    report = services.bulk_coordinator.apply(
        [f"missing-{n}" for n in range(1000)],
        StatusChange(status=JobStatus.REJECTED),
        ADMIN_ID,
    )

    assert len(report.failed_ids) == 1000
    assert len(services.bulk_coordinator.locks) == 0


def test_lock_is_released_and_dropped_when_work_raises():
    locks = JobLocks()

    with pytest.raises(RuntimeError):
        with locks.hold("job-1"):
            assert len(locks) == 1
            raise RuntimeError("save failed")

    assert len(locks) == 0
    with locks.hold("job-1"):
        assert len(locks) == 1


def test_second_holder_waits_for_the_first():
    locks = JobLocks()
    entered = threading.Event()
    release = threading.Event()
    order = []

    def first():
        with locks.hold("job-1"):
            entered.set()
            release.wait(timeout=5)
            order.append("first")

    def second():
        entered.wait(timeout=5)
        with locks.hold("job-1"):
            order.append("second")

    threads = [threading.Thread(target=first), threading.Thread(target=second)]
    for thread in threads:
        thread.start()
    entered.wait(timeout=5)
    time.sleep(0.05)
    assert order == []
    release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert order == ["first", "second"]
    assert len(locks) == 0
