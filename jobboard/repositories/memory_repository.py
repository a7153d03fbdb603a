"""In-memory repositories mirroring the Supabase repositories.

Used by the test-suite and for running the admin API without a database.
Entities are copied on the way in and out so callers cannot mutate stored
state without calling save().
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from jobboard.exceptions import NotFound, NotificationDeliveryError, StorePersistenceError
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.models.promotion_request import PromotionRequest, RequestStatus


class InMemoryJobRepository:
    """Dictionary backed job store with the JobRepository interface."""

    def __init__(self) -> None:
        self.jobs: Dict[str, Job] = {}
        # Ids whose next save() raises StorePersistenceError
        self.failing_saves: set = set()

    def add(self, job: Job) -> Job:
        self.jobs[job.id] = job.model_copy(deep=True)
        return job

    def get_by_id(self, job_id: str) -> Optional[Job]:
        job = self.jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    def save(self, job: Job) -> Job:
        if job.id in self.failing_saves:
            raise StorePersistenceError(f"Failed to update jobs: simulated outage for {job.id}")
        if job.id not in self.jobs:
            raise NotFound("Job", job.id)
        stored = job.model_copy(deep=True, update={"updated_at": datetime.now(timezone.utc)})
        self.jobs[job.id] = stored
        return stored.model_copy(deep=True)

    def query(
        self,
        status: Optional[JobStatus] = None,
        employer_id: Optional[str] = None,
        promoted_only: bool = False,
        job_ids: Optional[List[str]] = None,
        updated_since: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[Job]:
        results = []
        for job in self.jobs.values():
            if status and JobStatus(job.status) != JobStatus(status):
                continue
            if employer_id and job.employer_id != employer_id:
                continue
            if promoted_only and not (job.is_featured or job.is_freelance):
                continue
            if job_ids is not None and job.id not in job_ids:
                continue
            if updated_since and (job.updated_at is None or job.updated_at < updated_since):
                continue
            results.append(job.model_copy(deep=True))

        if limit:
            results = results[:limit]
        return results

    def delete(self, job_id: str) -> bool:
        if job_id not in self.jobs:
            raise NotFound("Job", job_id)
        del self.jobs[job_id]
        return True


class InMemoryPromotionRequestRepository:
    """Dictionary backed request store with the PromotionRequestRepository interface."""

    def __init__(self) -> None:
        self.requests: Dict[str, PromotionRequest] = {}
        self.failing_saves: set = set()

    def add(self, request: PromotionRequest) -> PromotionRequest:
        self.requests[request.id] = request.model_copy(deep=True)
        return request

    def get_by_id(self, request_id: str) -> Optional[PromotionRequest]:
        request = self.requests.get(request_id)
        return request.model_copy(deep=True) if request else None

    def save(self, request: PromotionRequest) -> PromotionRequest:
        if request.id in self.failing_saves:
            raise StorePersistenceError(
                f"Failed to update featured_job_requests: simulated outage for {request.id}"
            )
        if request.id not in self.requests:
            raise NotFound("Promotion request", request.id)
        self.requests[request.id] = request.model_copy(deep=True)
        return request

    def query(
        self,
        status: Optional[RequestStatus] = None,
        kind: Optional[PromotionKind] = None,
        job_id: Optional[str] = None,
        employer_id: Optional[str] = None,
        submitted_since: Optional[datetime] = None
    ) -> List[PromotionRequest]:
        results = []
        for request in self.requests.values():
            if status and RequestStatus(request.status) != RequestStatus(status):
                continue
            if kind and PromotionKind(request.kind) != PromotionKind(kind):
                continue
            if job_id and request.job_id != job_id:
                continue
            if employer_id and request.employer_id != employer_id:
                continue
            if submitted_since and (request.submitted_at is None or request.submitted_at < submitted_since):
                continue
            results.append(request.model_copy(deep=True))

        oldest = datetime.min.replace(tzinfo=timezone.utc)
        results.sort(key=lambda r: r.submitted_at or oldest, reverse=True)
        return results


class InMemoryNotificationRepository:
    """Collects notifications instead of storing them in Supabase."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        job_id: Optional[str] = None
    ) -> Dict[str, Any]:
        if self.fail:
            raise NotificationDeliveryError("Failed to create notification: simulated outage")
        notification = {
            "user_id": user_id,
            "job_id": job_id,
            "title": title,
            "message": message,
            "is_read": False
        }
        self.sent.append(notification)
        return notification
