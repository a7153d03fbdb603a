"""Service for single-job moderation and read access."""

import logging
from typing import List, Optional, Tuple

from jobboard.exceptions import NotFound
from jobboard.models.job import Job, JobStatus
from jobboard.models.promotion import PromotionState
from jobboard.repositories.job_repository import JobRepository
from jobboard.services.lifecycle_engine import LifecycleEngine
from jobboard.services.notification_service import NotificationService
from jobboard.services.promotion_scheduler import PromotionScheduler
from jobboard.utils.authorization import Authorizer, deny_all, ensure_can_moderate
from jobboard.utils.job_locks import JobLocks

logger = logging.getLogger(__name__)


class JobService:
    """Service for reading jobs and applying moderation decisions to one job.

    Attributes:
        job_repository: Repository for job data access.
        lifecycle_engine: Status transition rules.
        promotion_scheduler: Effective promotion state computation.
        notification_service: Best-effort employer notifications.
        can_approve: Capability deciding whether an actor may moderate.
        locks: Per-job lock registry shared with the other services.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        lifecycle_engine: LifecycleEngine,
        promotion_scheduler: PromotionScheduler,
        notification_service: NotificationService,
        can_approve: Authorizer = deny_all,
        locks: Optional[JobLocks] = None
    ):
        """Initialize the service.

        Args:
            job_repository: JobRepository (or compatible) instance.
            lifecycle_engine: LifecycleEngine instance.
            promotion_scheduler: PromotionScheduler instance.
            notification_service: NotificationService instance.
            can_approve: Authorization capability for moderators.
            locks: Shared JobLocks registry.
        """
        self.job_repository = job_repository
        self.lifecycle_engine = lifecycle_engine
        self.promotion_scheduler = promotion_scheduler
        self.notification_service = notification_service
        self.can_approve = can_approve
        self.locks = locks or JobLocks()

    def get_job(self, job_id: str) -> Job:
        """Get a job by ID.

        Args:
            job_id: Job UUID.

        Returns:
            Job record.

        Raises:
            NotFound: If job not found.
        """
        job = self.job_repository.get_by_id(job_id)
        if not job:
            raise NotFound("Job", job_id)
        return job

    def view_job(self, job_id: str) -> Tuple[Job, PromotionState]:
        """Get a job together with its effective promotion state."""
        job = self.get_job(job_id)
        return job, self.promotion_scheduler.evaluate(job)

    def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        employer_id: Optional[str] = None,
        promoted_only: bool = False
    ) -> List[Tuple[Job, PromotionState]]:
        """List jobs with optional filters, each with its promotion state.

        Args:
            status: Filter by stored status.
            employer_id: Filter by owning employer.
            promoted_only: Only featured or freelance jobs.

        Returns:
            List of (job, promotion state) pairs.
        """
        now = self.promotion_scheduler.clock()
        jobs = self.job_repository.query(
            status=status,
            employer_id=employer_id,
            promoted_only=promoted_only
        )
        return [(job, self.promotion_scheduler.evaluate(job, now)) for job in jobs]

    def change_status(
        self,
        job_id: str,
        status: JobStatus,
        actor_id: Optional[str],
        notes: Optional[str] = None,
        reason: Optional[str] = None
    ) -> Job:
        """Move a job to a new moderation status.

        A first-time move into rejected notifies the employer.

        Args:
            job_id: Job UUID.
            status: Requested status.
            actor_id: Acting administrator.
            notes: Optional admin notes recorded on the job.
            reason: Optional rejection reason for the employer.

        Returns:
            Job as stored after the change.

        Raises:
            PermissionDenied: If the actor may not moderate.
            NotFound: If the job does not exist.
            InvalidTransition: If the change is not allowed.
        """
        ensure_can_moderate(self.can_approve, actor_id)
        target = JobStatus(status)

        with self.locks.hold(job_id):
            job = self.get_job(job_id)
            previous = JobStatus(job.status)
            updated = self.lifecycle_engine.transition(job, target, notes)
            if previous == target and notes is None:
                return job
            saved = self.job_repository.save(updated)

        if target == JobStatus.REJECTED and previous != JobStatus.REJECTED:
            self.notification_service.send_job_rejection(saved, reason or notes)
        return saved

    def delete_job(self, job_id: str, actor_id: Optional[str]) -> bool:
        """Permanently delete a job.

        Args:
            job_id: Job UUID.
            actor_id: Acting administrator.

        Returns:
            True if deletion successful.

        Raises:
            PermissionDenied: If the actor may not moderate.
            NotFound: If job not found.
        """
        ensure_can_moderate(self.can_approve, actor_id)
        with self.locks.hold(job_id):
            deleted = self.job_repository.delete(job_id)
        logger.info(f"Deleted job {job_id} (actor {actor_id})")
        return deleted
