"""Service computing effective promotion state, extensions and expiry cleanup."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from jobboard.config import PromotionPolicy
from jobboard.exceptions import NotFound, PromotionNotAllowed, StorePersistenceError
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.models.promotion import DisplayStatus, PromotionState, ReconciliationReport
from jobboard.repositories.job_repository import JobRepository
from jobboard.utils.authorization import Authorizer, deny_all, ensure_can_moderate
from jobboard.utils.clock import utc_now
from jobboard.utils.job_locks import JobLocks

logger = logging.getLogger(__name__)

# Stored statuses under which a job is publicly listed
LIVE_STATUSES = frozenset({JobStatus.ACTIVE, JobStatus.FEATURED})


class PromotionScheduler:
    """Service for time-boxed featured and freelance promotions.

    Expiry is detected lazily: promotion flags stay set in storage after
    their window lapses, and readers compute the effective state through
    evaluate(). reconcile_expired() is the explicit pass that persists the
    demotion and may be run on a schedule or on demand.

    Attributes:
        job_repository: Repository for job persistence (store-backed operations).
        policy: Promotion duration and extension policy.
        can_approve: Capability deciding whether an actor may extend promotions.
        locks: Per-job lock registry shared with the other services.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        job_repository: Optional[JobRepository] = None,
        policy: Optional[PromotionPolicy] = None,
        can_approve: Authorizer = deny_all,
        locks: Optional[JobLocks] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize the scheduler.

        Args:
            job_repository: JobRepository (or compatible) instance.
            policy: PromotionPolicy; defaults to 30 day windows.
            can_approve: Authorization capability for extensions.
            locks: Shared JobLocks registry.
            clock: Callable returning the current time.
        """
        self.job_repository = job_repository
        self.policy = policy or PromotionPolicy()
        self.can_approve = can_approve
        self.locks = locks or JobLocks()
        self.clock = clock

    # Read-time evaluation

    def is_effectively_featured(self, job: Job, now: datetime) -> bool:
        return (
            job.is_featured
            and job.featured_until is not None
            and job.featured_until > now
            and JobStatus(job.status) == JobStatus.ACTIVE
        )

    def is_effectively_freelance(self, job: Job, now: datetime) -> bool:
        # A freelance job approved without a window is not yet time-boxed, not expired.
        return (
            job.is_freelance
            and (job.freelance_until is None or job.freelance_until > now)
            and JobStatus(job.status) == JobStatus.ACTIVE
        )

    def is_expired(self, job: Job, now: datetime) -> bool:
        featured_lapsed = job.is_featured and job.featured_until is not None and job.featured_until <= now
        freelance_lapsed = job.is_freelance and job.freelance_until is not None and job.freelance_until <= now
        deadline_passed = job.deadline is not None and job.deadline <= now
        return featured_lapsed or freelance_lapsed or deadline_passed

    def can_extend(self, job: Job) -> bool:
        return JobStatus(job.status) in LIVE_STATUSES

    def effective_status(self, job: Job, now: datetime) -> DisplayStatus:
        status = JobStatus(job.status)
        if status in LIVE_STATUSES and self.is_expired(job, now):
            return DisplayStatus.EXPIRED
        return DisplayStatus(status.value)

    def evaluate(self, job: Job, now: Optional[datetime] = None) -> PromotionState:
        """Compute the effective promotion state of a job without touching storage.

        Args:
            job: Job as stored.
            now: Evaluation instant; defaults to the scheduler clock.

        Returns:
            PromotionState for the job at that instant.
        """
        now = now or self.clock()
        return PromotionState(
            effective_featured=self.is_effectively_featured(job, now),
            effective_freelance=self.is_effectively_freelance(job, now),
            is_expired=self.is_expired(job, now),
            display_status=self.effective_status(job, now),
            can_extend=self.can_extend(job),
            evaluated_at=now
        )

    # Extension

    def extend(
        self,
        job: Job,
        kind: PromotionKind,
        days: int,
        now: Optional[datetime] = None
    ) -> Job:
        """Push a promotion window forward by whole days.

        The new end is max(now, current end) + days, so extending a lapsed
        promotion never accumulates backdated time.

        Args:
            job: Job holding the promotion.
            kind: Promotion to extend.
            days: Number of days to add.
            now: Evaluation instant; defaults to the scheduler clock.

        Returns:
            Updated copy of the job.

        Raises:
            ValueError: If days is not positive.
            PromotionNotAllowed: If the job is not live or lacks the promotion.
        """
        kind = PromotionKind(kind)
        if days <= 0:
            raise ValueError("Extension days must be a positive integer")
        if not self.can_extend(job):
            raise PromotionNotAllowed(
                f"Cannot extend {kind.value} promotion of job {job.id} while status is '{JobStatus(job.status).value}'"
            )
        if not job.has_promotion(kind):
            raise PromotionNotAllowed(f"Job {job.id} has no {kind.value} promotion to extend")

        now = now or self.clock()
        current_until = job.promotion_until(kind)
        base = max(now, current_until) if current_until else now
        return job.model_copy(update={kind.until_field: base + timedelta(days=days)})

    def extend_job(
        self,
        job_id: str,
        kind: PromotionKind,
        actor_id: Optional[str],
        days: Optional[int] = None
    ) -> Job:
        """Load, extend and persist a job's promotion.

        Args:
            job_id: Job UUID.
            kind: Promotion to extend.
            actor_id: Acting administrator.
            days: Days to add; defaults to the policy extension increment.

        Returns:
            Job as stored after the extension.

        Raises:
            PermissionDenied: If the actor may not moderate.
            NotFound: If the job does not exist.
            PromotionNotAllowed: If the job cannot be extended.
        """
        ensure_can_moderate(self.can_approve, actor_id)
        if days is None:
            days = self.policy.extension_days

        with self.locks.hold(job_id):
            job = self.job_repository.get_by_id(job_id)
            if not job:
                raise NotFound("Job", job_id)

            extended = self.extend(job, kind, days)
            saved = self.job_repository.save(extended)

        logger.info(
            f"Extended {PromotionKind(kind).value} promotion of job {job_id} by {days} days "
            f"until {saved.promotion_until(PromotionKind(kind))} (actor {actor_id})"
        )
        return saved

    # Reconciliation

    def reconcile(self, job: Job, now: datetime) -> Optional[Job]:
        """Clear promotion fields whose window has lapsed.

        Only live jobs are touched; suspended (inactive) jobs keep their
        windows. Expiry never changes moderation status except returning a
        job stored as featured to active once no featured window remains.

        Returns:
            Updated copy of the job, or None when nothing expired.
        """
        status = JobStatus(job.status)
        if status not in LIVE_STATUSES:
            return None

        updates = {}
        for kind in PromotionKind:
            until = job.promotion_until(kind)
            if job.has_promotion(kind) and until is not None and until <= now:
                updates[kind.flag_field] = False
                updates[kind.until_field] = None

        if not updates:
            return None

        featured_remaining = job.is_featured and "is_featured" not in updates
        if status == JobStatus.FEATURED and not featured_remaining:
            updates["status"] = JobStatus.ACTIVE.value
        return job.model_copy(update=updates)

    def reconcile_expired(self, now: Optional[datetime] = None) -> ReconciliationReport:
        """Persist detected expiry for every promoted job.

        Safe to re-run: a second pass over the same data changes nothing.
        A failure on one job is recorded and does not stop the pass.

        Args:
            now: Evaluation instant; defaults to the scheduler clock.

        Returns:
            ReconciliationReport summarizing the pass.
        """
        now = now or self.clock()
        report = ReconciliationReport(run_at=now)

        logger.info("Starting promotion reconciliation pass...")
        candidates = self.job_repository.query(promoted_only=True)
        report.checked = len(candidates)

        for candidate in candidates:
            try:
                with self.locks.hold(candidate.id):
                    # Re-read under the lock so concurrent admin edits are not overwritten
                    job = self.job_repository.get_by_id(candidate.id)
                    if not job:
                        continue
                    demoted = self.reconcile(job, now)
                    if demoted is None:
                        continue
                    self.job_repository.save(demoted)
                report.demoted_ids.append(job.id)
            except (NotFound, StorePersistenceError) as error:
                logger.error(f"Failed to reconcile job {candidate.id}: {error}")
                report.failed[candidate.id] = str(error)

        logger.info(
            f"Reconciliation complete. Checked {report.checked} jobs, "
            f"demoted {len(report.demoted_ids)}, failed {len(report.failed)}"
        )
        return report
