"""Service applying one admin action across many jobs."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Tuple

from jobboard.config import PromotionPolicy
from jobboard.exceptions import NotFound, StorePersistenceError, LifecycleError
from jobboard.models.bulk import (
    BulkAction,
    BulkItemOutcome,
    BulkReport,
    DeleteJobs,
    SetFeatured,
    SetFreelance,
    StatusChange
)
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.repositories.job_repository import JobRepository
from jobboard.services.lifecycle_engine import LifecycleEngine
from jobboard.services.notification_service import NotificationService
from jobboard.services.promotion_scheduler import PromotionScheduler
from jobboard.utils.authorization import Authorizer, deny_all, ensure_can_moderate
from jobboard.utils.clock import utc_now
from jobboard.utils.job_locks import JobLocks

logger = logging.getLogger(__name__)


class BulkOperationCoordinator:
    """Applies a single action to a set of jobs, one job at a time.

    This is a best-effort batch, not a transaction: every id is loaded,
    validated and saved on its own, and its outcome is recorded as applied,
    skipped or failed. A failing id never stops the rest of the batch, and
    nothing is retried here; callers re-submit ``report.failed_ids``.

    Attributes:
        job_repository: Repository for job persistence.
        notification_service: Best-effort employer notifications.
        lifecycle_engine: Status transition rules.
        promotion_scheduler: Effective promotion state.
        policy: Promotion duration policy for granted windows.
        can_approve: Capability deciding whether an actor may moderate.
        locks: Per-job lock registry shared with the other services.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        notification_service: NotificationService,
        lifecycle_engine: Optional[LifecycleEngine] = None,
        promotion_scheduler: Optional[PromotionScheduler] = None,
        policy: Optional[PromotionPolicy] = None,
        can_approve: Authorizer = deny_all,
        locks: Optional[JobLocks] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.job_repository = job_repository
        self.notification_service = notification_service
        self.lifecycle_engine = lifecycle_engine or LifecycleEngine()
        self.policy = policy or PromotionPolicy()
        self.promotion_scheduler = promotion_scheduler or PromotionScheduler(policy=self.policy, clock=clock)
        self.can_approve = can_approve
        self.locks = locks or JobLocks()
        self.clock = clock

    def apply(
        self,
        job_ids: Iterable[str],
        action: BulkAction,
        actor_id: Optional[str],
        reason: Optional[str] = None
    ) -> BulkReport:
        """Apply an action to every job id.

        Args:
            job_ids: Ids of the selected jobs; duplicates are processed once.
            action: StatusChange, SetFreelance, SetFeatured or DeleteJobs.
            actor_id: Acting administrator.
            reason: Optional reason appended to rejection notifications.

        Returns:
            BulkReport with an outcome per id and the notification count.

        Raises:
            PermissionDenied: If the actor may not moderate (before any item runs).
        """
        ensure_can_moderate(self.can_approve, actor_id)
        report = BulkReport(action=action.type)

        unique_ids = list(dict.fromkeys(job_ids))
        logger.info(f"Applying bulk '{action.type}' to {len(unique_ids)} jobs (actor {actor_id})")

        for job_id in unique_ids:
            notify_job = None
            try:
                with self.locks.hold(job_id):
                    outcome, notify_job = self._apply_one(job_id, action)
            except (LifecycleError, StorePersistenceError) as error:
                logger.warning(f"Bulk '{action.type}' failed for job {job_id}: {error}")
                outcome = BulkItemOutcome.failed(error)
            except Exception as error:
                logger.exception(f"Unexpected error in bulk '{action.type}' for job {job_id}: {error}")
                outcome = BulkItemOutcome.failed(error)

            report.outcomes[job_id] = outcome

            # Notifications go out only after the job update has been saved
            if notify_job is not None and self.notification_service.send_job_rejection(notify_job, reason):
                report.notifications_sent += 1

        logger.info(
            f"Bulk '{action.type}' complete: {len(report.applied_ids)} applied, "
            f"{len(report.skipped_ids)} skipped, {len(report.failed_ids)} failed, "
            f"{report.notifications_sent} notifications sent"
        )
        return report

    def _apply_one(self, job_id: str, action: BulkAction) -> Tuple[BulkItemOutcome, Optional[Job]]:
        if isinstance(action, DeleteJobs):
            self.job_repository.delete(job_id)
            logger.info(f"Deleted job {job_id}")
            return BulkItemOutcome.applied(), None

        job = self.job_repository.get_by_id(job_id)
        if not job:
            raise NotFound("Job", job_id)

        if isinstance(action, StatusChange):
            return self._change_status(job, JobStatus(action.status))
        if isinstance(action, SetFreelance):
            return self._set_promotion(job, PromotionKind.FREELANCE, action.enabled), None
        if isinstance(action, SetFeatured):
            return self._set_promotion(job, PromotionKind.FEATURED, action.enabled), None

        raise ValueError(f"Unsupported bulk action: {action!r}")

    def _change_status(self, job: Job, target: JobStatus) -> Tuple[BulkItemOutcome, Optional[Job]]:
        if JobStatus(job.status) == target:
            return BulkItemOutcome.skipped(f"already {target.value}"), None

        updated = self.lifecycle_engine.transition(job, target)
        saved = self.job_repository.save(updated)

        # Only a first-time move into rejected fans out a notification
        if target == JobStatus.REJECTED:
            return BulkItemOutcome.applied(), saved
        return BulkItemOutcome.applied(), None

    def _set_promotion(self, job: Job, kind: PromotionKind, enabled: bool) -> BulkItemOutcome:
        if enabled:
            now = self.clock()
            state = self.promotion_scheduler.evaluate(job, now)
            already_live = state.effective_featured if kind == PromotionKind.FEATURED else state.effective_freelance
            if already_live:
                return BulkItemOutcome.skipped(f"already {kind.value}")
            updated = self.lifecycle_engine.grant_promotion(
                job, kind, now + timedelta(days=self.policy.duration_days)
            )
        else:
            if not job.has_promotion(kind) and job.promotion_until(kind) is None:
                return BulkItemOutcome.skipped(f"not {kind.value}")
            updated = self.lifecycle_engine.revoke_promotion(job, kind)

        self.job_repository.save(updated)
        return BulkItemOutcome.applied()
