"""State-transition rules for the moderation status of a single job."""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from jobboard.exceptions import InvalidTransition, PromotionNotAllowed
from jobboard.models.job import Job, JobStatus, PromotionKind

logger = logging.getLogger(__name__)


TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.ACTIVE, JobStatus.REJECTED}),
    JobStatus.ACTIVE: frozenset({JobStatus.INACTIVE, JobStatus.FEATURED, JobStatus.REJECTED}),
    JobStatus.FEATURED: frozenset({JobStatus.ACTIVE, JobStatus.INACTIVE, JobStatus.REJECTED}),
    JobStatus.INACTIVE: frozenset({JobStatus.ACTIVE, JobStatus.REJECTED}),
    JobStatus.REJECTED: frozenset({JobStatus.PENDING}),
}

# Statuses a combined review may decline into inactive
REVIEWABLE_STATUSES = frozenset({
    JobStatus.PENDING,
    JobStatus.ACTIVE,
    JobStatus.FEATURED,
    JobStatus.INACTIVE,
})

CLEARED_PROMOTIONS = {
    "is_featured": False,
    "featured_until": None,
    "is_freelance": False,
    "freelance_until": None,
}


class LifecycleEngine:
    """Validates and applies status changes to jobs.

    The engine is pure: every operation returns an updated copy of the job
    and leaves its argument untouched, so a rejected transition can never
    leave a half-mutated job behind.

    Coupled side effects:
    - moving to rejected clears both promotion axes;
    - moving to inactive suspends promotions, keeping flags and windows so
      re-activation resumes the remaining time.
    """

    def allowed_transitions(self, status: JobStatus) -> FrozenSet[JobStatus]:
        return TRANSITIONS[JobStatus(status)]

    def can_transition(self, current: JobStatus, target: JobStatus) -> bool:
        current, target = JobStatus(current), JobStatus(target)
        return current == target or target in TRANSITIONS[current]

    def transition(self, job: Job, target: JobStatus, notes: Optional[str] = None) -> Job:
        """Apply a status change.

        Args:
            job: Job in its current state.
            target: Requested status.
            notes: Optional admin notes recorded with the decision.

        Returns:
            Updated copy of the job. The same status is a no-op that returns
            an unchanged copy (notes are still recorded if given).

        Raises:
            InvalidTransition: If target is not reachable from the current status.
        """
        current = JobStatus(job.status)
        target = JobStatus(target)

        updates = {}
        if notes is not None:
            updates["admin_notes"] = notes

        if current == target:
            return job.model_copy(update=updates)

        if not self.can_transition(current, target):
            raise InvalidTransition(current.value, target.value, job.id)

        updates["status"] = target.value
        if target == JobStatus.REJECTED:
            updates.update(CLEARED_PROMOTIONS)

        logger.info(f"Job {job.id}: {current.value} -> {target.value}")
        return job.model_copy(update=updates)

    def review_rejection(self, job: Job, notes: Optional[str] = None) -> Job:
        """Decline a job under first-time promotion review.

        Unlike a moderation rejection the job is parked as inactive and its
        promotion fields are left untouched.

        Raises:
            InvalidTransition: If the job is already rejected.
        """
        current = JobStatus(job.status)
        if current not in REVIEWABLE_STATUSES:
            raise InvalidTransition(current.value, JobStatus.INACTIVE.value, job.id)

        updates = {"status": JobStatus.INACTIVE.value}
        if notes is not None:
            updates["admin_notes"] = notes

        logger.info(f"Job {job.id}: review declined, {current.value} -> inactive")
        return job.model_copy(update=updates)

    def grant_promotion(
        self,
        job: Job,
        kind: PromotionKind,
        until: Optional[datetime]
    ) -> Job:
        """Attach a promotion window of the given kind.

        Raises:
            PromotionNotAllowed: If the job is rejected.
        """
        kind = PromotionKind(kind)
        if JobStatus(job.status) == JobStatus.REJECTED:
            raise PromotionNotAllowed(
                f"Job {job.id} is rejected and cannot be promoted as {kind.value}"
            )
        return job.model_copy(update={kind.flag_field: True, kind.until_field: until})

    def revoke_promotion(self, job: Job, kind: PromotionKind) -> Job:
        """Remove a promotion of the given kind.

        A job stored as featured falls back to active once its featured
        promotion is removed.
        """
        kind = PromotionKind(kind)
        updates = {kind.flag_field: False, kind.until_field: None}
        if kind == PromotionKind.FEATURED and JobStatus(job.status) == JobStatus.FEATURED:
            updates["status"] = JobStatus.ACTIVE.value
        return job.model_copy(update=updates)
