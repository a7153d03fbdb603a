"""Service reviewing payment-backed promotion requests and promoted jobs."""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from jobboard.config import PromotionPolicy
from jobboard.constants import DEFAULT_APPROVAL_NOTES, DEFAULT_REJECTION_NOTES
from jobboard.exceptions import (
    AlreadyProcessed,
    MissingPaymentEvidence,
    NotFound,
    StorePersistenceError
)
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.models.promotion_request import (
    ApprovalResult,
    PromotionRequest,
    RequestStatus,
    ReviewDecision
)
from jobboard.repositories.job_repository import JobRepository
from jobboard.repositories.promotion_request_repository import PromotionRequestRepository
from jobboard.services.lifecycle_engine import LifecycleEngine
from jobboard.services.notification_service import NotificationService
from jobboard.utils.authorization import Authorizer, deny_all, ensure_can_moderate
from jobboard.utils.clock import utc_now
from jobboard.utils.job_locks import JobLocks

logger = logging.getLogger(__name__)


class ApprovalWorkflow:
    """Service turning promotion requests into approve/reject decisions.

    Two entry points grant promotions:
    - approve()/reject() process a separate PromotionRequest record backed by
      payment evidence;
    - review_job() decides on a freshly submitted featured/freelance job
      directly, without a request record.
    Both converge on the same job invariants.

    Attributes:
        job_repository: Repository for job persistence.
        request_repository: Repository for promotion request persistence.
        notification_service: Best-effort employer notifications.
        lifecycle_engine: Status transition rules.
        policy: Promotion duration policy.
        can_approve: Capability deciding whether an actor may moderate.
        locks: Per-job lock registry shared with the other services.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        request_repository: PromotionRequestRepository,
        notification_service: NotificationService,
        lifecycle_engine: Optional[LifecycleEngine] = None,
        policy: Optional[PromotionPolicy] = None,
        can_approve: Authorizer = deny_all,
        locks: Optional[JobLocks] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize the workflow.

        Args:
            job_repository: JobRepository (or compatible) instance.
            request_repository: PromotionRequestRepository (or compatible) instance.
            notification_service: NotificationService instance.
            lifecycle_engine: LifecycleEngine; a default one is created if omitted.
            policy: PromotionPolicy; defaults to 30 day windows.
            can_approve: Authorization capability for moderators.
            locks: Shared JobLocks registry.
            clock: Callable returning the current time.
        """
        self.job_repository = job_repository
        self.request_repository = request_repository
        self.notification_service = notification_service
        self.lifecycle_engine = lifecycle_engine or LifecycleEngine()
        self.policy = policy or PromotionPolicy()
        self.can_approve = can_approve
        self.locks = locks or JobLocks()
        self.clock = clock

    def list_requests(
        self,
        status: Optional[RequestStatus] = None,
        kind: Optional[PromotionKind] = None
    ) -> List[PromotionRequest]:
        """List promotion requests for the review queue, newest first.

        Args:
            status: Optional review status filter (e.g. pending).
            kind: Optional promotion kind filter.

        Returns:
            List of PromotionRequest objects.
        """
        return self.request_repository.query(status=status, kind=kind)

    def approve(
        self,
        request_id: str,
        actor_id: Optional[str],
        notes: Optional[str] = None
    ) -> ApprovalResult:
        """Approve a pending promotion request.

        The target job becomes active and receives a fresh promotion window
        of the requested kind. A job that already holds a running window of
        that kind keeps it unchanged, so neither a duplicate request nor a
        retry extends it. The job is written before the request: if the
        request write fails the job stays promoted, the request stays pending,
        and a retry completes the request.

        Args:
            request_id: PromotionRequest UUID.
            actor_id: Acting administrator.
            notes: Optional admin notes stored on the request.

        Returns:
            ApprovalResult with the approved request and promoted job.

        Raises:
            PermissionDenied: If the actor may not moderate.
            NotFound: If the request or its job does not exist.
            AlreadyProcessed: If the request is not pending.
            MissingPaymentEvidence: If the request has no payment evidence.
            InvalidTransition: If the job cannot become active (e.g. rejected).
            StorePersistenceError: If either write fails.
        """
        ensure_can_moderate(self.can_approve, actor_id)
        request = self._get_pending_request(request_id)
        if not request.has_payment_evidence:
            raise MissingPaymentEvidence(request.id)
        kind = PromotionKind(request.kind)

        with self.locks.hold(request.job_id):
            # Re-check under the job lock in case a concurrent decision won
            request = self._get_pending_request(request_id)
            job = self._get_job(request.job_id)
            self._warn_on_duplicate_requests(request)

            now = self.clock()
            promoted = self.lifecycle_engine.transition(job, JobStatus.ACTIVE)
            if job.holds_window(kind, now):
                # Retries and duplicate requests complete without moving the running window
                logger.warning(
                    f"Job {job.id} already holds a {kind.value} window until "
                    f"{job.promotion_until(kind)}; completing request {request.id} without extending it"
                )
            else:
                until = now + timedelta(days=self.policy.duration_days)
                promoted = self.lifecycle_engine.grant_promotion(promoted, kind, until)

            saved_job = job if promoted == job else self.job_repository.save(promoted)

            processed = request.model_copy(update={
                "status": RequestStatus.APPROVED.value,
                "processed_at": now,
                "processed_by": actor_id,
                "admin_notes": notes
            })
            try:
                self.request_repository.save(processed)
            except StorePersistenceError as error:
                logger.error(
                    f"Job {job.id} promoted but request {request.id} could not be marked approved: {error}"
                )
                raise StorePersistenceError(
                    f"Approval of request {request.id} incomplete: job {job.id} was promoted but the "
                    "request is still pending; retry the approval",
                    error
                ) from error

        logger.info(
            f"Approved {kind.value} request {request.id} for job {job.id} "
            f"until {saved_job.promotion_until(kind)} (actor {actor_id})"
        )
        return ApprovalResult(request=processed, job=saved_job)

    def reject(
        self,
        request_id: str,
        actor_id: Optional[str],
        reason: str
    ) -> ApprovalResult:
        """Reject a pending promotion request.

        The job itself is left as it is: its status and promotion fields are
        not touched. The employer is notified with the reason.

        Args:
            request_id: PromotionRequest UUID.
            actor_id: Acting administrator.
            reason: Rejection reason shown to the employer.

        Returns:
            ApprovalResult with the rejected request.

        Raises:
            ValueError: If no reason is given.
            PermissionDenied: If the actor may not moderate.
            NotFound: If the request does not exist.
            AlreadyProcessed: If the request is not pending.
            StorePersistenceError: If the request write fails.
        """
        if not reason or not reason.strip():
            raise ValueError("A rejection reason is required")

        ensure_can_moderate(self.can_approve, actor_id)
        request = self._get_pending_request(request_id)

        with self.locks.hold(request.job_id):
            request = self._get_pending_request(request_id)
            processed = request.model_copy(update={
                "status": RequestStatus.REJECTED.value,
                "processed_at": self.clock(),
                "processed_by": actor_id,
                "admin_notes": reason
            })
            self.request_repository.save(processed)

        kind = PromotionKind(request.kind)
        logger.info(f"Rejected {kind.value} request {request.id} for job {request.job_id} (actor {actor_id})")

        job = self._find_job_for_notification(request.job_id)
        notified = False
        if job is not None:
            notified = self.notification_service.send_promotion_rejection(job, kind, reason)

        return ApprovalResult(request=processed, job=job, notified=notified)

    def review_job(
        self,
        job_id: str,
        decision: ReviewDecision,
        kind: PromotionKind,
        actor_id: Optional[str],
        notes: Optional[str] = None
    ) -> ApprovalResult:
        """Decide on a job submitted directly as featured or freelance.

        Approval activates the job with a fresh promotion window. Rejection
        parks the job as inactive (not rejected), leaves promotion fields
        alone and notifies the employer.

        Args:
            job_id: Job UUID.
            decision: approve or reject.
            kind: Promotion the job was submitted for.
            actor_id: Acting administrator.
            notes: Optional admin notes recorded on the job.

        Returns:
            ApprovalResult with the updated job.

        Raises:
            PermissionDenied: If the actor may not moderate.
            NotFound: If the job does not exist.
            InvalidTransition: If the job's status does not allow the decision.
        """
        ensure_can_moderate(self.can_approve, actor_id)
        decision = ReviewDecision(decision)
        kind = PromotionKind(kind)

        with self.locks.hold(job_id):
            job = self._get_job(job_id)

            if decision == ReviewDecision.APPROVE:
                until = self.clock() + timedelta(days=self.policy.duration_days)
                updated = self.lifecycle_engine.transition(
                    job, JobStatus.ACTIVE, notes or DEFAULT_APPROVAL_NOTES
                )
                updated = self.lifecycle_engine.grant_promotion(updated, kind, until)
            else:
                updated = self.lifecycle_engine.review_rejection(job, notes or DEFAULT_REJECTION_NOTES)

            saved_job = self.job_repository.save(updated)

        logger.info(f"Review of {kind.value} job {job_id}: {decision.value} (actor {actor_id})")

        notified = False
        if decision == ReviewDecision.REJECT:
            notified = self.notification_service.send_promotion_rejection(saved_job, kind, notes)
        return ApprovalResult(job=saved_job, notified=notified)

    def _get_pending_request(self, request_id: str) -> PromotionRequest:
        request = self.request_repository.get_by_id(request_id)
        if not request:
            raise NotFound("Promotion request", request_id)
        if not request.is_pending:
            raise AlreadyProcessed(request.id, RequestStatus(request.status).value)
        return request

    def _get_job(self, job_id: str) -> Job:
        job = self.job_repository.get_by_id(job_id)
        if not job:
            raise NotFound("Job", job_id)
        return job

    def _find_job_for_notification(self, job_id: str) -> Optional[Job]:
        try:
            job = self.job_repository.get_by_id(job_id)
        except StorePersistenceError as error:
            logger.error(f"Could not load job {job_id} for rejection notice: {error}")
            return None
        if job is None:
            logger.warning(f"Job {job_id} no longer exists; rejection notice not sent")
        return job

    def _warn_on_duplicate_requests(self, request: PromotionRequest) -> None:
        siblings = self.request_repository.query(
            status=RequestStatus.PENDING,
            kind=PromotionKind(request.kind),
            job_id=request.job_id
        )
        duplicates = [r.id for r in siblings if r.id != request.id]
        if duplicates:
            logger.warning(
                f"Job {request.job_id} has other pending {PromotionKind(request.kind).value} "
                f"requests {duplicates}; only {request.id} is processed"
            )
