"""Error taxonomy for job moderation and promotion workflows."""

from typing import Optional


class LifecycleError(ValueError):
    """Base class for deterministic validation failures."""


class InvalidTransition(LifecycleError):
    """Raised when a status change is not permitted from the current state."""

    def __init__(self, current: str, requested: str, job_id: Optional[str] = None):
        self.current = current
        self.requested = requested
        self.job_id = job_id
        subject = f"Job {job_id}" if job_id else "Job"
        super().__init__(
            f"Invalid transition: {subject} cannot move from '{current}' to '{requested}'"
        )


class PromotionNotAllowed(LifecycleError):
    """Raised when a promotion cannot be granted or extended in the job's state."""


class AlreadyProcessed(LifecycleError):
    """Raised when a promotion request has already reached a terminal state."""

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(f"Promotion request {request_id} already processed (status: {status})")


class MissingPaymentEvidence(LifecycleError):
    """Raised when a promotion request carries neither a transaction reference nor a screenshot."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Promotion request {request_id} has no payment evidence")


class NotFound(LifecycleError):
    """Raised when a job or promotion request does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class StorePersistenceError(Exception):
    """Wraps failures raised by the underlying store."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class NotificationDeliveryError(Exception):
    """Raised by a notification port when a message could not be stored or sent."""


class PermissionDenied(PermissionError):
    """Raised when the acting user may not perform administrative actions."""

    def __init__(self, actor_id: Optional[str]):
        self.actor_id = actor_id
        super().__init__(f"Actor {actor_id or '<anonymous>'} is not allowed to moderate jobs")
