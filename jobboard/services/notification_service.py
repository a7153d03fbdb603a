"""Best-effort employer notifications for moderation outcomes."""

import logging
from typing import Optional

from jobboard.exceptions import NotificationDeliveryError
from jobboard.models.job import Job, PromotionKind
from jobboard.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Formats and dispatches notifications without ever failing the caller.

    Every send runs after the triggering mutation has been persisted.
    Delivery errors are logged and reported as False.

    Attributes:
        notification_repository: Port that stores or sends notifications.
    """

    def __init__(self, notification_repository: NotificationRepository):
        """Initialize the service with a notification port.

        Args:
            notification_repository: NotificationRepository (or compatible) instance.
        """
        self.notification_repository = notification_repository

    def notify(
        self,
        user_id: Optional[str],
        title: str,
        message: str,
        job_id: Optional[str] = None
    ) -> bool:
        """Dispatch a notification.

        Returns:
            True if the port accepted the notification, False otherwise.
        """
        if not user_id:
            logger.warning(f"Skipping notification '{title}' for job {job_id}: no recipient")
            return False

        try:
            self.notification_repository.create(user_id, title, message, job_id)
        except NotificationDeliveryError as error:
            logger.error(f"Notification '{title}' to {user_id} failed: {error}")
            return False
        except Exception as error:
            logger.exception(f"Unexpected error sending notification '{title}' to {user_id}: {error}")
            return False

        logger.info(f"Notification '{title}' sent to {user_id} for job {job_id}")
        return True

    def send_promotion_rejection(
        self,
        job: Job,
        kind: PromotionKind,
        reason: Optional[str] = None
    ) -> bool:
        """Tell the employer their featured/freelance job was rejected."""
        label = PromotionKind(kind).value
        message = f'Your {label} job "{job.title}" has been rejected by admin.'
        if reason:
            message += f" Reason: {reason}"
        return self.notify(job.employer_id, f"{label.capitalize()} Job Rejected", message, job.id)

    def send_job_rejection(self, job: Job, reason: Optional[str] = None) -> bool:
        """Tell the employer their job posting was rejected by moderation."""
        message = (
            f'Your job posting "{job.title}" has been rejected by admin. '
            "Please review your job posting and make necessary improvements before resubmitting."
        )
        if reason:
            message += f" Reason: {reason}"
        return self.notify(job.employer_id, "Job Rejected", message, job.id)
