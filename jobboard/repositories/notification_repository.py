"""Repository for employer notifications stored in Supabase."""

from datetime import datetime, timezone
from typing import Dict, Any, Optional

from supabase import Client

from jobboard.constants import NOTIFICATIONS_TABLE
from jobboard.exceptions import NotificationDeliveryError


class NotificationRepository:
    """Stores in-app notifications for employers.

    Attributes:
        db_client: Supabase client instance for database operations.
    """

    def __init__(self, db_client: Client):
        """Initialize the repository with a database client.

        Args:
            db_client: Supabase client instance.
        """
        self.db_client = db_client

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        job_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Insert a notification row for a user.

        Args:
            user_id: Recipient user (employer) ID.
            title: Short notification title.
            message: Notification body.
            job_id: Job the notification refers to.

        Returns:
            Inserted notification record.

        Raises:
            NotificationDeliveryError: If the insert fails.
        """
        notification = {
            "user_id": user_id,
            "job_id": job_id,
            "title": title,
            "message": message,
            "is_read": False,
            "created_at": datetime.now(timezone.utc).isoformat()
        }

        try:
            response = self.db_client.table(NOTIFICATIONS_TABLE).insert(notification).execute()
            return response.data[0] if response.data else notification
        except Exception as error:
            raise NotificationDeliveryError(f"Failed to create notification: {str(error)}") from error
