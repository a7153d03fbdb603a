"""Repository for job data access operations."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from supabase import Client

from jobboard.constants import JOBS_TABLE
from jobboard.models.job import Job, JobStatus
from jobboard.repositories.base_repository import BaseRepository

# Columns owned by the moderation workflows; employer-edited columns are never written.
MODERATION_COLUMNS = (
    "status",
    "is_featured",
    "featured_until",
    "is_freelance",
    "freelance_until",
    "admin_notes",
)


def job_to_row(job: Job) -> Dict[str, Any]:
    """Serialize the moderation columns of a job for the database.

    Args:
        job: Job to serialize.

    Returns:
        Dictionary of column values with ISO formatted timestamps.
    """
    data = job.model_dump(mode="json", include=set(MODERATION_COLUMNS))
    data["updated_at"] = datetime.now(timezone.utc).isoformat()
    return data


class JobRepository(BaseRepository):
    """Repository for managing job data persistence.

    Attributes:
        db_client: Supabase client instance for database operations.
        table_name: Set to "jobs" for this repository.
    """

    def __init__(self, db_client: Client):
        """Initialize the repository with a database client.

        Args:
            db_client: Supabase client instance.
        """
        super().__init__(db_client, JOBS_TABLE, "Job")

    def get_by_id(self, job_id: str) -> Optional[Job]:
        """Retrieve a job by its ID.

        Args:
            job_id: The unique identifier of the job.

        Returns:
            Job if found, None otherwise.
        """
        row = self.get_row(job_id)
        return Job(**row) if row else None

    def save(self, job: Job) -> Job:
        """Persist the moderation state of an existing job.

        The write is a single-row update, so it is atomic on the database side.

        Args:
            job: Job carrying the new state.

        Returns:
            Job as stored after the update.

        Raises:
            NotFound: If the job no longer exists.
            StorePersistenceError: If the update fails.
        """
        row = self.update_row(job.id, job_to_row(job))
        return Job(**row)

    def query(
        self,
        status: Optional[JobStatus] = None,
        employer_id: Optional[str] = None,
        promoted_only: bool = False,
        job_ids: Optional[List[str]] = None,
        updated_since: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[Job]:
        """Retrieve jobs matching the given filters.

        Args:
            status: Optional stored status filter.
            employer_id: Optional owning employer filter.
            promoted_only: Only jobs with a featured or freelance flag set.
            job_ids: Optional explicit id set.
            updated_since: Only jobs updated at or after this instant.
            limit: Optional maximum number of rows.

        Returns:
            List of jobs, newest first.
        """
        query = self.db_client.table(self.table_name).select("*")

        if status:
            query = query.eq("status", JobStatus(status).value)
        if employer_id:
            query = query.eq("employer_id", employer_id)
        if promoted_only:
            query = query.or_("is_featured.eq.true,is_freelance.eq.true")
        if job_ids:
            query = query.in_("id", list(job_ids))
        if updated_since:
            query = query.gte("updated_at", updated_since.isoformat())

        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)

        return [Job(**row) for row in self.run_query(query)]

    def delete(self, job_id: str) -> bool:
        """Permanently delete a job.

        Args:
            job_id: The unique identifier of the job.

        Returns:
            True if deletion was successful.

        Raises:
            NotFound: If the job does not exist.
        """
        return self.delete_row(job_id)
