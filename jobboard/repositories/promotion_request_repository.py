"""Repository for promotion request data access operations."""

from datetime import datetime
from typing import Dict, List, Optional, Any

from supabase import Client

from jobboard.constants import PROMOTION_REQUESTS_TABLE
from jobboard.models.job import PromotionKind
from jobboard.models.promotion_request import PromotionRequest, RequestStatus
from jobboard.repositories.base_repository import BaseRepository

# Requests are joined with their job so the kind can be derived from job_type
REQUEST_COLUMNS = "*, jobs(job_type)"

REVIEW_COLUMNS = ("status", "processed_at", "processed_by", "admin_notes")


def row_to_request(row: Dict[str, Any]) -> PromotionRequest:
    """Convert a featured_job_requests row into a PromotionRequest.

    Rows without an explicit kind column are classified from the joined
    job: freelance jobs request the freelance promotion, all others featured.
    """
    data = dict(row)
    job = data.pop("jobs", None) or {}
    if not data.get("kind"):
        is_freelance_job = job.get("job_type") == PromotionKind.FREELANCE.value
        data["kind"] = PromotionKind.FREELANCE.value if is_freelance_job else PromotionKind.FEATURED.value
    return PromotionRequest(**data)


class PromotionRequestRepository(BaseRepository):
    """Repository for managing promotion request persistence.

    Attributes:
        db_client: Supabase client instance for database operations.
        table_name: Set to "featured_job_requests" for this repository.
    """

    def __init__(self, db_client: Client):
        """Initialize the repository with a database client.

        Args:
            db_client: Supabase client instance.
        """
        super().__init__(db_client, PROMOTION_REQUESTS_TABLE, "Promotion request")

    def get_by_id(self, request_id: str) -> Optional[PromotionRequest]:
        """Retrieve a promotion request by its ID.

        Args:
            request_id: The unique identifier of the request.

        Returns:
            PromotionRequest if found, None otherwise.
        """
        row = self.get_row(request_id, REQUEST_COLUMNS)
        return row_to_request(row) if row else None

    def save(self, request: PromotionRequest) -> PromotionRequest:
        """Persist the review outcome of a request.

        Only review columns are written; payment evidence is immutable here.

        Args:
            request: Request carrying the new review state.

        Returns:
            The request as passed in, once the update succeeded.

        Raises:
            NotFound: If the request no longer exists.
            StorePersistenceError: If the update fails.
        """
        updates = request.model_dump(mode="json", include=set(REVIEW_COLUMNS))
        self.update_row(request.id, updates)
        return request

    def query(
        self,
        status: Optional[RequestStatus] = None,
        kind: Optional[PromotionKind] = None,
        job_id: Optional[str] = None,
        employer_id: Optional[str] = None,
        submitted_since: Optional[datetime] = None
    ) -> List[PromotionRequest]:
        """Retrieve promotion requests matching the given filters.

        Args:
            status: Optional review status filter.
            kind: Optional promotion kind filter (applied after loading).
            job_id: Optional job filter.
            employer_id: Optional employer filter.
            submitted_since: Only requests submitted at or after this instant.

        Returns:
            List of requests, newest submission first.
        """
        query = self.db_client.table(self.table_name).select(REQUEST_COLUMNS)

        if status:
            query = query.eq("status", RequestStatus(status).value)
        if job_id:
            query = query.eq("job_id", job_id)
        if employer_id:
            query = query.eq("employer_id", employer_id)
        if submitted_since:
            query = query.gte("submitted_at", submitted_since.isoformat())

        query = query.order("submitted_at", desc=True)
        requests = [row_to_request(row) for row in self.run_query(query)]

        if kind:
            requests = [r for r in requests if PromotionKind(r.kind) == PromotionKind(kind)]
        return requests
