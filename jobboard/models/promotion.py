"""Read models for computed promotion state and reconciliation runs."""

from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum


class DisplayStatus(str, Enum):
    """Status shown to admins: the stored status, or expired when lapsed."""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"
    FEATURED = "featured"
    EXPIRED = "expired"


class PromotionState(BaseModel):
    """Effective visibility of a job at a point in time.

    Attributes:
        effective_featured: Featured badge is live right now.
        effective_freelance: Freelance listing is live right now.
        is_expired: A promotion window or the application deadline has lapsed.
        display_status: Stored status, or expired for a lapsed live job.
        can_extend: Job status allows extending a promotion.
        evaluated_at: The instant the state was computed for.
    """
    effective_featured: bool
    effective_freelance: bool
    is_expired: bool
    display_status: DisplayStatus
    can_extend: bool
    evaluated_at: datetime

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class ReconciliationReport(BaseModel):
    """Result of persisting detected promotion expiry.

    Attributes:
        checked: Number of promoted jobs inspected.
        demoted_ids: Jobs whose expired promotion fields were cleared.
        failed: Errors per job id for jobs that could not be saved.
        run_at: The instant expiry was evaluated against.
    """
    checked: int = 0
    demoted_ids: List[str] = []
    failed: Dict[str, str] = {}
    run_at: Optional[datetime] = None
