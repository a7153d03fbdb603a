"""Request and response schemas for job moderation endpoints."""

from pydantic import BaseModel
from typing import List, Optional

from jobboard.models.bulk import BulkAction
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.models.promotion import PromotionState
from jobboard.models.promotion_request import ReviewDecision


class ChangeStatusRequest(BaseModel):
    """Request model for changing a job's moderation status."""
    status: JobStatus
    notes: Optional[str] = None
    reason: Optional[str] = None


class ExtendPromotionRequest(BaseModel):
    """Request model for extending a featured or freelance window."""
    kind: PromotionKind
    days: Optional[int] = None


class ReviewJobRequest(BaseModel):
    """Request model for the combined job and promotion review."""
    decision: ReviewDecision
    kind: PromotionKind
    notes: Optional[str] = None


class BulkActionRequest(BaseModel):
    """Request model for applying one action to many jobs."""
    job_ids: List[str]
    action: BulkAction
    reason: Optional[str] = None


class JobResponse(BaseModel):
    """Job as stored together with its computed promotion state."""
    job: Job
    promotion: PromotionState
