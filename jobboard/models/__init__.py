"""Pydantic models for the job moderation service."""

from jobboard.models.job import JobStatus, PromotionKind, Job
from jobboard.models.promotion_request import (
    RequestStatus,
    PromotionRequest,
    ReviewDecision,
    ApprovalResult
)
from jobboard.models.promotion import DisplayStatus, PromotionState, ReconciliationReport
from jobboard.models.bulk import (
    StatusChange,
    SetFreelance,
    SetFeatured,
    DeleteJobs,
    BulkAction,
    OutcomeResult,
    BulkItemOutcome,
    BulkReport
)

__all__ = [
    "JobStatus",
    "PromotionKind",
    "Job",
    "RequestStatus",
    "PromotionRequest",
    "ReviewDecision",
    "ApprovalResult",
    "DisplayStatus",
    "PromotionState",
    "ReconciliationReport",
    "StatusChange",
    "SetFreelance",
    "SetFeatured",
    "DeleteJobs",
    "BulkAction",
    "OutcomeResult",
    "BulkItemOutcome",
    "BulkReport"
]
