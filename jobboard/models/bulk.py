"""Pydantic models for bulk job actions and their per-item report."""

from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Optional, Union
from enum import Enum

from jobboard.models.job import JobStatus


class StatusChange(BaseModel):
    """Move every selected job to the given moderation status."""
    type: Literal["status_change"] = "status_change"
    status: JobStatus


class SetFreelance(BaseModel):
    """Grant or remove the freelance promotion."""
    type: Literal["set_freelance"] = "set_freelance"
    enabled: bool = True


class SetFeatured(BaseModel):
    """Grant or remove the featured promotion."""
    type: Literal["set_featured"] = "set_featured"
    enabled: bool = True


class DeleteJobs(BaseModel):
    """Permanently delete every selected job."""
    type: Literal["delete"] = "delete"


BulkAction = Annotated[
    Union[StatusChange, SetFreelance, SetFeatured, DeleteJobs],
    Field(discriminator="type"),
]


class OutcomeResult(str, Enum):
    """Result of applying a bulk action to one job."""
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class BulkItemOutcome(BaseModel):
    """Outcome for a single job id.

    Attributes:
        result: applied, skipped or failed.
        reason: Why the item was skipped, or the failure message.
        error_type: Exception class name for failed items.
    """
    result: OutcomeResult
    reason: Optional[str] = None
    error_type: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @classmethod
    def applied(cls) -> "BulkItemOutcome":
        return cls(result=OutcomeResult.APPLIED)

    @classmethod
    def skipped(cls, reason: str) -> "BulkItemOutcome":
        return cls(result=OutcomeResult.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: Exception) -> "BulkItemOutcome":
        return cls(result=OutcomeResult.FAILED, reason=str(error), error_type=type(error).__name__)


class BulkReport(BaseModel):
    """Aggregate report of a bulk action.

    Attributes:
        action: Action type that was applied.
        outcomes: Outcome per job id.
        notifications_sent: Notifications successfully dispatched.
    """
    action: str
    outcomes: Dict[str, BulkItemOutcome] = {}
    notifications_sent: int = 0

    def _ids_with(self, result: OutcomeResult) -> List[str]:
        return [job_id for job_id, outcome in self.outcomes.items() if outcome.result == result]

    @property
    def applied_ids(self) -> List[str]:
        return self._ids_with(OutcomeResult.APPLIED)

    @property
    def skipped_ids(self) -> List[str]:
        return self._ids_with(OutcomeResult.SKIPPED)

    @property
    def failed_ids(self) -> List[str]:
        """Ids a caller may re-submit; the coordinator never retries itself."""
        return self._ids_with(OutcomeResult.FAILED)
