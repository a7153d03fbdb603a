"""Pydantic models for payment-backed promotion requests."""

from pydantic import BaseModel, field_validator
from typing import Any, Optional
from datetime import datetime
from enum import Enum

from jobboard.constants import DEFAULT_CURRENCY
from jobboard.models.job import Job, PromotionKind, blank_to_none, ensure_utc


class RequestStatus(str, Enum):
    """Review status of a promotion request."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PromotionRequest(BaseModel):
    """An employer's paid request to promote one of their jobs.

    Attributes:
        id: Unique request identifier (UUID from database).
        job_id: Job the promotion is requested for.
        employer_id: Employer who submitted the payment evidence.
        kind: Requested promotion (featured or freelance).
        amount: Amount paid.
        currency: Currency code of the payment.
        transaction_reference: Gateway or bank transaction reference.
        payment_screenshot_url: Optional uploaded proof of payment.
        status: Review status.
        submitted_at: When the employer submitted the request.
        processed_at: When an admin approved or rejected it.
        processed_by: Admin who processed it.
        admin_notes: Decision notes (rejection reason).
    """
    id: str
    job_id: str
    employer_id: str
    kind: PromotionKind = PromotionKind.FEATURED
    amount: float = 0.0
    currency: str = DEFAULT_CURRENCY
    transaction_reference: str = ""
    payment_screenshot_url: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    submitted_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    admin_notes: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("submitted_at", "processed_at", mode="before")
    @classmethod
    def blank_timestamps(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("submitted_at", "processed_at")
    @classmethod
    def timestamps_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def is_pending(self) -> bool:
        return RequestStatus(self.status) == RequestStatus.PENDING

    @property
    def has_payment_evidence(self) -> bool:
        return bool(self.transaction_reference or self.payment_screenshot_url)


class ReviewDecision(str, Enum):
    """Admin decision on a job under first-time promotion review."""
    APPROVE = "approve"
    REJECT = "reject"


class ApprovalResult(BaseModel):
    """Outcome of an approval workflow operation.

    Attributes:
        request: The processed promotion request, when one was involved.
        job: The job as stored after the decision, if it could be loaded.
        notified: Whether the employer notification was dispatched.
    """
    request: Optional[PromotionRequest] = None
    job: Optional[Job] = None
    notified: bool = False
