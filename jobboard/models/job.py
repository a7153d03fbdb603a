"""Pydantic models for job postings and their promotion windows."""

from pydantic import BaseModel, field_validator
from typing import Any, Optional
from datetime import datetime, timezone
from enum import Enum


class JobStatus(str, Enum):
    """Stored moderation status of a job posting."""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"
    FEATURED = "featured"


class PromotionKind(str, Enum):
    """Time-boxed promotion axis of a job posting."""
    FEATURED = "featured"
    FREELANCE = "freelance"

    @property
    def flag_field(self) -> str:
        return f"is_{self.value}"

    @property
    def until_field(self) -> str:
        return f"{self.value}_until"


def blank_to_none(value: Any) -> Any:
    """Empty strings from the store mean no timestamp."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Make a parsed timestamp timezone-aware UTC.

    Naive values (including date-only ``YYYY-MM-DD`` columns, parsed as
    midnight) are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Job(BaseModel):
    """Represents a job posting on the board.

    Attributes:
        id: Unique job identifier (UUID from database).
        employer_id: ID of the employer that owns this posting.
        title: Job title shown to seekers and used in notifications.
        job_type: Free-form employment type (full-time, freelance, ...).
        status: Stored moderation status.
        is_featured: Whether a featured promotion is attached.
        featured_until: End of the featured promotion window.
        is_freelance: Whether a freelance promotion is attached.
        freelance_until: End of the freelance promotion window.
        deadline: Application deadline.
        admin_notes: Audit text of the last moderation decision.
        created_at: When this job was created.
        updated_at: Last update timestamp.
    """
    id: str
    employer_id: str
    title: str = ""
    job_type: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    is_featured: bool = False
    featured_until: Optional[datetime] = None
    is_freelance: bool = False
    freelance_until: Optional[datetime] = None
    deadline: Optional[datetime] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator(
        "featured_until", "freelance_until", "deadline", "created_at", "updated_at",
        mode="before",
    )
    @classmethod
    def blank_timestamps(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("featured_until", "freelance_until", "deadline", "created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @field_validator("is_featured", "is_freelance", mode="before")
    @classmethod
    def null_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def has_promotion(self, kind: PromotionKind) -> bool:
        return bool(getattr(self, kind.flag_field))

    def promotion_until(self, kind: PromotionKind) -> Optional[datetime]:
        return getattr(self, kind.until_field)

    def holds_window(self, kind: PromotionKind, now: datetime) -> bool:
        """Whether a promotion of this kind has a window still running at now."""
        until = self.promotion_until(kind)
        return self.has_promotion(kind) and until is not None and until > now

    def promotion_fields(self) -> dict:
        """Snapshot of the four promotion columns."""
        return {
            "is_featured": self.is_featured,
            "featured_until": self.featured_until,
            "is_freelance": self.is_freelance,
            "freelance_until": self.freelance_until,
        }
