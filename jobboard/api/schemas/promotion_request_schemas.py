"""Request schemas for promotion request review endpoints."""

from pydantic import BaseModel
from typing import Optional


class ApproveRequest(BaseModel):
    """Request model for approving a promotion request."""
    notes: Optional[str] = None


class RejectRequest(BaseModel):
    """Request model for rejecting a promotion request."""
    reason: str
