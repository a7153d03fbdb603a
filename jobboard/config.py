"""Centralized configuration for the job moderation service."""

import logging
import os
from typing import Callable, FrozenSet, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from jobboard.constants import (
    DEFAULT_PROMOTION_DURATION_DAYS,
    DEFAULT_PROMOTION_EXTENSION_DAYS,
)

load_dotenv()

SUPABASE_URL = os.environ.get("SUPABASE_URL")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class PromotionPolicy(BaseModel):
    """Time-box policy for featured and freelance promotions.

    Attributes:
        duration_days: Length of a newly granted promotion window.
        extension_days: Default number of days added by an extension.
    """
    duration_days: int = DEFAULT_PROMOTION_DURATION_DAYS
    extension_days: int = DEFAULT_PROMOTION_EXTENSION_DAYS

    @field_validator("duration_days", "extension_days")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("promotion days must be a positive integer")
        return value


def load_promotion_policy() -> PromotionPolicy:
    """Build the promotion policy from environment variables.

    Returns:
        PromotionPolicy populated from PROMOTION_DURATION_DAYS and
        PROMOTION_EXTENSION_DAYS, falling back to the defaults.
    """
    return PromotionPolicy(
        duration_days=int(os.getenv("PROMOTION_DURATION_DAYS", str(DEFAULT_PROMOTION_DURATION_DAYS))),
        extension_days=int(os.getenv("PROMOTION_EXTENSION_DAYS", str(DEFAULT_PROMOTION_EXTENSION_DAYS))),
    )


def load_admin_user_ids(raw: Optional[str] = None) -> FrozenSet[str]:
    """Parse the comma separated ADMIN_USER_IDS allow-list."""
    if raw is None:
        raw = os.getenv("ADMIN_USER_IDS", "")
    return frozenset(chunk.strip() for chunk in raw.split(",") if chunk.strip())


def allow_list_authorizer(admin_user_ids: FrozenSet[str]) -> Callable[[Optional[str]], bool]:
    """Return a can_approve capability backed by a fixed set of actor ids."""
    def can_approve(actor_id: Optional[str]) -> bool:
        return bool(actor_id) and actor_id in admin_user_ids

    return can_approve


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install the service log format on the root logger.

    Args:
        level: Logging level name (e.g. "INFO", "DEBUG").
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Avoid duplicate handlers if logging already configured
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        root_logger.addHandler(handler)
