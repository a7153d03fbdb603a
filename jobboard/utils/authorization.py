"""Authorization capability checks for administrative actions."""

from typing import Callable, Optional

from jobboard.exceptions import PermissionDenied

Authorizer = Callable[[Optional[str]], bool]


def deny_all(actor_id: Optional[str]) -> bool:
    """Default capability: nobody may moderate until one is injected."""
    return False


def ensure_can_moderate(can_approve: Authorizer, actor_id: Optional[str]) -> None:
    """Raise PermissionDenied unless the capability accepts the actor."""
    if not can_approve(actor_id):
        raise PermissionDenied(actor_id)
