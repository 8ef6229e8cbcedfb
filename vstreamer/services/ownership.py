"""Owner-only mutation checks shared by videos and comments."""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status


def authorize_mutation(actor_id: Any, owner_id: Any) -> bool:
    """Return True when ``actor_id`` is the identity recorded as the owner."""

    if actor_id is None or owner_id is None:
        return False
    return str(actor_id) == str(owner_id)


def ensure_owner(actor_id: Any, owner_id: Any, *, resource: str, action: str = "modify") -> None:
    """Raise 403 unless the actor owns the resource."""

    if not authorize_mutation(actor_id, owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not allowed to {action} this {resource}",
        )


__all__ = ["authorize_mutation", "ensure_owner"]
