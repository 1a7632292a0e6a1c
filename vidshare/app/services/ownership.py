"""
Ownership checks for owner-only mutations.

"Not found" (404) and "found but not owned" (403) are reported separately.
"""
import uuid
from typing import Any, Optional

from ..exceptions import NotFound, PermissionDenied


def can_mutate(actor_id: uuid.UUID, entity: Any) -> bool:
    """True iff ``entity`` is owned by ``actor_id``."""
    if entity is None or actor_id is None:
        return False
    return getattr(entity, "owner_id", None) == actor_id


def ensure_can_mutate(actor_id: uuid.UUID, entity: Optional[Any], noun: str, action: str = "modify") -> Any:
    """Return ``entity`` if the actor owns it, otherwise raise."""
    if entity is None:
        raise NotFound(f"{noun.capitalize()} not found")
    if not can_mutate(actor_id, entity):
        raise PermissionDenied(f"You can only {action} your own {noun}s")
    return entity
