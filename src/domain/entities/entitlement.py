"""Entitlement domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class Entitlement:
    """A grant of one product to one account within one organization.

    At most one row exists per ``(user_id, product_id)``; granting again
    refreshes ``granted_by``, ``granted_at`` and reactivates it.
    """

    user_id: UUID
    product_id: str
    organization_id: UUID
    granted_by: UUID | None = None
    granted_at: datetime = field(default_factory=datetime.utcnow)
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
