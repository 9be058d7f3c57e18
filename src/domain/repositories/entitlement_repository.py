"""Entitlement repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.entitlement import Entitlement


class IEntitlementRepository(Protocol):
    """Repository interface for Entitlement entities."""

    async def upsert(self, entitlement: Entitlement) -> Entitlement:
        """Insert, or refresh the existing row for the same user and product."""
        ...

    async def list_for_user(
        self,
        user_id: UUID,
        organization_id: UUID | None = None,
        active_only: bool = True,
    ) -> list[Entitlement]:
        """Get entitlements held by a user."""
        ...
