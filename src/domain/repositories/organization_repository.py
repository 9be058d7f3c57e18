"""Organization repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.organization import Organization


class IOrganizationRepository(Protocol):
    """Read-only access to tenants."""

    async def get(self, id: UUID) -> Organization | None:
        """Get an organization by ID."""
        ...

    async def create(self, organization: Organization) -> Organization:
        """Create an organization."""
        ...
