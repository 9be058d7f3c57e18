"""Invitation repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        ...

    async def find_by_code(self, code: str) -> list[Invitation]:
        """Get every invitation, of any kind, carrying ``code``."""
        ...

    async def claim(self, id: UUID, user_id: UUID, now: datetime) -> bool:
        """Move a pending, unexpired invitation to accepted.

        Returns True only for the single caller whose update applied.
        """
        ...

    async def expire_pending(self, now: datetime) -> int:
        """Mark pending invitations past expiry as expired. Returns count of updated rows."""
        ...
