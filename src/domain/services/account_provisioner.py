"""Account provisioner contract.

Implementations wrap an external identity provider. They report every
outcome through ``ProvisioningStatus`` and never raise for provider-side
failures.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol
from uuid import UUID

from domain.entities.acceptance import ProvisionedSession


class ProvisioningStatus(StrEnum):
    """Outcome of an account creation attempt."""

    CREATED = "created"
    CONFIRMATION_REQUIRED = "confirmation_required"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    FAILED = "failed"


@dataclass(frozen=True)
class ProvisioningResult:
    status: ProvisioningStatus
    user_id: UUID | None = None
    session: ProvisionedSession | None = None
    detail: str | None = None


class IAccountProvisioner(Protocol):
    """Creates accounts for invitees that are not signed in."""

    async def create_account(
        self,
        email: str,
        credential: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> ProvisioningResult:
        """Create an account for ``email`` protected by ``credential``."""
        ...
