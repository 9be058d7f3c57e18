"""Invitation code validation."""

from collections.abc import Callable
from datetime import datetime

import structlog

from core.exceptions import InvitationCodeConflictError, InvitationNotFoundError
from domain.entities.acceptance import ValidatedInvitation
from domain.entities.invitation import normalize_code
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class InvitationValidator:
    """Look up an invitation code across both invitation kinds.

    Never mutates anything. A stored ``pending`` status is reported as-is even
    when the expiry has passed; ``is_expired`` carries the computed overlay.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def validate(self, code: str) -> ValidatedInvitation:
        """Validate an invitation code.

        Raises:
            InvitationNotFoundError: If no invitation carries the code.
            InvitationCodeConflictError: If the code exists for more than one kind.
        """
        code = normalize_code(code)
        if not code:
            raise InvitationNotFoundError()

        async with self._uow_factory() as uow:
            matches = await uow.invitations.find_by_code(code)

            if not matches:
                logger.info("invitation_not_found", code=code)
                raise InvitationNotFoundError(code)

            if len(matches) > 1:
                kinds = sorted(inv.kind.value for inv in matches)
                logger.error("invitation_code_conflict", code=code, kinds=kinds)
                raise InvitationCodeConflictError(code, kinds)

            invitation = matches[0]
            organization = await uow.organizations.get(invitation.organization_id)

        return ValidatedInvitation(
            code=invitation.code,
            kind=invitation.kind,
            status=invitation.status,
            organization_id=invitation.organization_id,
            requested_products=invitation.products,
            identity_hint=invitation.identity_hint,
            expires_at=invitation.expires_at,
            is_expired=invitation.is_expired_at(self._clock()),
            organization_exists=organization is not None,
            accepted_by=invitation.accepted_by,
        )
