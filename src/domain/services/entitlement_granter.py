"""Claiming invitations and granting the products they carry."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    InvitationAlreadyClaimedError,
    InvitationCodeConflictError,
    InvitationExpiredError,
    InvitationInvalidError,
    InvitationNotFoundError,
)
from domain.entities.acceptance import GrantResult
from domain.entities.entitlement import Entitlement
from domain.entities.invitation import Invitation, InvitationStatus, normalize_code
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class EntitlementGranter:
    """The only component that mutates invitations or entitlements on acceptance.

    Work happens in two independently committed steps:

    1. claim: a conditional update moves the invitation from pending to
       accepted. Only one caller can win it.
    2. grant: one entitlement upsert per product.

    A crash between the two heals on retry with the same user: the claim
    is then recognised as "already accepted by me" and the grants re-run.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def grant_and_accept(self, code: str, user_id: UUID) -> GrantResult:
        """Accept the invitation for ``user_id`` and grant its products.

        Safe to call any number of times with the same arguments.

        Raises:
            InvitationNotFoundError: If no invitation carries the code.
            InvitationExpiredError: If the invitation is past its expiry.
            InvitationInvalidError: If it was revoked or its organization is gone.
            InvitationAlreadyClaimedError: If a different user accepted it.
        """
        code = normalize_code(code)
        now = self._clock()

        async with self._uow_factory() as uow:
            invitation = await self._get_single(uow, code)

            if invitation.is_expired_at(now):
                raise InvitationExpiredError(code)

            if await uow.organizations.get(invitation.organization_id) is None:
                raise InvitationInvalidError(code, "organization_not_found")

            claimed = await uow.invitations.claim(invitation.id, user_id, now)
            await uow.commit()

            if claimed:
                logger.info(
                    "invitation_claimed",
                    code=code,
                    kind=invitation.kind.value,
                    user_id=str(user_id),
                )
            else:
                current = await uow.invitations.get_by_id(invitation.id)
                self._ensure_accepted_by(current, code, user_id, now)
                logger.info(
                    "invitation_already_accepted_by_self",
                    code=code,
                    user_id=str(user_id),
                )

            products = invitation.products
            for product_id in products:
                await uow.entitlements.upsert(
                    Entitlement(
                        user_id=user_id,
                        product_id=product_id,
                        organization_id=invitation.organization_id,
                        granted_by=invitation.created_by,
                        granted_at=now,
                        is_active=True,
                    )
                )
            await uow.commit()

        logger.info(
            "entitlements_granted",
            code=code,
            user_id=str(user_id),
            organization_id=str(invitation.organization_id),
            products=products,
        )
        return GrantResult(
            code=code,
            kind=invitation.kind,
            organization_id=invitation.organization_id,
            user_id=user_id,
            granted_products=products,
            already_accepted=not claimed,
        )

    async def _get_single(self, uow: IUnitOfWork, code: str) -> Invitation:
        matches = await uow.invitations.find_by_code(code)
        if not matches:
            raise InvitationNotFoundError(code)
        if len(matches) > 1:
            kinds = sorted(inv.kind.value for inv in matches)
            logger.error("invitation_code_conflict", code=code, kinds=kinds)
            raise InvitationCodeConflictError(code, kinds)
        return matches[0]

    def _ensure_accepted_by(
        self,
        invitation: Invitation | None,
        code: str,
        user_id: UUID,
        now: datetime,
    ) -> None:
        """Explain a lost claim. Returns only if ``user_id`` already holds it."""
        if invitation is None:
            raise InvitationNotFoundError(code)
        if invitation.is_expired_at(now) or invitation.status == InvitationStatus.EXPIRED:
            raise InvitationExpiredError(code)
        if invitation.status == InvitationStatus.REVOKED:
            raise InvitationInvalidError(code, "revoked")
        if invitation.status == InvitationStatus.ACCEPTED:
            if invitation.accepted_by == user_id:
                return
            logger.warning(
                "invitation_claimed_by_other",
                code=code,
                user_id=str(user_id),
            )
            raise InvitationAlreadyClaimedError(code)
        raise InvitationInvalidError(code, "not_claimable")
