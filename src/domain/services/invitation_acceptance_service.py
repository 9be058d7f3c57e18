"""End-to-end invitation acceptance."""

import secrets
from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    InvitationExpiredError,
    InvitationInvalidError,
    ProvisioningFailedError,
)
from domain.entities.acceptance import (
    AcceptanceOutcome,
    AcceptanceResult,
    AlreadySatisfied,
    DeferredReason,
    GrantResult,
    ProvisionedSession,
    SignInRequired,
    SignUpRequired,
    ValidatedInvitation,
)
from domain.entities.invitation import InvitationStatus
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.account_provisioner import IAccountProvisioner, ProvisioningStatus
from domain.services.entitlement_granter import EntitlementGranter
from domain.services.identity_resolver import IdentityResolver
from domain.services.invitation_validator import InvitationValidator

logger = structlog.get_logger()

_DEFERRED_MESSAGES = {
    DeferredReason.CONFIRMATION_REQUIRED: (
        "Account created. Confirm your email, then sign in to finish accepting the invitation."
    ),
    DeferredReason.EMAIL_ALREADY_REGISTERED: (
        "An account already exists for this email. Sign in to finish accepting the invitation."
    ),
}


def generate_credential() -> str:
    """Single-use credential for an auto-created account."""
    return secrets.token_urlsafe(24)


class InvitationAcceptanceService:
    """Sequences validation, identity resolution, provisioning and granting."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        validator: InvitationValidator,
        resolver: IdentityResolver,
        granter: EntitlementGranter,
        provisioner: IAccountProvisioner,
        credential_factory: Callable[[], str] = generate_credential,
    ) -> None:
        self._uow_factory = uow_factory
        self._validator = validator
        self._resolver = resolver
        self._granter = granter
        self._provisioner = provisioner
        self._credential_factory = credential_factory

    async def accept_invitation(
        self, code: str, user_id: UUID | None = None
    ) -> AcceptanceResult:
        """Accept an invitation, creating an account when the caller has none.

        Args:
            code: The invitation code as scanned or typed.
            user_id: The signed-in caller, if any.

        Raises:
            InvitationNotFoundError: If the code is unknown.
            InvitationInvalidError: If the invitation was revoked or its organization is gone.
            InvitationExpiredError: If the invitation has expired.
            InvitationAlreadyClaimedError: If another account accepted it.
            ProvisioningFailedError: If the identity provider failed. Retryable.
        """
        invitation = await self._validator.validate(code)
        self._ensure_usable(invitation)

        held: list[str] = []
        if user_id is not None:
            held = await self._held_products(user_id, invitation.organization_id)

        decision = self._resolver.resolve(invitation, user_id, held)

        if isinstance(decision, AlreadySatisfied):
            grant = await self._granter.grant_and_accept(invitation.code, decision.user_id)
            return self._granted(grant)

        if isinstance(decision, SignInRequired):
            return AcceptanceResult(
                outcome=AcceptanceOutcome.SIGN_IN_REQUIRED,
                invitation_code=invitation.code,
                kind=invitation.kind,
                organization_id=invitation.organization_id,
                message="This invitation has already been accepted. Sign in to continue.",
            )

        return await self._sign_up_and_grant(invitation, decision)

    async def complete_after_auth(self, code: str, user_id: UUID) -> AcceptanceResult:
        """Finish an acceptance that was deferred until the caller signed in."""
        grant = await self._granter.grant_and_accept(code, user_id)
        return self._granted(grant)

    async def _sign_up_and_grant(
        self, invitation: ValidatedInvitation, decision: SignUpRequired
    ) -> AcceptanceResult:
        result = await self._provisioner.create_account(
            email=decision.email,
            credential=self._credential_factory(),
            name=decision.name,
            metadata={"full_name": decision.name, "invitation_code": invitation.code},
        )

        if result.status == ProvisioningStatus.CREATED and result.user_id is not None:
            grant = await self._granter.grant_and_accept(invitation.code, result.user_id)
            return self._granted(grant, email=decision.email, session=result.session)

        if result.status in (
            ProvisioningStatus.CONFIRMATION_REQUIRED,
            ProvisioningStatus.EMAIL_ALREADY_REGISTERED,
        ):
            reason = DeferredReason(result.status.value)
            logger.info(
                "account_provisioning_deferred",
                code=invitation.code,
                reason=reason.value,
            )
            return AcceptanceResult(
                outcome=AcceptanceOutcome.DEFERRED_COMPLETION,
                invitation_code=invitation.code,
                kind=invitation.kind,
                organization_id=invitation.organization_id,
                message=_DEFERRED_MESSAGES[reason],
                user_id=result.user_id,
                email=decision.email,
                deferred_reason=reason,
            )

        # FAILED, or CREATED without a user id
        logger.warning(
            "account_provisioning_failed",
            code=invitation.code,
            status=result.status.value,
            detail=result.detail,
        )
        raise ProvisioningFailedError(result.detail)

    async def _held_products(self, user_id: UUID, organization_id: UUID) -> list[str]:
        async with self._uow_factory() as uow:
            entitlements = await uow.entitlements.list_for_user(
                user_id, organization_id=organization_id, active_only=True
            )
        return [e.product_id for e in entitlements]

    def _ensure_usable(self, invitation: ValidatedInvitation) -> None:
        if invitation.status == InvitationStatus.REVOKED:
            raise InvitationInvalidError(invitation.code, "revoked")
        if not invitation.organization_exists:
            raise InvitationInvalidError(invitation.code, "organization_not_found")
        if invitation.is_expired or invitation.status == InvitationStatus.EXPIRED:
            raise InvitationExpiredError(invitation.code)

    def _granted(
        self,
        grant: GrantResult,
        email: str | None = None,
        session: ProvisionedSession | None = None,
    ) -> AcceptanceResult:
        if grant.already_accepted:
            outcome = AcceptanceOutcome.ALREADY_ACCEPTED_BY_SELF
            message = "Invitation was already accepted by this account"
        else:
            outcome = AcceptanceOutcome.ACCEPTED
            message = "Invitation accepted"
        return AcceptanceResult(
            outcome=outcome,
            invitation_code=grant.code,
            kind=grant.kind,
            organization_id=grant.organization_id,
            message=message,
            user_id=grant.user_id,
            email=email,
            granted_products=grant.granted_products,
            session=session,
        )
