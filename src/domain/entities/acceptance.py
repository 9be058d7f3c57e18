"""Value objects produced while accepting an invitation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from domain.entities.invitation import IdentityHint, InvitationKind, InvitationStatus


@dataclass(frozen=True)
class ValidatedInvitation:
    """Read-only view of an invitation as found by the validator.

    ``status`` is the stored status; ``is_expired`` is computed from
    ``expires_at`` so a lazily expired row can be told apart from a revoked one.
    """

    code: str
    kind: InvitationKind
    status: InvitationStatus
    organization_id: UUID
    requested_products: list[str]
    identity_hint: IdentityHint | None
    expires_at: datetime
    is_expired: bool
    organization_exists: bool = True
    accepted_by: UUID | None = None


# --- Identity decisions ---


@dataclass(frozen=True)
class SignUpRequired:
    """No session: an account has to be created for ``email``."""

    email: str
    name: str


@dataclass(frozen=True)
class SignInRequired:
    """No session, and the invitation was already accepted by some account."""


@dataclass(frozen=True)
class AlreadySatisfied:
    """The caller is signed in; grant to ``user_id``."""

    user_id: UUID
    fully_entitled: bool = False


IdentityDecision = SignUpRequired | SignInRequired | AlreadySatisfied


# --- Results ---


@dataclass(frozen=True)
class GrantResult:
    """Outcome of ``grant_and_accept``."""

    code: str
    kind: InvitationKind
    organization_id: UUID
    user_id: UUID
    granted_products: list[str]
    already_accepted: bool = False


class AcceptanceOutcome(StrEnum):
    """Terminal, non-error outcomes of an acceptance attempt."""

    ACCEPTED = "accepted"
    ALREADY_ACCEPTED_BY_SELF = "already_accepted_by_self"
    DEFERRED_COMPLETION = "deferred_completion"
    SIGN_IN_REQUIRED = "sign_in_required"


class DeferredReason(StrEnum):
    """Why the account side of an acceptance could not finish synchronously."""

    CONFIRMATION_REQUIRED = "confirmation_required"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"


@dataclass(frozen=True)
class ProvisionedSession:
    """Session handed back by the identity provider for a new account."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


@dataclass(frozen=True)
class AcceptanceResult:
    """What the caller of an acceptance operation gets back."""

    outcome: AcceptanceOutcome
    invitation_code: str
    kind: InvitationKind
    organization_id: UUID
    message: str
    user_id: UUID | None = None
    email: str | None = None
    granted_products: list[str] = field(default_factory=list)
    deferred_reason: DeferredReason | None = None
    session: ProvisionedSession | None = None
