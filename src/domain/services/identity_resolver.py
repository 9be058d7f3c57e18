"""Decide how the caller's identity is established for an invitation."""

import re
from collections.abc import Iterable
from uuid import UUID

from domain.entities.acceptance import (
    AlreadySatisfied,
    IdentityDecision,
    SignInRequired,
    SignUpRequired,
    ValidatedInvitation,
)
from domain.entities.invitation import InvitationStatus

_LOCAL_PART_INVALID = re.compile(r"[^a-z0-9._+-]+")
_REPEATED_DOTS = re.compile(r"\.{2,}")


class IdentityResolver:
    """Pure decision logic: no network calls and no storage access."""

    def __init__(self, fallback_domain: str, default_name: str) -> None:
        self._fallback_domain = fallback_domain.strip().lstrip("@").lower()
        self._default_name = default_name

    def synthesize_email(self, code: str) -> str:
        """Deterministic placeholder address for invitations without an email.

        Characters not allowed in an address local part become ``-``.
        """
        local = _LOCAL_PART_INVALID.sub("-", code.strip().lower())
        local = _REPEATED_DOTS.sub(".", local).strip(".-") or "invite"
        return f"{local}@{self._fallback_domain}"

    def resolve(
        self,
        invitation: ValidatedInvitation,
        session_user_id: UUID | None = None,
        held_products: Iterable[str] = (),
    ) -> IdentityDecision:
        """Return the identity decision for ``invitation``.

        A signed-in caller is always ``AlreadySatisfied``, whether or not it
        already holds every requested product; granting is idempotent.
        """
        if session_user_id is not None:
            held = set(held_products)
            return AlreadySatisfied(
                user_id=session_user_id,
                fully_entitled=all(p in held for p in invitation.requested_products),
            )

        if invitation.status == InvitationStatus.ACCEPTED:
            return SignInRequired()

        hint = invitation.identity_hint
        email = hint.email if hint and hint.email else self.synthesize_email(invitation.code)
        name = hint.name if hint and hint.name else self._default_name
        return SignUpRequired(email=email, name=name)
