"""Unit tests for IdentityResolver."""

from datetime import timedelta
from uuid import uuid4

import pytest

from domain.entities.acceptance import (
    AlreadySatisfied,
    SignInRequired,
    SignUpRequired,
    ValidatedInvitation,
)
from domain.entities.invitation import IdentityHint, InvitationKind, InvitationStatus
from domain.services.identity_resolver import IdentityResolver
from tests.unit.conftest import NOW


def validated(
    code: str = "GRD-ABC123",
    kind: InvitationKind = InvitationKind.GUARD,
    products: list[str] | None = None,
    hint: IdentityHint | None = None,
    status: InvitationStatus = InvitationStatus.PENDING,
) -> ValidatedInvitation:
    return ValidatedInvitation(
        code=code,
        kind=kind,
        status=status,
        organization_id=uuid4(),
        requested_products=products or ["guard-management"],
        identity_hint=hint,
        expires_at=NOW + timedelta(days=7),
        is_expired=False,
    )


@pytest.fixture
def resolver() -> IdentityResolver:
    return IdentityResolver(fallback_domain="auto-invite.temp", default_name="New User")


class TestWithoutSession:
    def test_guard_invitation_without_hint_gets_synthetic_email(
        self, resolver: IdentityResolver
    ) -> None:
        decision = resolver.resolve(validated(code="GRD-ABC123"))

        assert decision == SignUpRequired(email="grd-abc123@auto-invite.temp", name="New User")

    def test_synthetic_email_is_deterministic(self, resolver: IdentityResolver) -> None:
        first = resolver.resolve(validated(code="GRD-H8I2KU"))
        second = resolver.resolve(validated(code="GRD-H8I2KU"))

        assert first == second

    def test_uses_hint_email_and_name(self, resolver: IdentityResolver) -> None:
        hint = IdentityHint(email="sam@example.com", name="Sam Guard")

        decision = resolver.resolve(validated(hint=hint))

        assert decision == SignUpRequired(email="sam@example.com", name="Sam Guard")

    def test_hint_with_name_only_still_synthesizes_email(
        self, resolver: IdentityResolver
    ) -> None:
        decision = resolver.resolve(validated(code="GRD-X1", hint=IdentityHint(name="Sam")))

        assert decision == SignUpRequired(email="grd-x1@auto-invite.temp", name="Sam")

    def test_accepted_invitation_requires_sign_in(self, resolver: IdentityResolver) -> None:
        decision = resolver.resolve(validated(status=InvitationStatus.ACCEPTED))

        assert isinstance(decision, SignInRequired)

    def test_fallback_domain_is_normalized(self) -> None:
        resolver = IdentityResolver(fallback_domain="@Auto-Invite.TEMP ", default_name="x")

        assert resolver.synthesize_email(" INV-9 ") == "inv-9@auto-invite.temp"

    @pytest.mark.parametrize(
        ("code", "email"),
        [
            ("GRD 7 Q", "grd-7-q@auto-invite.temp"),
            ("INV/2026#4", "inv-2026-4@auto-invite.temp"),
            ("a..b", "a.b@auto-invite.temp"),
            (".Ünïcode.", "n-code@auto-invite.temp"),
            ("@@", "invite@auto-invite.temp"),
        ],
    )
    def test_unsafe_code_characters_are_replaced(
        self, resolver: IdentityResolver, code: str, email: str
    ) -> None:
        assert resolver.synthesize_email(code) == email
        assert resolver.synthesize_email(code) == resolver.synthesize_email(code)


class TestWithSession:
    def test_fully_entitled_caller_is_already_satisfied(
        self, resolver: IdentityResolver
    ) -> None:
        user_id = uuid4()

        decision = resolver.resolve(validated(), user_id, held_products=["guard-management"])

        assert decision == AlreadySatisfied(user_id=user_id, fully_entitled=True)

    def test_partially_entitled_caller_is_still_already_satisfied(
        self, resolver: IdentityResolver
    ) -> None:
        user_id = uuid4()
        invitation = validated(
            kind=InvitationKind.PRODUCT,
            products=["workforce-management", "time-tracker"],
        )

        decision = resolver.resolve(invitation, user_id, held_products=["time-tracker"])

        assert decision == AlreadySatisfied(user_id=user_id, fully_entitled=False)

    def test_session_wins_over_identity_hint(self, resolver: IdentityResolver) -> None:
        user_id = uuid4()
        hint = IdentityHint(email="someone-else@example.com")

        decision = resolver.resolve(validated(hint=hint), user_id)

        assert isinstance(decision, AlreadySatisfied)
        assert decision.user_id == user_id

    def test_session_on_accepted_invitation_defers_to_granter(
        self, resolver: IdentityResolver
    ) -> None:
        user_id = uuid4()

        decision = resolver.resolve(validated(status=InvitationStatus.ACCEPTED), user_id)

        assert isinstance(decision, AlreadySatisfied)
