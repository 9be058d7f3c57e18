"""Pydantic schemas for Invitation API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.acceptance import AcceptanceResult, ValidatedInvitation


class InvitationCodeRequest(BaseModel):
    """Body carrying an invitation code."""

    code: str = Field(..., min_length=1, max_length=64)

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Invitation code must not be blank")
        return v


class IdentityHintResponse(BaseModel):
    email: str | None = None
    name: str | None = None


class InvitationValidationResponse(BaseModel):
    """Schema for a validated invitation."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "GRD-H8I2KU",
                "kind": "guard",
                "status": "pending",
                "is_expired": False,
                "organization_id": "456e4567-e89b-12d3-a456-426614174000",
                "requested_products": ["guard-management"],
                "identity_hint": None,
                "expires_at": "2026-02-08T10:00:00",
            }
        },
    )

    code: str
    kind: str
    status: str
    is_expired: bool
    organization_id: UUID
    requested_products: list[str]
    identity_hint: IdentityHintResponse | None = None
    expires_at: datetime

    @classmethod
    def from_validated(cls, invitation: ValidatedInvitation) -> "InvitationValidationResponse":
        hint = invitation.identity_hint
        return cls(
            code=invitation.code,
            kind=invitation.kind.value,
            status=invitation.status.value,
            is_expired=invitation.is_expired,
            organization_id=invitation.organization_id,
            requested_products=invitation.requested_products,
            identity_hint=IdentityHintResponse(email=hint.email, name=hint.name) if hint else None,
            expires_at=invitation.expires_at,
        )


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


class AcceptanceResponse(BaseModel):
    """Schema for the result of an acceptance attempt."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "outcome": "accepted",
                "invitation_code": "GRD-H8I2KU",
                "kind": "guard",
                "organization_id": "456e4567-e89b-12d3-a456-426614174000",
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "granted_products": ["guard-management"],
                "message": "Invitation accepted",
            }
        },
    )

    outcome: str
    invitation_code: str
    kind: str
    organization_id: UUID
    message: str
    user_id: UUID | None = None
    email: str | None = None
    granted_products: list[str] = Field(default_factory=list)
    deferred_reason: str | None = None
    session: SessionResponse | None = None

    @classmethod
    def from_result(cls, result: AcceptanceResult) -> "AcceptanceResponse":
        session = None
        if result.session:
            session = SessionResponse(
                access_token=result.session.access_token,
                refresh_token=result.session.refresh_token,
                expires_in=result.session.expires_in,
            )
        return cls(
            outcome=result.outcome.value,
            invitation_code=result.invitation_code,
            kind=result.kind.value,
            organization_id=result.organization_id,
            message=result.message,
            user_id=result.user_id,
            email=result.email,
            granted_products=result.granted_products,
            deferred_reason=result.deferred_reason.value if result.deferred_reason else None,
            session=session,
        )


class SweepResponse(BaseModel):
    expired_count: int
