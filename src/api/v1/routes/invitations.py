"""Invitation API routes."""

from fastapi import APIRouter, Depends, Path, Request

from api.dependencies.auth import CurrentUser, OptionalUser
from api.v1.dependencies import get_acceptance_service, get_invitation_validator
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.invitation import (
    AcceptanceResponse,
    InvitationCodeRequest,
    InvitationValidationResponse,
)
from core.rate_limit import limiter
from domain.services.invitation_acceptance_service import InvitationAcceptanceService
from domain.services.invitation_validator import InvitationValidator

router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
)


@router.post(
    "/accept",
    response_model=AcceptanceResponse,
    summary="Accept invitation",
    responses={
        200: {"description": "Accepted, deferred, or sign-in required (see outcome)"},
        400: {"model": ErrorResponse, "description": "Invitation revoked or organization removed"},
        401: {"model": ErrorResponse, "description": "A bearer token was sent but is invalid"},
        404: {"model": ErrorResponse, "description": "Invitation not found"},
        409: {"model": ErrorResponse, "description": "Invitation already used by another account"},
        410: {"model": ErrorResponse, "description": "Invitation expired"},
        502: {"model": ErrorResponse, "description": "Account could not be created; retry"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    body: InvitationCodeRequest,
    user: OptionalUser,
    service: InvitationAcceptanceService = Depends(get_acceptance_service),
) -> AcceptanceResponse:
    """Accept an invitation. Creates an account when no session is presented."""
    result = await service.accept_invitation(body.code, user.id if user else None)
    return AcceptanceResponse.from_result(result)


@router.post(
    "/complete",
    response_model=AcceptanceResponse,
    summary="Complete invitation after sign-in",
    responses={
        200: {"description": "Invitation accepted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Invitation not found"},
        409: {"model": ErrorResponse, "description": "Invitation already used by another account"},
        410: {"model": ErrorResponse, "description": "Invitation expired"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def complete_invitation(
    request: Request,
    body: InvitationCodeRequest,
    user: CurrentUser,
    service: InvitationAcceptanceService = Depends(get_acceptance_service),
) -> AcceptanceResponse:
    """Finish a deferred acceptance for the signed-in caller."""
    result = await service.complete_after_auth(body.code, user.id)
    return AcceptanceResponse.from_result(result)


@router.get(
    "/{code}",
    response_model=InvitationValidationResponse,
    summary="Validate invitation code",
    responses={
        200: {"description": "Invitation details"},
        404: {"model": ErrorResponse, "description": "Invitation not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def validate_invitation(
    request: Request,
    code: str = Path(..., min_length=1, max_length=64),
    validator: InvitationValidator = Depends(get_invitation_validator),
) -> InvitationValidationResponse:
    """Look up an invitation code without changing it."""
    invitation = await validator.validate(code)
    return InvitationValidationResponse.from_validated(invitation)
