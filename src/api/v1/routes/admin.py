"""Operational endpoints."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import require_admin_key
from api.v1.dependencies import get_invitation_sweeper
from api.v1.schemas.invitation import SweepResponse
from core.rate_limit import limiter
from domain.services.invitation_sweeper import InvitationSweeper

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_key)],
)


@router.post(
    "/invitations/sweep",
    response_model=SweepResponse,
    summary="Expire stale invitations now",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def sweep_invitations(
    request: Request,
    sweeper: InvitationSweeper = Depends(get_invitation_sweeper),
) -> SweepResponse:
    """Run the expiry sweep on demand."""
    return SweepResponse(expired_count=await sweeper.sweep_expired())
