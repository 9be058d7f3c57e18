"""Entitlement API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_entitlement_service
from api.v1.schemas.entitlement import EntitlementListResponse, EntitlementResponse
from core.rate_limit import limiter
from domain.entities.product import PRODUCT_NAMES
from domain.services.entitlement_service import EntitlementService

router = APIRouter(prefix="/entitlements", tags=["entitlements"])


@router.get(
    "/me",
    response_model=EntitlementListResponse,
    summary="List my entitlements",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_my_entitlements(
    request: Request,
    user: CurrentUser,
    organization_id: UUID | None = Query(None, description="Restrict to one organization"),
    service: EntitlementService = Depends(get_entitlement_service),
) -> EntitlementListResponse:
    """Active products granted to the signed-in caller."""
    entitlements = await service.list_active(user.id, organization_id)
    data = [
        EntitlementResponse(
            product_id=e.product_id,
            product_name=PRODUCT_NAMES.get(e.product_id, e.product_id),
            organization_id=e.organization_id,
            granted_by=e.granted_by,
            granted_at=e.granted_at,
            is_active=e.is_active,
        )
        for e in entitlements
    ]
    return EntitlementListResponse(data=data, meta={"total": len(data)})
