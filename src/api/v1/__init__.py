"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.admin import router as admin_router
from api.v1.routes.entitlements import router as entitlements_router
from api.v1.routes.invitations import router as invitations_router

router = APIRouter()
router.include_router(invitations_router)
router.include_router(entitlements_router)
router.include_router(admin_router)
