"""Pydantic schemas for Entitlement API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EntitlementResponse(BaseModel):
    """Schema for Entitlement response."""

    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    organization_id: UUID
    granted_by: UUID | None = None
    granted_at: datetime
    is_active: bool


class EntitlementListResponse(BaseModel):
    """Schema for list of Entitlements response."""

    data: list[EntitlementResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
