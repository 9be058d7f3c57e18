"""Read side of entitlements."""

from collections.abc import Callable
from uuid import UUID

from domain.entities.entitlement import Entitlement
from domain.repositories.unit_of_work import IUnitOfWork


class EntitlementService:
    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_active(
        self, user_id: UUID, organization_id: UUID | None = None
    ) -> list[Entitlement]:
        """Active entitlements held by a user, optionally within one organization."""
        async with self._uow_factory() as uow:
            return await uow.entitlements.list_for_user(
                user_id, organization_id=organization_id, active_only=True
            )
