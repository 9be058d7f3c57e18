"""SQLAlchemy implementation of Entitlement repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.entitlement import Entitlement
from infrastructure.database.models import EntitlementModel


class SQLAlchemyEntitlementRepository:
    """SQLAlchemy implementation of IEntitlementRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, entitlement: Entitlement) -> Entitlement:
        """INSERT ... ON CONFLICT (user_id, product_id) DO UPDATE."""
        insert = self._dialect_insert()
        values: dict[str, Any] = {
            "id": entitlement.id,
            "user_id": entitlement.user_id,
            "product_id": entitlement.product_id,
            "organization_id": entitlement.organization_id,
            "granted_by": entitlement.granted_by,
            "granted_at": entitlement.granted_at,
            "is_active": entitlement.is_active,
        }
        stmt = insert(EntitlementModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[EntitlementModel.user_id, EntitlementModel.product_id],
            set_={
                "granted_by": stmt.excluded.granted_by,
                "granted_at": stmt.excluded.granted_at,
                "is_active": stmt.excluded.is_active,
            },
        )
        await self._session.execute(stmt)
        await self._session.flush()

        current = await self._get(entitlement.user_id, entitlement.product_id)
        return current if current else entitlement

    async def list_for_user(
        self,
        user_id: UUID,
        organization_id: UUID | None = None,
        active_only: bool = True,
    ) -> list[Entitlement]:
        """Get entitlements held by a user."""
        stmt = select(EntitlementModel).where(EntitlementModel.user_id == user_id)
        if organization_id is not None:
            stmt = stmt.where(EntitlementModel.organization_id == organization_id)
        if active_only:
            stmt = stmt.where(EntitlementModel.is_active.is_(True))
        stmt = stmt.order_by(EntitlementModel.product_id)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def _get(self, user_id: UUID, product_id: str) -> Entitlement | None:
        stmt = (
            select(EntitlementModel)
            .where(
                EntitlementModel.user_id == user_id,
                EntitlementModel.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _dialect_insert(self) -> Any:
        """``insert`` construct supporting ON CONFLICT for the bound dialect."""
        if self._session.get_bind().dialect.name == "sqlite":
            return sqlite.insert
        return postgresql.insert

    def _to_entity(self, model: EntitlementModel) -> Entitlement:
        """Convert ORM model to domain entity."""
        return Entitlement(
            id=model.id,
            user_id=model.user_id,
            product_id=model.product_id,
            organization_id=model.organization_id,
            granted_by=model.granted_by,
            granted_at=model.granted_at,
            is_active=model.is_active,
        )
