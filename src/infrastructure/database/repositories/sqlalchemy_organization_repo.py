"""SQLAlchemy implementation of Organization repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.organization import Organization
from infrastructure.database.models import OrganizationModel


class SQLAlchemyOrganizationRepository:
    """SQLAlchemy implementation of IOrganizationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Organization | None:
        """Get an organization by ID."""
        stmt = select(OrganizationModel).where(OrganizationModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, organization: Organization) -> Organization:
        """Create an organization."""
        model = OrganizationModel(
            id=organization.id,
            name=organization.name,
            created_at=organization.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: OrganizationModel) -> Organization:
        return Organization(id=model.id, name=model.name, created_at=model.created_at)
