"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import (
    IdentityHint,
    Invitation,
    InvitationKind,
    InvitationStatus,
)
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key, bypassing stale session state."""
        stmt = (
            select(InvitationModel)
            .where(InvitationModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_code(self, code: str) -> list[Invitation]:
        """Get every invitation, of any kind, carrying ``code``."""
        stmt = (
            select(InvitationModel)
            .where(InvitationModel.code == code)
            .order_by(InvitationModel.kind)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def claim(self, id: UUID, user_id: UUID, now: datetime) -> bool:
        """Compare-and-set pending -> accepted. True only if this call applied it."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.id == id,
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at > now,
            )
            .values(
                status=InvitationStatus.ACCEPTED.value,
                accepted_by=user_id,
                accepted_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount == 1  # type: ignore[attr-defined, no-any-return]

    async def expire_pending(self, now: datetime) -> int:
        """Mark all expired pending invitations. Returns count of updated rows."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at <= now,
            )
            .values(status=InvitationStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            code=model.code,
            kind=InvitationKind(model.kind),
            organization_id=model.organization_id,
            requested_products=list(model.requested_products or []),
            identity_hint=IdentityHint.from_raw(model.invitee_email, model.invitee_name),
            status=InvitationStatus(model.status),
            created_by=model.created_by,
            created_at=model.created_at,
            expires_at=model.expires_at,
            accepted_by=model.accepted_by,
            accepted_at=model.accepted_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        hint = entity.identity_hint
        return InvitationModel(
            id=entity.id,
            code=entity.code,
            kind=entity.kind.value,
            organization_id=entity.organization_id,
            requested_products=list(entity.requested_products),
            invitee_email=hint.email if hint else None,
            invitee_name=hint.name if hint else None,
            status=entity.status.value,
            created_by=entity.created_by,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            accepted_by=entity.accepted_by,
            accepted_at=entity.accepted_at,
        )
