"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class OrganizationModel(Base):
    """Tenant model."""

    __tablename__ = "organizations"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    invitations: Mapped[list["InvitationModel"]] = relationship(
        "InvitationModel",
        back_populates="organization",
        cascade="all, delete-orphan",
    )


class InvitationModel(Base):
    """Product or guard invitation model."""

    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("kind", "code", name="uq_invitations_kind_code"),
        Index("ix_invitations_code", "code"),
        Index("ix_invitations_status_expires_at", "status", "expires_at"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "kind IN ('product', 'guard')",
            name="ck_invitations_kind",
        ),
        nullable=False,
    )
    organization_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    requested_products: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)
    invitee_email: Mapped[str | None] = mapped_column(String(255))
    invitee_name: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'revoked')",
            name="ck_invitations_status",
        ),
        nullable=False,
        default="pending",
    )
    created_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    accepted_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime)

    organization: Mapped["OrganizationModel"] = relationship(
        "OrganizationModel", back_populates="invitations"
    )


class EntitlementModel(Base):
    """Product grant for a user (one row per user and product)."""

    __tablename__ = "user_products"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_user_products_user_product"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    organization_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    granted_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    granted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
