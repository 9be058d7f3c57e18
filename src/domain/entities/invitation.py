"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.product import ProductId


class InvitationKind(StrEnum):
    """Kind of invitation. Determines which products acceptance grants."""

    PRODUCT = "product"
    GUARD = "guard"


class InvitationStatus(StrEnum):
    """Status of an invitation. Transitions never lead back to pending."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


# Kinds whose product set is fixed regardless of what the row stores
KIND_PRODUCTS: dict[InvitationKind, tuple[str, ...]] = {
    InvitationKind.GUARD: (ProductId.GUARD_MANAGEMENT.value,),
}


def normalize_code(code: str) -> str:
    """Strip surrounding whitespace from a scanned or typed code."""
    return code.strip()


def products_for(kind: InvitationKind, requested: list[str] | tuple[str, ...]) -> list[str]:
    """Ordered, de-duplicated products granted by an invitation of ``kind``."""
    source = KIND_PRODUCTS.get(kind, tuple(requested))
    return list(dict.fromkeys(p for p in source if p))


@dataclass(frozen=True)
class IdentityHint:
    """Contact details captured when the invitation was issued."""

    email: str | None = None
    name: str | None = None

    @classmethod
    def from_raw(cls, email: str | None, name: str | None) -> "IdentityHint | None":
        email = (email or "").strip().lower() or None
        name = (name or "").strip() or None
        if email is None and name is None:
            return None
        return cls(email=email, name=name)


@dataclass
class Invitation:
    """Domain entity for a product or guard invitation."""

    code: str
    kind: InvitationKind
    organization_id: UUID
    expires_at: datetime
    requested_products: list[str] = field(default_factory=list)
    identity_hint: IdentityHint | None = None
    created_by: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    accepted_by: UUID | None = None
    accepted_at: datetime | None = None

    @property
    def products(self) -> list[str]:
        """Products granted on acceptance."""
        return products_for(self.kind, self.requested_products)

    def is_expired_at(self, now: datetime) -> bool:
        """Expired from the instant ``expires_at`` is reached, matching the claim and sweep SQL."""
        return now >= self.expires_at

    @property
    def is_expired(self) -> bool:
        """Check if the invitation has expired."""
        return self.is_expired_at(datetime.utcnow())

    def is_claimable_at(self, now: datetime) -> bool:
        """Pending and not yet expired."""
        return self.status == InvitationStatus.PENDING and not self.is_expired_at(now)
