"""Shared fixtures for unit tests."""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.entitlement import Entitlement
from domain.entities.invitation import Invitation, InvitationKind, InvitationStatus
from domain.entities.organization import Organization

NOW = datetime(2026, 3, 1, 12, 0, 0)


def fixed_clock() -> datetime:
    return NOW


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.invitations = AsyncMock()
        self.entitlements = AsyncMock()
        self.organizations = AsyncMock()
        self.commits = 0
        self.rolled_back = False

    @property
    def committed(self) -> bool:
        return self.commits > 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


# --- In-memory storage for race and idempotence tests ---


class InMemoryStore:
    def __init__(self) -> None:
        self.invitations: dict[UUID, Invitation] = {}
        self.entitlements: dict[tuple[UUID, str], Entitlement] = {}
        self.organizations: dict[UUID, Organization] = {}


class InMemoryInvitationRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(self, invitation: Invitation) -> Invitation:
        self._store.invitations[invitation.id] = replace(invitation)
        return replace(invitation)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        found = self._store.invitations.get(id)
        return replace(found) if found else None

    async def find_by_code(self, code: str) -> list[Invitation]:
        await asyncio.sleep(0)
        return [replace(i) for i in self._store.invitations.values() if i.code == code]

    async def claim(self, id: UUID, user_id: UUID, now: datetime) -> bool:
        # Yield first so concurrent callers interleave before the compare-and-set
        await asyncio.sleep(0)
        current = self._store.invitations.get(id)
        if current is None or not current.is_claimable_at(now):
            return False
        current.status = InvitationStatus.ACCEPTED
        current.accepted_by = user_id
        current.accepted_at = now
        return True

    async def expire_pending(self, now: datetime) -> int:
        count = 0
        for invitation in self._store.invitations.values():
            if invitation.status == InvitationStatus.PENDING and invitation.is_expired_at(now):
                invitation.status = InvitationStatus.EXPIRED
                count += 1
        return count


class InMemoryEntitlementRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def upsert(self, entitlement: Entitlement) -> Entitlement:
        await asyncio.sleep(0)
        key = (entitlement.user_id, entitlement.product_id)
        existing = self._store.entitlements.get(key)
        if existing is None:
            self._store.entitlements[key] = replace(entitlement)
        else:
            existing.granted_by = entitlement.granted_by
            existing.granted_at = entitlement.granted_at
            existing.is_active = entitlement.is_active
        return replace(self._store.entitlements[key])

    async def list_for_user(
        self,
        user_id: UUID,
        organization_id: UUID | None = None,
        active_only: bool = True,
    ) -> list[Entitlement]:
        return sorted(
            (
                replace(e)
                for e in self._store.entitlements.values()
                if e.user_id == user_id
                and (organization_id is None or e.organization_id == organization_id)
                and (e.is_active or not active_only)
            ),
            key=lambda e: e.product_id,
        )


class InMemoryOrganizationRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get(self, id: UUID) -> Organization | None:
        return self._store.organizations.get(id)

    async def create(self, organization: Organization) -> Organization:
        self._store.organizations[organization.id] = organization
        return organization


class InMemoryUnitOfWork:
    """Unit of Work over ``InMemoryStore``. Writes apply immediately."""

    def __init__(self, store: InMemoryStore) -> None:
        self.invitations = InMemoryInvitationRepository(store)
        self.entitlements = InMemoryEntitlementRepository(store)
        self.organizations = InMemoryOrganizationRepository(store)

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_invitation(
    organization_id: UUID,
    code: str = "GRD-ABC123",
    kind: InvitationKind = InvitationKind.GUARD,
    expires_at: datetime | None = None,
    **kwargs: Any,
) -> Invitation:
    return Invitation(
        code=code,
        kind=kind,
        organization_id=organization_id,
        expires_at=expires_at or NOW + timedelta(days=7),
        **kwargs,
    )


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def memory_uow_factory(store: InMemoryStore) -> Any:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def organization(store: InMemoryStore) -> Organization:
    org = Organization(name="Acme Security")
    store.organizations[org.id] = org
    return org


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def other_user_id() -> UUID:
    """A random user ID distinct from user_id."""
    return uuid4()
