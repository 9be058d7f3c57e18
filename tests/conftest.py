"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting and the background sweeper in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["INVITATION_SWEEP_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.invitation import IdentityHint, Invitation, InvitationKind, InvitationStatus
from domain.entities.organization import Organization
from domain.services.account_provisioner import ProvisioningResult, ProvisioningStatus
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory, one shared connection per engine)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""
    return lambda: SQLAlchemyUnitOfWork(session_factory)


class Seeder:
    """Inserts organizations and invitations through the real repositories."""

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def organization(self, name: str = "Acme Security") -> Organization:
        async with self._uow_factory() as uow:
            org = await uow.organizations.create(Organization(name=name))
            await uow.commit()
        return org

    async def invitation(
        self,
        organization_id: UUID,
        code: str | None = None,
        kind: InvitationKind = InvitationKind.GUARD,
        products: list[str] | None = None,
        expires_in: timedelta = timedelta(days=7),
        status: InvitationStatus = InvitationStatus.PENDING,
        hint: IdentityHint | None = None,
        created_by: UUID | None = None,
    ) -> Invitation:
        invitation = Invitation(
            code=code or f"GRD-{uuid4().hex[:6].upper()}",
            kind=kind,
            organization_id=organization_id,
            requested_products=products or [],
            identity_hint=hint,
            status=status,
            created_by=created_by or uuid4(),
            expires_at=datetime.utcnow() + expires_in,
        )
        async with self._uow_factory() as uow:
            created = await uow.invitations.create(invitation)
            await uow.commit()
        return created


@pytest.fixture
def seed(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> Seeder:
    return Seeder(uow_factory)


class StubProvisioner:
    """Account provisioner returning a preset result and recording calls."""

    def __init__(self, result: ProvisioningResult | None = None) -> None:
        self.result = result or ProvisioningResult(
            status=ProvisioningStatus.CREATED, user_id=uuid4()
        )
        self.calls: list[dict[str, Any]] = []

    async def create_account(
        self,
        email: str,
        credential: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> ProvisioningResult:
        self.calls.append(
            {"email": email, "credential": credential, "name": name, "metadata": metadata}
        )
        return self.result


@pytest.fixture
def provisioner() -> StubProvisioner:
    return StubProvisioner()


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="guard@example.com",
        display_name="Test Guard",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_headers(auth_provider: JWTAuthProvider) -> Callable[[TokenUser], dict[str, str]]:
    """Authorization headers for an arbitrary user."""

    def _make(user: TokenUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(user)}"}

    return _make


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with no overrides."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def api_client(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    provisioner: StubProvisioner,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client wired to the in-memory database.

    - Services use a UoW factory bound to the test engine
    - Bearer tokens are verified with the HS256 test provider
    - Account creation goes to ``StubProvisioner``
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_acceptance_service,
        get_entitlement_service,
        get_invitation_sweeper,
        get_invitation_validator,
    )
    from domain.services.entitlement_granter import EntitlementGranter
    from domain.services.entitlement_service import EntitlementService
    from domain.services.identity_resolver import IdentityResolver
    from domain.services.invitation_acceptance_service import InvitationAcceptanceService
    from domain.services.invitation_sweeper import InvitationSweeper
    from domain.services.invitation_validator import InvitationValidator
    from main import create_app

    app = create_app()

    validator = InvitationValidator(uow_factory)
    acceptance = InvitationAcceptanceService(
        uow_factory,
        validator=validator,
        resolver=IdentityResolver(fallback_domain="auto-invite.temp", default_name="New User"),
        granter=EntitlementGranter(uow_factory),
        provisioner=provisioner,
    )

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_invitation_validator] = lambda: validator
    app.dependency_overrides[get_acceptance_service] = lambda: acceptance
    app.dependency_overrides[get_entitlement_service] = lambda: EntitlementService(uow_factory)
    app.dependency_overrides[get_invitation_sweeper] = lambda: InvitationSweeper(uow_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
