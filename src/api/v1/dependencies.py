"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.entitlement_granter import EntitlementGranter
from domain.services.entitlement_service import EntitlementService
from domain.services.identity_resolver import IdentityResolver
from domain.services.invitation_acceptance_service import InvitationAcceptanceService
from domain.services.invitation_sweeper import InvitationSweeper
from domain.services.invitation_validator import InvitationValidator
from infrastructure.auth.supabase_provisioner import SupabaseAccountProvisioner
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_invitation_validator() -> InvitationValidator:
    """Get Invitation validator instance."""
    return InvitationValidator(get_uow_factory())


@lru_cache
def get_entitlement_granter() -> EntitlementGranter:
    """Get Entitlement granter instance."""
    return EntitlementGranter(get_uow_factory())


@lru_cache
def get_invitation_sweeper() -> InvitationSweeper:
    """Get Invitation sweeper instance."""
    return InvitationSweeper(get_uow_factory())


@lru_cache
def get_entitlement_service() -> EntitlementService:
    """Get Entitlement service instance."""
    return EntitlementService(get_uow_factory())


@lru_cache
def get_acceptance_service() -> InvitationAcceptanceService:
    """Get Invitation acceptance service instance."""
    return InvitationAcceptanceService(
        get_uow_factory(),
        validator=get_invitation_validator(),
        resolver=IdentityResolver(
            fallback_domain=settings.invitation_fallback_domain,
            default_name=settings.invitation_default_name,
        ),
        granter=get_entitlement_granter(),
        provisioner=SupabaseAccountProvisioner(),
    )
