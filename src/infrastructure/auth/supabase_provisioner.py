"""Supabase Auth adapter for auto-creating invited accounts."""

from typing import Any
from uuid import UUID

import httpx
import structlog

from core.config import settings
from domain.entities.acceptance import ProvisionedSession
from domain.services.account_provisioner import ProvisioningResult, ProvisioningStatus

logger = structlog.get_logger()

# GoTrue error codes meaning the email already has an account
_ALREADY_REGISTERED_CODES = frozenset({"user_already_exists", "email_exists"})


class SupabaseAccountProvisioner:
    """Creates accounts through ``POST /auth/v1/signup``.

    Every provider response is mapped onto ``ProvisioningStatus``; transport
    problems come back as ``FAILED`` rather than raising.
    """

    def __init__(
        self,
        signup_url: str = settings.supabase_signup_url,
        api_key: str = settings.supabase_anon_key,
        timeout: float = settings.provisioner_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._signup_url = signup_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def create_account(
        self,
        email: str,
        credential: str,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> ProvisioningResult:
        if not self._signup_url:
            return ProvisioningResult(
                status=ProvisioningStatus.FAILED,
                detail="identity provider is not configured",
            )

        body = {
            "email": email,
            "password": credential,
            "data": {"full_name": name, **(metadata or {})},
        }
        headers = {"apikey": self._api_key, "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._signup_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("signup_request_failed", error=str(exc), error_type=type(exc).__name__)
            return ProvisioningResult(status=ProvisioningStatus.FAILED, detail=str(exc))

        return self._interpret(response)

    def _interpret(self, response: httpx.Response) -> ProvisioningResult:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            return ProvisioningResult(
                status=ProvisioningStatus.FAILED,
                detail=f"unexpected response ({response.status_code})",
            )

        if response.status_code in (400, 422):
            if payload.get("error_code") in _ALREADY_REGISTERED_CODES:
                return ProvisioningResult(status=ProvisioningStatus.EMAIL_ALREADY_REGISTERED)
            return ProvisioningResult(
                status=ProvisioningStatus.FAILED,
                detail=payload.get("msg") or payload.get("error_description"),
            )

        if response.status_code >= 300:
            return ProvisioningResult(
                status=ProvisioningStatus.FAILED,
                detail=f"signup returned {response.status_code}",
            )

        # With a session the body is {access_token, refresh_token, user}; without
        # one (email confirmation on) it is the bare user object.
        user = payload.get("user") if "access_token" in payload else payload
        user_id = _parse_user_id(user)

        if payload.get("access_token") and user_id is not None:
            return ProvisioningResult(
                status=ProvisioningStatus.CREATED,
                user_id=user_id,
                session=ProvisionedSession(
                    access_token=payload["access_token"],
                    refresh_token=payload.get("refresh_token"),
                    expires_in=payload.get("expires_in"),
                ),
            )

        if user_id is None:
            return ProvisioningResult(
                status=ProvisioningStatus.FAILED, detail="signup response has no user"
            )

        # An already-registered email comes back as an obfuscated user with no identities
        if user.get("identities") == []:
            return ProvisioningResult(status=ProvisioningStatus.EMAIL_ALREADY_REGISTERED)

        return ProvisioningResult(status=ProvisioningStatus.CONFIRMATION_REQUIRED, user_id=user_id)


def _parse_user_id(user: Any) -> UUID | None:
    if not isinstance(user, dict) or not user.get("id"):
        return None
    try:
        return UUID(str(user["id"]))
    except ValueError:
        return None
