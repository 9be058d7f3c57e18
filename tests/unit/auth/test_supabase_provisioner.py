"""Unit tests for SupabaseAccountProvisioner."""

import json
from typing import Any
from uuid import uuid4

import httpx
import pytest

from domain.services.account_provisioner import ProvisioningStatus
from infrastructure.auth.supabase_provisioner import SupabaseAccountProvisioner

SIGNUP_URL = "https://example.supabase.co/auth/v1/signup"


def provisioner_returning(
    status_code: int, body: Any, captured: list[httpx.Request] | None = None
) -> SupabaseAccountProvisioner:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, json=body)
        return httpx.Response(status_code, text=body)

    return SupabaseAccountProvisioner(
        signup_url=SIGNUP_URL,
        api_key="anon-key",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


async def create(provisioner: SupabaseAccountProvisioner):
    return await provisioner.create_account(
        email="grd-abc123@auto-invite.temp",
        credential="one-time-secret",
        name="New User",
        metadata={"invitation_code": "GRD-ABC123"},
    )


class TestRequest:
    async def test_posts_signup_with_metadata_and_api_key(self) -> None:
        captured: list[httpx.Request] = []
        provisioner = provisioner_returning(
            200, {"id": str(uuid4()), "identities": [{"id": "x"}]}, captured
        )

        await create(provisioner)

        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == SIGNUP_URL
        assert request.headers["apikey"] == "anon-key"
        assert json.loads(request.content) == {
            "email": "grd-abc123@auto-invite.temp",
            "password": "one-time-secret",
            "data": {"full_name": "New User", "invitation_code": "GRD-ABC123"},
        }


class TestOutcomes:
    async def test_session_response_is_created(self) -> None:
        user_id = uuid4()
        provisioner = provisioner_returning(
            200,
            {
                "access_token": "at",
                "refresh_token": "rt",
                "expires_in": 3600,
                "user": {"id": str(user_id), "identities": [{"id": "x"}]},
            },
        )

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.CREATED
        assert result.user_id == user_id
        assert result.session is not None
        assert result.session.access_token == "at"
        assert result.session.refresh_token == "rt"
        assert result.session.expires_in == 3600

    async def test_bare_user_means_confirmation_required(self) -> None:
        user_id = uuid4()
        provisioner = provisioner_returning(
            200,
            {"id": str(user_id), "confirmation_sent_at": "2026-03-01T12:00:00Z", "identities": [{}]},
        )

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.CONFIRMATION_REQUIRED
        assert result.user_id == user_id
        assert result.session is None

    async def test_obfuscated_user_without_identities_is_already_registered(self) -> None:
        provisioner = provisioner_returning(200, {"id": str(uuid4()), "identities": []})

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.EMAIL_ALREADY_REGISTERED

    @pytest.mark.parametrize("error_code", ["user_already_exists", "email_exists"])
    async def test_already_exists_error_code(self, error_code: str) -> None:
        provisioner = provisioner_returning(
            422, {"code": 422, "error_code": error_code, "msg": "User already registered"}
        )

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.EMAIL_ALREADY_REGISTERED

    async def test_other_validation_error_fails(self) -> None:
        provisioner = provisioner_returning(
            422, {"error_code": "weak_password", "msg": "Password should be stronger"}
        )

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED
        assert result.detail == "Password should be stronger"

    @pytest.mark.parametrize("status_code", [429, 500, 503])
    async def test_server_side_errors_fail(self, status_code: int) -> None:
        provisioner = provisioner_returning(status_code, {"msg": "try later"})

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED

    async def test_non_json_body_fails(self) -> None:
        provisioner = provisioner_returning(502, "<html>Bad gateway</html>")

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED

    async def test_response_without_user_fails(self) -> None:
        provisioner = provisioner_returning(200, {"access_token": "at"})

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED

    async def test_transport_error_fails(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        provisioner = SupabaseAccountProvisioner(
            signup_url=SIGNUP_URL, api_key="k", transport=httpx.MockTransport(handler)
        )

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED
        assert "timed out" in (result.detail or "")

    async def test_unconfigured_provider_fails_without_request(self) -> None:
        provisioner = SupabaseAccountProvisioner(signup_url="", api_key="")

        result = await create(provisioner)

        assert result.status == ProvisioningStatus.FAILED
