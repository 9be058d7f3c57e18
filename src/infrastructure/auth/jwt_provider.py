"""JWT session provider.

Verifies Supabase access tokens (ES256, keys from the project's JWKS
endpoint) and locally signed HS256 tokens used by tests.

Relevant Supabase claims:
    sub            account id
    email          account email
    role           "authenticated"
    user_metadata  {"full_name": ..., "invitation_code": ...}
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()


class JWKSKeyCache:
    """Signing keys by ``kid``, fetched lazily and refetched on an unknown kid."""

    def __init__(
        self,
        jwks_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._jwks_url = jwks_url
        self._timeout = timeout
        self._transport = transport
        self._keys: dict[str, dict[str, Any]] | None = None

    async def get(self, kid: str) -> dict[str, Any] | None:
        if self._keys is None or kid not in self._keys:
            # Unknown kid usually means the keys were rotated
            fetched = await self._fetch()
            if fetched is not None:
                self._keys = fetched
        return (self._keys or {}).get(kid)

    async def _fetch(self) -> dict[str, dict[str, Any]] | None:
        if not self._jwks_url:
            return None
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(self._jwks_url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("jwks_fetch_failed", url=self._jwks_url)
            return None

        keys = {k["kid"]: k for k in payload.get("keys", []) if k.get("kid")}
        logger.info("jwks_fetched", key_count=len(keys))
        return keys


class JWTAuthProvider:
    """Bearer-token session provider backed by JWT verification."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks: JWKSKeyCache | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks = jwks or JWKSKeyCache(settings.supabase_jwks_url)

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the caller behind ``token``, or None if it does not verify."""
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") == "ES256":
                claims = await self._decode_es256(token, header.get("kid"))
            else:
                claims = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if not claims:
            return None
        return self._to_user(claims)

    async def _decode_es256(self, token: str, kid: str | None) -> dict[str, Any] | None:
        if not kid:
            return None
        key_data = await self._jwks.get(kid)
        if not key_data:
            logger.warning("jwks_key_not_found", kid=kid)
            return None
        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    @staticmethod
    def _to_user(claims: dict[str, Any]) -> TokenUser | None:
        sub = claims.get("sub")
        email = claims.get("email")
        if not sub or not email:
            return None
        try:
            user_id = UUID(sub)
        except ValueError:
            return None

        metadata = claims.get("user_metadata") or {}
        return TokenUser(
            id=user_id,
            email=email,
            display_name=metadata.get("full_name") or metadata.get("display_name"),
            role=claims.get("role"),
        )

    def create_token(self, user: TokenUser) -> str:
        """Sign an HS256 token for ``user``. Used by tests and local tooling."""
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": user.role or "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"full_name": user.display_name},
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
