"""Caller session protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The signed-in caller, as read from a bearer token."""

    id: UUID
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for bearer-token session providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Resolve a bearer token to the caller's session.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        ...
