"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Invitation errors
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    INVITATION_INVALID = "INVITATION_INVALID"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    INVITATION_ALREADY_CLAIMED = "INVITATION_ALREADY_CLAIMED"
    INVITATION_CODE_CONFLICT = "INVITATION_CODE_CONFLICT"

    # Identity provider errors (502)
    PROVISIONING_FAILED = "PROVISIONING_FAILED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class InvitationNotFoundError(AppException):
    """No invitation of any kind carries this code."""

    def __init__(self, code: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            message="Invitation not found",
            status_code=404,
            details={"code": code} if code else None,
        )


class InvitationInvalidError(AppException):
    """Invitation can no longer be used (revoked, or its organization is gone)."""

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_INVALID,
            message="This invitation is no longer valid",
            status_code=400,
            details={"code": code, "reason": reason},
        )


class InvitationExpiredError(AppException):
    """Invitation has expired. Only a newly issued invitation can help."""

    def __init__(self, code: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired. Ask the sender for a new one.",
            status_code=410,
            details={"code": code} if code else None,
        )


class InvitationAlreadyClaimedError(AppException):
    """Invitation was already accepted by a different account."""

    def __init__(self, code: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_ALREADY_CLAIMED,
            message=(
                "This invitation has already been used by another account. "
                "Contact the person who invited you."
            ),
            status_code=409,
            details={"code": code},
        )


class InvitationCodeConflictError(AppException):
    """The same code exists for more than one invitation kind."""

    def __init__(self, code: str, kinds: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_CODE_CONFLICT,
            message="Invitation code is ambiguous",
            status_code=500,
            details={"code": code, "kinds": kinds},
        )


class ProvisioningFailedError(AppException):
    """The identity provider could not create the account. Safe to retry."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.PROVISIONING_FAILED,
            message="Account could not be created. Please try again.",
            status_code=502,
            details={"retryable": True, "reason": detail},
        )
