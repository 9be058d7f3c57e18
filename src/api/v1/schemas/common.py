"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Body of every non-2xx response, as written by the exception handlers."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_code": "INVITATION_ALREADY_CLAIMED",
                "message": "This invitation has already been used by another account. ...",
                "details": {"code": "GRD-H8I2KU"},
            }
        },
    )

    error_code: str
    message: str
    details: Any | None = None
