"""Standardized error responses for API endpoints.

Success bodies are endpoint-specific; every failure carries the same envelope
with an ``error`` field so clients can always read a message.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse


class ResponseCode(str, Enum):
    """Response codes for API error responses.

    Ranges: 1xxx=Client Error, 2xxx=Server Error, 3xxx=External Service
    """

    # Client errors
    VALIDATION_ERROR = "1000"
    CREDIT_LIMIT_REACHED = "1001"
    VERSION_NOT_FOUND = "1002"
    NOT_FOUND = "1003"
    RATE_LIMITED = "1004"

    # Server errors
    INTERNAL_ERROR = "2000"
    STORAGE_ERROR = "2001"
    UNPARSEABLE_OUTPUT = "2002"

    # External service errors
    PROVIDER_ERROR = "3000"


# Response messages mapped to codes
RESPONSE_MESSAGES: dict[ResponseCode, str] = {
    ResponseCode.VALIDATION_ERROR: "Request validation failed",
    ResponseCode.CREDIT_LIMIT_REACHED: "Credit limit reached",
    ResponseCode.VERSION_NOT_FOUND: "Version not found",
    ResponseCode.NOT_FOUND: "Not found",
    ResponseCode.RATE_LIMITED: "Rate limit exceeded. Please wait and retry",
    ResponseCode.INTERNAL_ERROR: "An internal error occurred",
    ResponseCode.STORAGE_ERROR: "Failed to access configuration store",
    ResponseCode.UNPARSEABLE_OUTPUT: "Failed to parse LLM response as JSON",
    ResponseCode.PROVIDER_ERROR: "Error from LLM provider",
}

# HTTP status codes for each response code
HTTP_STATUS_MAP: dict[ResponseCode, int] = {
    ResponseCode.VALIDATION_ERROR: 400,
    ResponseCode.CREDIT_LIMIT_REACHED: 403,
    ResponseCode.VERSION_NOT_FOUND: 404,
    ResponseCode.NOT_FOUND: 404,
    ResponseCode.RATE_LIMITED: 429,
    ResponseCode.INTERNAL_ERROR: 500,
    ResponseCode.STORAGE_ERROR: 500,
    ResponseCode.UNPARSEABLE_OUTPUT: 500,
    ResponseCode.PROVIDER_ERROR: 500,
}


def get_message(code: ResponseCode) -> str:
    """Get the message for a response code."""
    return RESPONSE_MESSAGES.get(code, "Unknown error")


def get_http_status(code: ResponseCode) -> int:
    """Get HTTP status code for a response code."""
    return HTTP_STATUS_MAP.get(code, 500)


def error_dict(
    code: ResponseCode,
    custom_message: str | None = None,
    error_details: dict[str, Any] | None = None,
    request_id: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a standardized error response dictionary.

    Extra keyword arguments are merged into the body (e.g. ``provider``,
    ``rawResponse``) for endpoints that echo diagnostic context.
    """
    body = {
        "error": custom_message or get_message(code),
        "code": code.value,
        "success": False,
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        "error_details": error_details,
    }
    body.update(extra)
    return body


def error_response(
    code: ResponseCode,
    custom_message: str | None = None,
    request_id: str | None = None,
    *,
    status_code: int | None = None,
    error_details: dict[str, Any] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Create a JSONResponse with error format."""
    return JSONResponse(
        content=error_dict(
            code, custom_message, error_details, request_id=request_id, **extra
        ),
        status_code=status_code or get_http_status(code),
    )
