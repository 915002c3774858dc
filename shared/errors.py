"""
Error taxonomy for the chat gateway.

Validator, registry and adapters raise these; only the HTTP layer turns them
into the JSON envelope. Each class carries its HTTP status and the kind name
shown to clients in the ``error`` field.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, ClassVar

_USER_MESSAGES: dict[int, str] = {
    400: "Bad Request - Please check your input parameters",
    401: "Unauthorized - Invalid or missing API key",
    403: "Forbidden - Access denied to the requested resource",
    404: "Not Found - The requested resource was not found",
    429: "Rate Limited - Too many requests, please try again later",
    500: "Internal Server Error - Something went wrong on our end",
    502: "Bad Gateway - The AI service is temporarily unavailable",
    503: "Service Unavailable - The AI service is temporarily down",
    504: "Gateway Timeout - The AI service took too long to respond",
}


def user_message(status_code: int) -> str:
    return _USER_MESSAGES.get(status_code, "An unexpected error occurred")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def json_safe(value: Any) -> Any:
    """Replace NaN and infinities, which strict JSON cannot carry, with their names."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {key: json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return value


class GatewayError(Exception):
    """Base class for every error the gateway knows how to render."""

    kind: ClassVar[str] = "Internal Server Error"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None, provider: str | None = None) -> None:
        super().__init__(message or self.kind)
        self.provider = provider
        self.timestamp = utc_timestamp()

    @property
    def status_code(self) -> int:
        return int(self.http_status)

    @property
    def message(self) -> str:
        return str(self)

    def to_envelope(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "error": self.kind,
            "message": self.message,
        }
        if self.provider:
            body["provider"] = self.provider
        body["userMessage"] = user_message(self.status_code)
        body["timestamp"] = self.timestamp
        return body


class ValidationError(GatewayError):
    """Client-correctable input problem; carries one entry per bad field."""

    kind = "Validation Error"
    http_status = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str = "Request validation failed",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = [json_safe(detail) for detail in details or []]

    def to_envelope(self) -> dict[str, Any]:
        body = super().to_envelope()
        if self.details:
            body["details"] = self.details
        return body


class CompatibilityError(ValidationError):
    """The (model, provider) pair is not in the compatibility table."""

    kind = "Compatibility Error"

    def __init__(self, model: str, provider: str) -> None:
        super().__init__(f"Model '{model}' is not compatible with provider '{provider}'")
        self.model = model
        self.provider = provider


class ConfigurationError(GatewayError):
    """Missing or invalid operator configuration (e.g. absent API key)."""

    kind = "Configuration Error"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR


class ProviderNotFoundError(GatewayError):
    kind = "Provider Not Found"
    http_status = HTTPStatus.NOT_FOUND

    def __init__(self, provider: str) -> None:
        super().__init__(f"Provider '{provider}' is not supported", provider=provider)


class ProviderUnavailableError(GatewayError):
    kind = "Provider Unavailable"
    http_status = HTTPStatus.SERVICE_UNAVAILABLE

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"Provider '{provider}' is not configured or API key is missing",
            provider=provider,
        )


class UpstreamAPIError(GatewayError):
    """
    Failure reported by (or while reaching) a third-party provider.

    The status code mirrors the upstream HTTP status when one was received,
    otherwise 502 for network failures and 504 for timeouts.
    """

    kind = "API Error"
    http_status = HTTPStatus.BAD_GATEWAY

    def __init__(self, message: str, status_code: int, provider: str) -> None:
        super().__init__(message, provider=provider)
        self._status_code = status_code

    @property
    def status_code(self) -> int:
        return self._status_code


class NotFoundError(GatewayError):
    kind = "Not Found"
    http_status = HTTPStatus.NOT_FOUND


class ChatNotFoundError(NotFoundError):
    def __init__(self, chat_id: str) -> None:
        super().__init__(f"Chat '{chat_id}' not found")
        self.chat_id = chat_id


class InternalError(GatewayError):
    """Wraps anything unclassified so it still renders as an envelope."""
