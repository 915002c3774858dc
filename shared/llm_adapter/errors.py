"""
Upstream failure classification shared by every adapter.

Adapters catch ``UPSTREAM_FAILURES`` around their upstream call and hand the
exception to ``upstream_error``; the result is always an UpstreamAPIError
whose status mirrors the provider's when one was received.
"""

from __future__ import annotations

from typing import Any

import httpx
import openai

from shared.errors import UpstreamAPIError

NETWORK_ERROR_STATUS = 502
TIMEOUT_STATUS = 504

# ValueError covers json.JSONDecodeError; the lookup errors cover bodies that
# parse but lack the expected fields.
UPSTREAM_FAILURES: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    openai.APIError,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    AttributeError,
)


def extract_error_message(data: Any) -> str | None:
    """Pull a human message out of the common provider error bodies."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str) and error:
        return error
    message = data.get("message")
    return message if isinstance(message, str) and message else None


def _response_message(response: httpx.Response) -> str | None:
    try:
        return extract_error_message(response.json())
    except (ValueError, httpx.ResponseNotRead):
        return None


def upstream_error(exc: Exception, provider: str, operation: str) -> UpstreamAPIError:
    if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException)):
        return UpstreamAPIError(f"{operation} timed out", TIMEOUT_STATUS, provider)

    if isinstance(exc, openai.APIStatusError):
        message = extract_error_message(exc.body) or extract_error_message({"error": exc.body})
        return UpstreamAPIError(message or f"{operation} failed", exc.status_code, provider)

    if isinstance(exc, httpx.HTTPStatusError):
        message = _response_message(exc.response)
        return UpstreamAPIError(
            message or f"{operation} failed", exc.response.status_code, provider
        )

    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return UpstreamAPIError(f"Network error during {operation}", NETWORK_ERROR_STATUS, provider)

    return UpstreamAPIError(
        f"Malformed response during {operation}: {exc}", NETWORK_ERROR_STATUS, provider
    )
