"""
Chat request validation.

Two passes: the schema pass collects every field violation at once (it never
stops at the first), and only when it succeeds does the O(1) compatibility
lookup on (model, provider) run. Nothing here talks to a provider.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from shared.contracts.catalog import is_compatible
from shared.contracts.chat import PROMPT_MAX_LENGTH, ChatRequest
from shared.errors import CompatibilityError, ValidationError
from shared.logging.logger import log_fields

logger = logging.getLogger(__name__)

_MESSAGES: dict[tuple[str, str], str] = {
    ("prompt", "missing"): "Prompt is required",
    ("prompt", "string_too_short"): "Prompt cannot be empty",
    ("prompt", "string_too_long"): f"Prompt cannot exceed {PROMPT_MAX_LENGTH} characters",
    ("prompt", "string_type"): "Prompt must be a string",
    ("model", "missing"): "Model selection is required",
    ("provider", "missing"): "Provider selection is required",
    ("parameters.stop", "too_long"): "Stop can contain at most 4 sequences",
}


def _detail(error: Mapping[str, Any]) -> dict[str, Any]:
    field = ".".join(str(part) for part in error["loc"])
    message = _MESSAGES.get((field, error["type"]), error["msg"])
    value = None if error["type"] == "missing" else error.get("input")
    return {"field": field, "message": message, "value": value}


def validate_chat_request(body: Any, defaults: Mapping[str, Any]) -> ChatRequest:
    """
    Turn a raw JSON body into a ChatRequest with defaults applied.

    Raises ValidationError listing every bad field, or CompatibilityError when
    the model does not belong to the requested provider. Unknown fields are
    dropped silently.
    """
    if not isinstance(body, dict):
        raise ValidationError(
            details=[
                {"field": "body", "message": "Request body must be a JSON object", "value": None}
            ]
        )

    try:
        request = ChatRequest.model_validate(body)
    except PydanticValidationError as exc:
        details = [_detail(error) for error in exc.errors(include_url=False)]
        logger.warning("Request validation failed", extra=log_fields(errors=details))
        raise ValidationError(details=details) from exc

    if not is_compatible(request.model, request.provider):
        logger.warning(
            "Model-provider compatibility check failed",
            extra=log_fields(model=request.model, provider=request.provider),
        )
        raise CompatibilityError(request.model, request.provider)

    logger.debug(
        "Request validation successful",
        extra=log_fields(
            model=request.model,
            provider=request.provider,
            prompt_length=len(request.prompt),
        ),
    )
    return request.model_copy(
        update={"parameters": request.parameters.with_defaults(defaults)}
    )
