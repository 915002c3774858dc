"""
Request/response contracts shared by the validator, the adapters and the
HTTP layer.

Every adapter produces the same NormalizedResponse / StreamChunk shapes no
matter how its upstream frames the data.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from shared.contracts.catalog import KNOWN_MODELS, SUPPORTED_PROVIDERS

PROMPT_MAX_LENGTH = 10000


class ChatParameters(BaseModel):
    """Generation knobs; unset numeric fields are filled from configured defaults."""

    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1, le=8000)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    stop: list[str] | None = Field(default=None, max_length=4)
    stream: bool = False

    def with_defaults(self, defaults: Mapping[str, Any]) -> ChatParameters:
        missing = {
            name: value
            for name, value in defaults.items()
            if name in type(self).model_fields and getattr(self, name) is None
        }
        return self.model_copy(update=missing) if missing else self


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    prompt: str = Field(min_length=1, max_length=PROMPT_MAX_LENGTH)
    model: str
    provider: str
    parameters: ChatParameters = Field(default_factory=ChatParameters)

    @field_validator("model")
    @classmethod
    def _known_model(cls, value: str) -> str:
        if value not in KNOWN_MODELS:
            raise PydanticCustomError("invalid_model", "Invalid model selection")
        return value

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, value: str) -> str:
        if value not in SUPPORTED_PROVIDERS:
            raise PydanticCustomError("invalid_provider", "Invalid provider selection")
        return value


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ResponseMetadata(BaseModel):
    model: str
    finish_reason: str | None = None


class NormalizedResponse(BaseModel):
    content: str
    usage: Usage | None = None
    metadata: ResponseMetadata

    def to_dict(self) -> dict[str, Any]:
        body = self.model_dump()
        if self.usage is None:
            body.pop("usage")
        return body


class StreamChunk(BaseModel):
    """
    Canonical streaming unit.

    Exactly one of the three shapes is used:
    ``{content, type: "content"}``, ``{type: "done"}`` or ``{error}``.
    """

    type: Literal["content", "done"] | None = None
    content: str | None = None
    error: str | None = None

    @classmethod
    def text(cls, content: str) -> StreamChunk:
        return cls(type="content", content=content)

    @classmethod
    def done(cls) -> StreamChunk:
        return cls(type="done")

    @classmethod
    def failure(cls, message: str) -> StreamChunk:
        return cls(error=message)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
