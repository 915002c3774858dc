"""Interface that every provider adapter implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from shared.contracts.chat import ChatParameters, NormalizedResponse, StreamChunk


class ChatProvider(ABC):
    """
    Contract for provider adapters.

    Every implementation MUST:
    - Return a NormalizedResponse regardless of the upstream's field names
    - Raise UpstreamAPIError (never a transport/SDK exception) on failure
    - Yield stream chunks in the order the upstream produced them and finish
      a successful stream with a single ``done`` chunk
    """

    provider_name: str

    @abstractmethod
    async def generate_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> NormalizedResponse:
        """Make one blocking upstream call and normalize its result."""

    @abstractmethod
    def stream_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> AsyncIterator[StreamChunk]:
        """Async generator of canonical chunks for one streamed completion."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} provider={self.provider_name!r}>"
