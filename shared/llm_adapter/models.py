"""Configuration records handed to the LLM adapter layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderConfig:
    """
    Per-provider credentials and endpoint, built once at startup.

    ``available`` is simply "an API key is present"; nothing probes the
    upstream to decide it.
    """

    name: str
    api_key: str | None
    base_url: str

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def __repr__(self) -> str:
        key_state = "set" if self.api_key else "missing"
        return f"ProviderConfig(name={self.name!r}, base_url={self.base_url!r}, api_key={key_state})"
