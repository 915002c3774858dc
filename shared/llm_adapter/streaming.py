"""Line-level helpers for relaying upstream server-sent events."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

from shared.observability.metrics import stream_frames_dropped

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the payload of every ``data:`` line; other SSE fields are ignored."""
    async for line in lines:
        stripped = line.strip()
        if not stripped.startswith("data:"):
            continue
        yield stripped[5:].lstrip()


def parse_frame(data: str, provider: str) -> dict[str, Any] | None:
    """
    Decode one SSE data payload.

    Returns None for frames that are not a JSON object. A corrupt frame must
    not abort the stream, so it is dropped here and only logged.
    """
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed
    stream_frames_dropped.labels(provider=provider).inc()
    logger.debug("Dropped malformed %s stream frame: %.200s", provider, data)
    return None
