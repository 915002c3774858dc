from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from fastapi import Response


chat_requests = Counter(
    "gateway_chat_requests_total",
    "Chat completion requests handled by the gateway",
    ["provider", "mode", "outcome"],
)

upstream_latency = Histogram(
    "gateway_upstream_latency_seconds",
    "Wall-clock time spent waiting on the upstream provider",
    ["provider", "mode"],
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

llm_tokens = Counter(
    "gateway_llm_tokens_total",
    "LLM tokens reported by upstream providers",
    ["provider", "direction"],
)

stream_frames_dropped = Counter(
    "gateway_stream_frames_dropped_total",
    "Upstream stream frames skipped because they could not be parsed",
    ["provider"],
)


def record_usage(provider: str, usage) -> None:
    if usage is None:
        return
    llm_tokens.labels(provider=provider, direction="prompt").inc(usage.prompt_tokens)
    llm_tokens.labels(provider=provider, direction="completion").inc(usage.completion_tokens)


def metrics_response() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
