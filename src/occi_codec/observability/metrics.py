"""Prometheus metrics for the OCCI codec.

Key Responsibilities:
    - Count decoded requests per wire format and payload shape
    - Count decode failures per error class
    - Count and time rendered responses

Collaborators:
    - Upstream: Parsers and presenters in ``occi_codec.presentation``
    - Downstream: Prometheus scraping the default registry

Thread Safety:
    - Thread-safe: All metric operations use atomic Prometheus operations
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from prometheus_client import Counter, Histogram

# ==============================================================================
# METRIC DEFINITIONS
# ==============================================================================

DECODE_TOTAL = Counter(
    "occi_codec_decode_total",
    "Normalized requests produced by the codec parsers",
    ["media_type", "shape"],
)

DECODE_FAILURES_TOTAL = Counter(
    "occi_codec_decode_failures_total",
    "Inbound payloads rejected by the codec parsers",
    ["media_type", "error"],
)

RENDER_TOTAL = Counter(
    "occi_codec_render_total",
    "Responses rendered by the codec presenters",
    ["media_type", "shape", "status"],
)

RENDER_DURATION_SECONDS = Histogram(
    "occi_codec_render_duration_seconds",
    "Time spent rendering a response",
    ["media_type"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# ==============================================================================
# RECORDING HELPERS
# ==============================================================================


def record_decode(media_type: str, shape: str, count: int = 1) -> None:
    """Record ``count`` normalized requests decoded as ``shape``."""
    if count > 0:
        DECODE_TOTAL.labels(media_type, shape).inc(count)


def record_decode_failure(media_type: str, error: BaseException) -> None:
    """Record a rejected inbound payload."""
    DECODE_FAILURES_TOTAL.labels(media_type, type(error).__name__).inc()


def record_render(media_type: str, shape: str, status: int, duration_seconds: float) -> None:
    """Record a rendered response and its rendering latency."""
    RENDER_TOTAL.labels(media_type, shape, str(status)).inc()
    RENDER_DURATION_SECONDS.labels(media_type).observe(duration_seconds)


__all__ = [
    "DECODE_FAILURES_TOTAL",
    "DECODE_TOTAL",
    "RENDER_DURATION_SECONDS",
    "RENDER_TOTAL",
    "record_decode",
    "record_decode_failure",
    "record_render",
]
