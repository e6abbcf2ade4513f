"""
Defines and manages Prometheus metrics for the application.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# The module may be imported several times during a test session; reuse an
# already registered collector instead of failing on duplicate registration.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "strategy_attempts": Counter(
            "postharvest_strategy_attempts_total",
            "Extraction strategy attempts",
            ["strategy"],
        ),
        "strategy_success": Counter(
            "postharvest_strategy_success_total",
            "Extraction strategy attempts that produced content",
            ["strategy"],
        ),
        "strategy_failures": Counter(
            "postharvest_strategy_failures_total",
            "Extraction strategy failures by error type",
            ["strategy", "error_type"],
        ),
        "extraction_duration_seconds": Histogram(
            "postharvest_extraction_duration_seconds",
            "Time spent in one extraction strategy",
            ["strategy"],
            buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        ),
        "extractions_failed": Counter(
            "postharvest_extractions_failed_total",
            "Extraction requests where every strategy failed",
        ),
        "fetch_responses": Counter(
            "postharvest_fetch_responses_total",
            "HTTP responses received by the page fetcher by status class",
            ["status_class"],
        ),
        "proxy_requests": Counter(
            "postharvest_proxy_requests_total",
            "Media proxy requests by upstream status class",
            ["status_class"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()


def status_class(status_code: int) -> str:
    """Bucket a status code into ``2xx``/``3xx``/``4xx``/``5xx``."""
    return f"{status_code // 100}xx"
