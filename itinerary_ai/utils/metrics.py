"""Prometheus metrics for itinerary generation."""

from prometheus_client import Counter, Histogram

ai_provider_attempts_total = Counter(
    "ai_provider_attempts_total",
    "Total provider attempts",
    ["provider", "outcome"],
)

ai_provider_latency_ms = Histogram(
    "ai_provider_latency_ms",
    "Provider attempt latency in milliseconds",
    ["provider", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 15000, 30000],
)

ai_cache_hits_total = Counter(
    "ai_cache_hits_total",
    "Total preview cache hits",
    ["tier"],
)

ai_generation_failures_total = Counter(
    "ai_generation_failures_total",
    "Total requests where every provider failed",
)


class PrometheusOrchestrationMetrics:
    """Prometheus-based orchestration metrics implementation."""

    def record_attempt(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record one provider attempt."""
        ai_provider_attempts_total.labels(provider=provider, outcome=outcome).inc()
        ai_provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_cache_hit(self, tier: str) -> None:
        """Increment cache hit counter."""
        ai_cache_hits_total.labels(tier=tier).inc()

    def inc_failure(self) -> None:
        """Increment exhausted-providers counter."""
        ai_generation_failures_total.inc()
