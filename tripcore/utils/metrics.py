"""Prometheus metrics for provider calls and the itinerary read cache."""

from prometheus_client import Counter, Histogram

# Provider call metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Outbound provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total outbound provider call errors",
    ["provider", "reason"],
)

# Read cache metrics
itinerary_cache_hits_total = Counter(
    "itinerary_cache_hits_total",
    "Total itinerary read cache hits",
    ["kind"],
)

itinerary_cache_invalidations_total = Counter(
    "itinerary_cache_invalidations_total",
    "Total itinerary read cache entries invalidated by writes",
    ["kind"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment error counter."""
        provider_errors_total.labels(provider=provider, reason=reason).inc()


class PrometheusCacheMetrics:
    """Prometheus-based read cache metrics implementation."""

    def inc_hit(self, kind: str) -> None:
        """Increment cache hit counter."""
        itinerary_cache_hits_total.labels(kind=kind).inc()

    def inc_invalidation(self, kind: str, count: int = 1) -> None:
        """Increment invalidation counter."""
        itinerary_cache_invalidations_total.labels(kind=kind).inc(count)
