"""Prometheus metrics for profile generation, payoff projections and request latency"""

from prometheus_client import Counter, Histogram

# Profile metrics
profile_generated_counter = Counter(
    "cerebral_profile_generated_total",
    "Financial profiles generated",
    ["format"],  # json | narrative | download
)

recommendation_counter = Counter(
    "cerebral_recommendations_total",
    "Recommendations issued across all generated profiles",
)

# Amortization metrics
never_amortizes_counter = Counter(
    "cerebral_never_amortizes_total",
    "Instruments whose payment does not cover accruing interest",
    ["kind"],  # credit_card | loan | calculator
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_profile(output_format: str, recommendation_count: int) -> None:
    """Record one generated profile and how many recommendations it carried"""
    profile_generated_counter.labels(format=output_format).inc()
    recommendation_counter.inc(recommendation_count)


def record_never_amortizes(kind: str) -> None:
    never_amortizes_counter.labels(kind=kind).inc()
