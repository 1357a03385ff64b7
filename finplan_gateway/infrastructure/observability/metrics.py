"""Prometheus metrics for planner usage, strategy generation and analyzer health"""

from typing import Iterable
from prometheus_client import Counter, Histogram

# Debt planner metrics
debt_plan_counter = Counter(
    "finplan_debt_plan_total",
    "Total debt plans computed",
    ["strategy", "outcome"],  # outcome: debt_free | horizon_reached
)

# Forecast metrics
forecast_counter = Counter(
    "finplan_forecast_total",
    "Forecasts generated per scenario",
    ["scenario"],
)

# Strategy engine metrics
strategy_generation_histogram = Histogram(
    "finplan_strategy_generation_seconds",
    "Strategy generation pipeline duration",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

analyzer_failure_counter = Counter(
    "finplan_analyzer_failures_total",
    "Analyzer executions that raised",
    ["analyzer"],
)

recommendations_created_counter = Counter(
    "finplan_recommendations_created_total",
    "Recommendations persisted",
    ["category"],
)

recommendation_transition_counter = Counter(
    "finplan_recommendation_transitions_total",
    "Recommendation lifecycle transitions",
    ["status"],
)

# Portfolio API metrics
portfolio_fetch_failures_counter = Counter(
    "portfolio_fetch_failures_total",
    "Failed portfolio API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_debt_plan(strategy: str, horizon_reached: bool) -> None:
    outcome = "horizon_reached" if horizon_reached else "debt_free"
    debt_plan_counter.labels(strategy=strategy, outcome=outcome).inc()


def record_strategy_generation(
    duration_seconds: float,
    failed_analyzers: Iterable[str],
    created_categories: Iterable[str],
) -> None:
    """Record pipeline duration, analyzer failures and new recommendations by category"""
    strategy_generation_histogram.observe(duration_seconds)
    for analyzer in failed_analyzers:
        analyzer_failure_counter.labels(analyzer=analyzer).inc()
    for category in created_categories:
        recommendations_created_counter.labels(category=category).inc()
