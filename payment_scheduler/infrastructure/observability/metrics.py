"""Prometheus metrics for scheduling outcomes and request latency"""

from prometheus_client import Counter, Histogram

# Scheduling metrics
schedule_request_counter = Counter(
    "payment_schedule_requests_total",
    "Smart schedule requests served",
    ["outcome"],  # within_budget | over_budget
)

deferred_items_histogram = Histogram(
    "payment_schedule_deferred_items",
    "Obligations deferred per smart schedule request",
    buckets=[0, 1, 2, 5, 10, 25, 50, 100],
)

skipped_obligations_counter = Counter(
    "payment_schedule_skipped_obligations_total",
    "Obligation records skipped as malformed",
    ["reason"],  # unparseable | missing_id | negative_remaining
)

# Reschedule metrics
reschedule_proposals_counter = Counter(
    "payment_reschedule_proposals_total",
    "Reschedule proposals produced for overdue obligations",
)

confirmed_schedules_counter = Counter(
    "payment_schedules_confirmed_total",
    "Schedule entries persisted",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_schedule_result(is_over_budget: bool, deferred_count: int, skipped_ids: list) -> None:
    """Record per-request scheduling metrics"""
    outcome = "over_budget" if is_over_budget else "within_budget"
    schedule_request_counter.labels(outcome=outcome).inc()
    deferred_items_histogram.observe(deferred_count)

    for obligation_id in skipped_ids:
        reason = "missing_id" if obligation_id is None else "negative_remaining"
        skipped_obligations_counter.labels(reason=reason).inc()
