"""Prometheus metrics for installment schedule writes and HTTP traffic"""

from prometheus_client import Counter, Histogram

# Schedule metrics
schedule_materialized_counter = Counter(
    "ledger_schedule_materialized_total",
    "Installment schedules written",
    ["trigger"],  # create | update
)

estimated_fee_bucket_counter = Counter(
    "ledger_estimated_fee_bucket",
    "Estimated installment fees by bucket",
    ["bucket"],  # 0, 1-10k, 10k-50k, 50k+
)

children_deleted_counter = Counter(
    "ledger_children_deleted_total",
    "Installment children removed by regeneration, conversion or cascade",
)

rollback_counter = Counter(
    "ledger_transaction_rollbacks_total",
    "Multi-row ledger transitions rolled back",
    ["reason"],  # validation | integrity | storage
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_schedule(trigger: str, estimated_total_fee: int, children_deleted: int = 0) -> None:
    """Record a materialized schedule and bucket its estimated fee"""
    schedule_materialized_counter.labels(trigger=trigger).inc()
    if children_deleted:
        children_deleted_counter.inc(children_deleted)

    if estimated_total_fee == 0:
        bucket = "0"
    elif estimated_total_fee <= 10_000:
        bucket = "1-10k"
    elif estimated_total_fee <= 50_000:
        bucket = "10k-50k"
    else:
        bucket = "50k+"

    estimated_fee_bucket_counter.labels(bucket=bucket).inc()
