"""Prometheus metrics definitions"""

from prometheus_client import Counter, Histogram


# Pipeline throughput
orders_loaded = Counter(
    'orders_loaded_total',
    'Orders read from the order source'
)

orders_processed = Counter(
    'orders_processed_total',
    'Orders that received a final discount'
)

orders_persisted = Counter(
    'orders_persisted_total',
    'Orders written to the orders table',
    labelnames=['status']  # success, failure
)

ingestion_failures = Counter(
    'ingestion_failures_total',
    'Order source reads that failed or rows that were skipped',
    labelnames=['reason']  # unreadable, malformed_row
)

database_connection_failures = Counter(
    'database_connection_failures_total',
    'Persist phases skipped because the database was unreachable'
)

# Discount distribution
final_discount_percent = Histogram(
    'final_discount_percent',
    'Final aggregated discount per order',
    buckets=[0, 5, 10, 20, 30, 50, 100]
)

pipeline_run_time = Histogram(
    'pipeline_run_seconds',
    'Time to complete one pipeline run',
    buckets=[0.1, 0.5, 1, 5, 30, 120]
)
