"""
Metrics definitions for alertfeed.

This module defines Prometheus metrics for monitoring
the feed polling pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
feed_fetches = Counter(
    "feed_fetches_total",
    "Feed fetch results by kind (live, fallback, empty)",
    ["feed", "kind"]
)

records_normalized = Counter(
    "records_normalized_total",
    "Number of alert records produced by normalization",
    ["feed"]
)

malformed_payloads = Counter(
    "malformed_payloads_total",
    "Number of payloads rejected by normalization",
    ["feed"]
)

notifications_sent = Counter(
    "notifications_sent_total",
    "Number of notifications emitted",
    ["feed"]
)

alerts_duplicate = Counter(
    "alerts_duplicate_total",
    "Number of records suppressed as already seen",
    ["feed"]
)

cycles_skipped = Counter(
    "poll_cycles_skipped_total",
    "Ticks skipped because a cycle was still in flight"
)

# 히스토그램 메트릭
cycle_seconds = Histogram(
    "poll_cycle_duration_seconds",
    "Time spent in one fetch-normalize-dispatch cycle",
    buckets=[0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
)

# 게이지 메트릭
seen_store_size = Gauge(
    "seen_store_size",
    "Current number of remembered dedup keys",
    ["feed"]
)

last_cycle_timestamp = Gauge(
    "last_poll_cycle_timestamp_seconds",
    "Unix time of the last completed poll cycle"
)
