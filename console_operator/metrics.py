"""Prometheus metrics for the sync loop."""
from prometheus_client import Counter, Gauge

sync_total = Counter(
    "console_operator_sync_total",
    "Sync cycles run, by result",
    ["result"],
)

removal_failures_total = Counter(
    "console_operator_removal_failures_total",
    "Teardown actions that failed for a reason other than not-found",
    ["resource"],
)

management_state = Gauge(
    "console_operator_management_state",
    "Management state observed by the last sync (1 = current)",
    ["state"],
)


def record_state(state: str):
    for known in ("Managed", "Unmanaged", "Removed"):
        management_state.labels(state=known).set(1 if known == state else 0)
