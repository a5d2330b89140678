"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


outfit_generation_total = Counter(
    "outfit_generation_total",
    "Total number of outfit generation requests sent to the model.",
)

outfit_generation_failures_total = Counter(
    "outfit_generation_failures_total",
    "Outfit generation requests that returned no usable candidates.",
)

reconciled_items = Histogram(
    "outfit_reconciled_items",
    "Number of inventory items resolved per suggested outfit.",
    buckets=(0, 1, 2, 3, 4, 5, 6, 8, 10),
)
