"""Prometheus metrics definitions for Stockpile."""

from __future__ import annotations

from prometheus_client import Counter

KIT_VALIDATIONS = Counter(
    "stockpile_kit_validations_total",
    "Number of kit files validated by result",
    ["result"],
)

KIT_OPERATIONS = Counter(
    "stockpile_kit_operations_total",
    "Kit registry operations by operation and outcome",
    ["operation", "outcome"],
)

ALERTS_GENERATED = Counter(
    "stockpile_alerts_generated_total",
    "Alerts produced by the alert generator by severity",
    ["severity"],
)

__all__ = [
    "KIT_VALIDATIONS",
    "KIT_OPERATIONS",
    "ALERTS_GENERATED",
]
