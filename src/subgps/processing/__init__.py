"""Billing decisions: classification, division totals and vendor reconciliation."""

from .aggregator import UNASSIGNED_DIVISION, DivisionSummary, aggregate_by_division
from .classifier import DEFAULT_UNIT_RATE, classify, classify_devices
from .reconciler import (
    ReconciliationRecord,
    ReconciliationResult,
    ReconciliationSummary,
    reconcile,
)

__all__ = [
    "DEFAULT_UNIT_RATE",
    "DivisionSummary",
    "ReconciliationRecord",
    "ReconciliationResult",
    "ReconciliationSummary",
    "UNASSIGNED_DIVISION",
    "aggregate_by_division",
    "classify",
    "classify_devices",
    "reconcile",
]
