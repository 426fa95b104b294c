"""Aggregation logic for grouping device results by division."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models import BillingStatus, DeviceResult

UNASSIGNED_DIVISION = "Unassigned"


@dataclass
class DivisionSummary:
    """Summary of device results for a single division."""

    division: str
    total_devices: int = 0
    billable_count: int = 0
    total_cost: float = 0.0
    items: list[DeviceResult] = field(default_factory=list)

    def add_result(self, result: DeviceResult) -> None:
        """Add a device result to this division summary."""
        self.items.append(result)
        self.total_devices += 1

        # Only billable devices contribute to the cost
        if result.status == BillingStatus.BILLABLE:
            self.billable_count += 1
            self.total_cost += result.cost


def division_key(result: DeviceResult) -> str:
    """Grouping key for a result. Exact string match, blank means unassigned."""
    return result.device.division or UNASSIGNED_DIVISION


def aggregate_by_division(results: Iterable[DeviceResult]) -> dict[str, DivisionSummary]:
    """Aggregate device results by division.

    Divisions appear in the order they are first seen and each division keeps
    its items in input order.

    Args:
        results: Classified devices.

    Returns:
        Dict mapping division name to DivisionSummary.
    """
    summaries: dict[str, DivisionSummary] = {}

    for result in results:
        division = division_key(result)

        if division not in summaries:
            summaries[division] = DivisionSummary(division=division)

        summaries[division].add_result(result)

    return summaries
