"""Cross-check of internal billing results against the vendor's billed list."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from ..models import BillingStatus, Device, DeviceResult, VendorRecord

VendorStatus = Literal["BILLED", "NOT_BILLED"]
Recommendation = Literal["BILLED", "UNBILLED"]
Discrepancy = Literal["MATCH", "DISPUTE", "MISSING"]

UNKNOWN_DEVICE_NAME = "Unknown"
NOT_IN_MASTER_REASON = "Device not in master data"
VENDOR_NOT_BILLING_REASON = "Should be billed but vendor not billing"


@dataclass
class ReconciliationRecord:
    """Outcome of comparing one device's vendor and internal billing."""

    device_id: str
    device: Device
    vendor_status: VendorStatus
    internal_status: BillingStatus
    our_recommendation: Recommendation
    discrepancy: Discrepancy
    reason: str
    cost: float


@dataclass
class ReconciliationSummary:
    """Counts over a reconciliation run."""

    total: int = 0
    matched: int = 0
    disputes: int = 0
    missing: int = 0
    vendor_total: int = 0
    our_billable_total: int = 0


@dataclass
class ReconciliationResult:
    """Reconciliation records plus their summary."""

    records: list[ReconciliationRecord] = field(default_factory=list)
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)

    @property
    def has_vendor_data(self) -> bool:
        """Whether any vendor records were supplied."""
        return self.summary.vendor_total > 0


def _vendor_billed(vendor: VendorRecord, internal: DeviceResult | None) -> ReconciliationRecord:
    if internal is None:
        return ReconciliationRecord(
            device_id=vendor.device_id,
            device=Device(
                device_id=vendor.device_id,
                name=UNKNOWN_DEVICE_NAME,
                division=vendor.division,
            ),
            vendor_status="BILLED",
            internal_status=BillingStatus.NOT_IN_MASTER,
            our_recommendation="UNBILLED",
            discrepancy="DISPUTE",
            reason=NOT_IN_MASTER_REASON,
            cost=0,
        )

    should_bill = internal.status == BillingStatus.BILLABLE
    return ReconciliationRecord(
        device_id=vendor.device_id,
        device=internal.device,
        vendor_status="BILLED",
        internal_status=internal.status,
        our_recommendation="BILLED" if should_bill else "UNBILLED",
        discrepancy="MATCH" if should_bill else "DISPUTE",
        reason=internal.note,
        cost=internal.cost,
    )


def reconcile(
    results: Iterable[DeviceResult],
    vendor_records: Iterable[VendorRecord],
) -> ReconciliationResult:
    """Compare internal billing results with vendor billed devices.

    Vendor records are processed first, in order, one reconciliation record
    each (duplicate vendor rows give duplicate records). Billable devices the
    vendor did not report follow as MISSING. Devices neither billed by the
    vendor nor billable internally are left out.

    Args:
        results: Classified devices for the month.
        vendor_records: Vendor billed devices for the same month.

    Returns:
        ReconciliationResult with records and summary.
    """
    results = list(results)
    vendor_records = list(vendor_records)

    # Last result wins if master data repeats a device id, as in the loader
    internal_by_id: dict[str, DeviceResult] = {r.device_id: r for r in results}
    vendor_ids = {v.device_id for v in vendor_records}

    records = [_vendor_billed(v, internal_by_id.get(v.device_id)) for v in vendor_records]

    for result in results:
        if result.status == BillingStatus.BILLABLE and result.device_id not in vendor_ids:
            records.append(
                ReconciliationRecord(
                    device_id=result.device_id,
                    device=result.device,
                    vendor_status="NOT_BILLED",
                    internal_status=result.status,
                    our_recommendation="BILLED",
                    discrepancy="MISSING",
                    reason=VENDOR_NOT_BILLING_REASON,
                    cost=result.cost,
                )
            )

    summary = ReconciliationSummary(
        total=len(records),
        matched=sum(1 for r in records if r.discrepancy == "MATCH"),
        disputes=sum(1 for r in records if r.discrepancy == "DISPUTE"),
        missing=sum(1 for r in records if r.discrepancy == "MISSING"),
        vendor_total=len(vendor_records),
        our_billable_total=sum(1 for r in results if r.status == BillingStatus.BILLABLE),
    )

    return ReconciliationResult(records=records, summary=summary)
