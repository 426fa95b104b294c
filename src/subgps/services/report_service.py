"""Report service tying snapshots to the billing computations."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from ..config import Config
from ..ingest.vendor import VendorInvoiceBook
from ..logging import get_logger
from ..models import Device, DeviceResult, ReportMonth, ServiceLog
from ..processing.aggregator import DivisionSummary, aggregate_by_division
from ..processing.classifier import classify_devices
from ..processing.reconciler import ReconciliationResult, reconcile


@dataclass
class DivisionReport:
    """Division report for one month."""

    report_month: ReportMonth
    results: list[DeviceResult] = field(default_factory=list)
    divisions: dict[str, DivisionSummary] = field(default_factory=dict)

    @property
    def total_devices(self) -> int:
        return sum(d.total_devices for d in self.divisions.values())

    @property
    def billable_count(self) -> int:
        return sum(d.billable_count for d in self.divisions.values())

    @property
    def total_cost(self) -> float:
        return sum(d.total_cost for d in self.divisions.values())


class ReportService:
    """Builds monthly division reports and vendor reconciliations.

    The service only holds the snapshots it was given; every call computes
    fresh results.
    """

    def __init__(
        self,
        config: Config,
        devices: Iterable[Device],
        service_logs: Iterable[ServiceLog],
        vendor_book: VendorInvoiceBook | None = None,
        today: date | None = None,
    ):
        self.config = config
        self.devices = list(devices)
        self.service_logs = list(service_logs)
        self.vendor_book = vendor_book or VendorInvoiceBook()
        self.today = today

    def classify(self, month: ReportMonth | str | None = None) -> list[DeviceResult]:
        """Classify every device for a month (default: current month)."""
        report_month = ReportMonth.coerce(month)
        return classify_devices(
            self.devices,
            self.service_logs,
            report_month,
            unit_rate=self.config.billing.unit_rate,
            today=self.today,
        )

    def build_report(self, month: ReportMonth | str | None = None) -> DivisionReport:
        """Classify devices and group them by division."""
        report_month = ReportMonth.coerce(month)
        results = self.classify(report_month)
        report = DivisionReport(
            report_month=report_month,
            results=results,
            divisions=aggregate_by_division(results),
        )
        log = get_logger(__name__, month=report_month)
        log.info(
            "report_built",
            devices=report.total_devices,
            divisions=len(report.divisions),
            billable=report.billable_count,
            total_cost=report.total_cost,
        )
        return report

    def build_reconciliation(self, month: ReportMonth | str | None = None) -> ReconciliationResult:
        """Reconcile the month's internal results with vendor records."""
        report_month = ReportMonth.coerce(month)
        results = self.classify(report_month)
        vendor_records = self.vendor_book.records_for(report_month)

        result = reconcile(results, vendor_records)
        summary = result.summary
        log = get_logger(__name__, month=report_month)
        log.info(
            "reconciliation_built",
            records=summary.total,
            matched=summary.matched,
            disputes=summary.disputes,
            missing=summary.missing,
            vendor_total=summary.vendor_total,
        )
        if not result.has_vendor_data:
            log.warning("no_vendor_data")
        return result
