"""Command-line interface for GPS subscription billing."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Config, ensure_directories, load_config
from .ingest import (
    IngestResult,
    VendorInvoiceBook,
    load_devices,
    load_service_logs,
    load_vendor_records,
)
from .logging import configure_logging
from .models import BillingStatus, ReportMonth
from .services.report_service import ReportService

app = typer.Typer(
    name="subgps",
    help="GPS tracker subscription billing and vendor reconciliation.",
    no_args_is_help=True,
)

console = Console()

# Global options
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file"),
]
MonthOption = Annotated[
    Optional[str],
    typer.Option("--month", "-m", help="Report month (YYYY-MM), defaults to current month"),
]
DevicesOption = Annotated[
    Optional[Path],
    typer.Option("--devices", "-d", help="Device master CSV"),
]
LogsOption = Annotated[
    Optional[Path],
    typer.Option("--logs", "-l", help="Service log CSV"),
]

STATUS_STYLES = {
    BillingStatus.BILLABLE: "green",
    BillingStatus.SERVICE: "yellow",
    BillingStatus.PENDING: "blue",
    BillingStatus.EXPIRED: "white",
    BillingStatus.ERROR: "red",
    BillingStatus.NOT_IN_MASTER: "red",
}

DISCREPANCY_STYLES = {
    "MATCH": "green",
    "DISPUTE": "red",
    "MISSING": "yellow",
}


def get_config(config_path: Path | None) -> Config:
    """Load configuration and set up logging."""
    config = load_config(config_path)
    ensure_directories(config)
    configure_logging(config)
    return config


def parse_month(month: str | None) -> ReportMonth:
    """Parse the --month option, exiting on a bad value."""
    try:
        return ReportMonth.coerce(month)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def require_path(path: Path | None, fallback: Path | None, option: str) -> Path:
    """Use the option value, else the configured path, else exit."""
    resolved = path or fallback
    if resolved is None:
        console.print(f"[red]No file given for {option} and none configured[/red]")
        raise typer.Exit(1)
    return resolved


def show_errors(label: str, result: IngestResult) -> None:
    """Print ingest errors, first 10 only."""
    if not result.errors:
        return
    console.print(f"\n[red]{label} errors ({len(result.errors)}):[/red]")
    for error in result.errors[:10]:
        console.print(f"  - {error}")
    if len(result.errors) > 10:
        console.print(f"  ... and {len(result.errors) - 10} more")


def build_service(
    config: Config,
    devices: Path | None,
    logs: Path | None,
    vendor_book: VendorInvoiceBook | None = None,
) -> ReportService:
    """Load master data and service logs into a ReportService."""
    devices_path = require_path(devices, config.snapshots.devices, "--devices")
    device_result = load_devices(devices_path, config)
    show_errors("Device file", device_result)

    log_rows = []
    logs_path = logs or config.snapshots.service_logs
    if logs_path is not None:
        log_result = load_service_logs(logs_path, config)
        show_errors("Service log file", log_result)
        log_rows = log_result.rows

    return ReportService(config, device_result.rows, log_rows, vendor_book)


def money(config: Config, amount: float) -> str:
    return f"{config.billing.currency}{amount:,.0f}"


@app.command()
def version():
    """Show version information."""
    console.print(f"subgps version {__version__}")


@app.command()
def report(
    devices: DevicesOption = None,
    logs: LogsOption = None,
    month: MonthOption = None,
    config_path: ConfigOption = None,
):
    """Show billing status per device, grouped by division."""
    config = get_config(config_path)
    report_month = parse_month(month)
    service = build_service(config, devices, logs)

    result = service.build_report(report_month)

    if not result.divisions:
        console.print("[yellow]No devices found[/yellow]")
        raise typer.Exit(0)

    for summary in result.divisions.values():
        table = Table(
            title=f"Division: {summary.division}",
            caption=(
                f"Total Devices: {summary.total_devices}  "
                f"Billable: {summary.billable_count}  "
                f"Total Cost: {money(config, summary.total_cost)}"
            ),
        )
        table.add_column("Device ID", style="cyan")
        table.add_column("Unit Name", style="white")
        table.add_column("Branch", style="white")
        table.add_column("Type", style="white")
        table.add_column("Contract", style="white")
        table.add_column("Status", style="white")
        table.add_column("Note", style="white")
        table.add_column("Cost", style="green", justify="right")

        for item in summary.items:
            device = item.device
            style = STATUS_STYLES.get(item.status, "white")
            table.add_row(
                device.device_id,
                device.name or "",
                device.branch or "",
                device.type or "",
                f"{device.sub_start_date or '?'} .. {device.sub_end_date or '?'}",
                f"[{style}]{item.status}[/{style}]",
                item.note,
                money(config, item.cost),
            )

        console.print(table)

    totals = Table(title=f"Billing Report - {result.report_month}")
    totals.add_column("Metric", style="cyan")
    totals.add_column("Value", style="green")
    totals.add_row("Divisions", str(len(result.divisions)))
    totals.add_row("Devices", str(result.total_devices))
    totals.add_row("Billable", str(result.billable_count))
    totals.add_row("Total Cost", money(config, result.total_cost))
    console.print(totals)


@app.command()
def reconcile(
    vendor: Annotated[
        Optional[Path],
        typer.Option("--vendor", "-v", help="Vendor invoice CSV (MONTH, PLAT NO)"),
    ] = None,
    devices: DevicesOption = None,
    logs: LogsOption = None,
    month: MonthOption = None,
    config_path: ConfigOption = None,
):
    """Compare internally billable devices with the vendor's billed list."""
    config = get_config(config_path)
    report_month = parse_month(month)

    vendor_path = require_path(vendor, config.snapshots.vendor_invoices, "--vendor")
    vendor_result = load_vendor_records(vendor_path, report_month, config)
    show_errors("Vendor file", vendor_result)

    book = VendorInvoiceBook()
    book.replace_month(report_month, vendor_result.rows)

    service = build_service(config, devices, logs, book)
    result = service.build_reconciliation(report_month)

    if not result.has_vendor_data:
        console.print(f"[yellow]No vendor records for {report_month}[/yellow]")

    table = Table(title=f"Vendor Reconciliation - {report_month}")
    table.add_column("Device ID", style="cyan")
    table.add_column("Unit Name", style="white")
    table.add_column("Division", style="white")
    table.add_column("Vendor Status", style="white")
    table.add_column("Internal Status", style="white")
    table.add_column("Our Recommendation", style="white")
    table.add_column("Discrepancy", style="white")
    table.add_column("Reason", style="white")
    table.add_column("Cost", style="green", justify="right")

    for record in result.records:
        style = DISCREPANCY_STYLES.get(record.discrepancy, "white")
        table.add_row(
            record.device_id,
            record.device.name or "",
            record.device.division or "",
            record.vendor_status,
            str(record.internal_status),
            record.our_recommendation,
            f"[{style}]{record.discrepancy}[/{style}]",
            record.reason,
            money(config, record.cost),
        )

    console.print(table)

    summary = result.summary
    totals = Table(title="Reconciliation Summary")
    totals.add_column("Metric", style="cyan")
    totals.add_column("Value", style="green")
    totals.add_row("Records", str(summary.total))
    totals.add_row("Matched", str(summary.matched))
    totals.add_row("Disputes", str(summary.disputes))
    totals.add_row("Missing", str(summary.missing))
    totals.add_row("Vendor Billed", str(summary.vendor_total))
    totals.add_row("Our Billable", str(summary.our_billable_total))
    console.print(totals)


if __name__ == "__main__":
    app()
