"""Monthly billing status for a single device."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime

from ..models import (
    BillingStatus,
    ClassificationOutcome,
    DateLike,
    Device,
    DeviceResult,
    ReportMonth,
    ServiceLog,
)

DEFAULT_UNIT_RATE = 100000.0

MISSING_DATES = ClassificationOutcome(BillingStatus.ERROR, 0, "Missing contract dates")
CONTRACT_EXPIRED = ClassificationOutcome(BillingStatus.EXPIRED, 0, "Contract Expired")
CONTRACT_NOT_STARTED = ClassificationOutcome(BillingStatus.PENDING, 0, "Contract Not Started")
FULL_MONTH_SERVICE = ClassificationOutcome(BillingStatus.SERVICE, 0, "Full Month Service")


def parse_date(value: DateLike) -> date | None:
    """Convert a date, datetime or ISO string to a date.

    Returns None for empty or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def covers_month(log: ServiceLog, month: ReportMonth, today: date) -> bool:
    """True if the log spans the whole month, boundaries inclusive.

    An ongoing log (no end date) runs until ``today``, not until the end of
    the report month, so the answer for a past month can change over time.
    Dates compare as whole days: on the last day of the month an ongoing
    log already counts as covering it.
    """
    srv_start = parse_date(log.start_date)
    if srv_start is None:
        return False

    if log.end_date in (None, ""):
        srv_end = today
    else:
        srv_end = parse_date(log.end_date)
        if srv_end is None:
            return False

    return srv_start <= month.first_day and srv_end >= month.last_day


def classify(
    device: Device,
    report_month: ReportMonth | str,
    service_logs: Iterable[ServiceLog],
    unit_rate: float = DEFAULT_UNIT_RATE,
    today: date | None = None,
) -> ClassificationOutcome:
    """Decide whether a device is billable for a month.

    Rules are checked in order and the first match wins: missing contract
    dates, contract expired before the month, contract starting after the
    month, a service log covering the whole month, otherwise billable.
    A month that only partly overlaps the contract counts as active.

    Args:
        device: Device master record.
        report_month: Month to classify, as ReportMonth or ``YYYY-MM``.
        service_logs: Service logs for this device.
        unit_rate: Cost charged for a billable month.
        today: Reference date for ongoing service logs. Defaults to today.

    Returns:
        ClassificationOutcome with status, cost and note.
    """
    if not device.sub_start_date or not device.sub_end_date:
        return MISSING_DATES

    sub_start = parse_date(device.sub_start_date)
    sub_end = parse_date(device.sub_end_date)
    if sub_start is None or sub_end is None:
        return MISSING_DATES

    month = ReportMonth.coerce(report_month)

    if month.first_day > sub_end:
        return CONTRACT_EXPIRED

    if month.last_day < sub_start:
        return CONTRACT_NOT_STARTED

    if today is None:
        today = date.today()

    if any(covers_month(log, month, today) for log in service_logs):
        return FULL_MONTH_SERVICE

    return ClassificationOutcome(BillingStatus.BILLABLE, unit_rate, "Active")


def classify_devices(
    devices: Iterable[Device],
    service_logs: Iterable[ServiceLog],
    report_month: ReportMonth | str,
    unit_rate: float = DEFAULT_UNIT_RATE,
    today: date | None = None,
) -> list[DeviceResult]:
    """Classify every device against its own service logs.

    Args:
        devices: Device master list.
        service_logs: Full service history; logs are matched by device_id.
        report_month: Month to classify.
        unit_rate: Cost charged for a billable month.
        today: Reference date for ongoing service logs.

    Returns:
        One DeviceResult per device, in input order.
    """
    month = ReportMonth.coerce(report_month)

    logs_by_device: dict[str, list[ServiceLog]] = defaultdict(list)
    for log in service_logs:
        logs_by_device[log.device_id].append(log)

    return [
        DeviceResult(
            device=device,
            outcome=classify(
                device,
                month,
                logs_by_device.get(device.device_id, []),
                unit_rate=unit_rate,
                today=today,
            ),
        )
        for device in devices
    ]
