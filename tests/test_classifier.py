"""Tests for monthly device status classification."""

from datetime import date, datetime

import pytest

from subgps.models import BillingStatus, Device, ReportMonth, ServiceLog
from subgps.processing.classifier import (
    DEFAULT_UNIT_RATE,
    classify,
    classify_devices,
    covers_month,
    parse_date,
)

TODAY = date(2024, 6, 15)


def make_device(
    device_id: str = "D1",
    sub_start_date="2023-01-01",
    sub_end_date="2025-01-01",
    division: str | None = "Logistics",
) -> Device:
    """Helper to create test devices."""
    return Device(
        device_id=device_id,
        name="Truck A",
        branch="Jakarta",
        division=division,
        type="GPS Only",
        sub_start_date=sub_start_date,
        sub_end_date=sub_end_date,
        status="Active",
    )


def make_log(device_id: str = "D1", start_date="2024-03-01", end_date="2024-03-31") -> ServiceLog:
    """Helper to create test service logs."""
    return ServiceLog(device_id=device_id, start_date=start_date, end_date=end_date)


class TestParseDate:
    """Tests for parse_date function."""

    def test_iso_date(self):
        assert parse_date("2024-03-01") == date(2024, 3, 1)

    def test_iso_datetime(self):
        assert parse_date("2024-03-01T10:30:00") == date(2024, 3, 1)

    def test_utc_suffix(self):
        assert parse_date("2024-03-01T10:30:00Z") == date(2024, 3, 1)

    def test_date_object(self):
        assert parse_date(date(2024, 3, 1)) == date(2024, 3, 1)

    def test_datetime_object(self):
        assert parse_date(datetime(2024, 3, 1, 8, 0)) == date(2024, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-01"])
    def test_unparseable(self, value):
        """Blank and malformed values give None."""
        assert parse_date(value) is None


class TestMissingContractDates:
    """Devices without usable contract dates are errors."""

    @pytest.mark.parametrize(
        "start,end",
        [(None, "2025-01-01"), ("2023-01-01", None), ("", "2025-01-01"), (None, None)],
    )
    def test_missing_dates(self, start, end):
        """Any missing date gives ERROR."""
        device = make_device(sub_start_date=start, sub_end_date=end)

        outcome = classify(device, "2024-03", [], today=TODAY)

        assert outcome.status == BillingStatus.ERROR
        assert outcome.cost == 0
        assert outcome.note == "Missing contract dates"

    def test_missing_dates_wins_over_service(self):
        """Missing dates are checked before service logs."""
        device = make_device(sub_end_date=None)

        outcome = classify(device, "2024-03", [make_log()], today=TODAY)

        assert outcome.status == BillingStatus.ERROR

    def test_malformed_date_is_error(self):
        """An unparseable contract date is treated as missing."""
        device = make_device(sub_end_date="31/12/2024")

        outcome = classify(device, "2024-03", [], today=TODAY)

        assert outcome.status == BillingStatus.ERROR
        assert outcome.note == "Missing contract dates"


class TestContractPeriod:
    """Tests for the expired and pending rules."""

    def test_expired(self):
        """Month starting after the contract end is EXPIRED."""
        device = make_device("D1", "2023-01-01", "2024-01-01")

        outcome = classify(device, "2024-02", [], today=TODAY)

        assert outcome.status == BillingStatus.EXPIRED
        assert outcome.cost == 0
        assert outcome.note == "Contract Expired"

    def test_expired_ignores_service(self):
        """Expiry wins even with a covering service log."""
        device = make_device("D1", "2023-01-01", "2024-01-01")
        logs = [make_log("D1", "2024-01-15", None)]

        outcome = classify(device, "2024-02", logs, today=TODAY)

        assert outcome.status == BillingStatus.EXPIRED

    def test_contract_ending_mid_month_is_active(self):
        """A contract ending inside the month still bills that month."""
        device = make_device(sub_end_date="2024-01-01")

        outcome = classify(device, "2024-01", [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_contract_ending_last_day_is_active(self):
        device = make_device(sub_end_date="2024-02-29")

        outcome = classify(device, "2024-02", [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_pending(self):
        """Month ending before the contract start is PENDING."""
        device = make_device(sub_start_date="2024-05-01", sub_end_date="2025-05-01")

        outcome = classify(device, "2024-04", [], today=TODAY)

        assert outcome.status == BillingStatus.PENDING
        assert outcome.cost == 0
        assert outcome.note == "Contract Not Started"

    def test_contract_starting_last_day_is_active(self):
        """A contract starting on the last day of the month is not pending."""
        device = make_device(sub_start_date="2024-04-30", sub_end_date="2025-04-30")

        outcome = classify(device, "2024-04", [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE


class TestServiceCoverage:
    """Tests for the full-month service rule."""

    def test_full_month_service(self):
        """Log covering exactly the month gives SERVICE."""
        device = make_device("D2")
        logs = [make_log("D2", "2024-03-01", "2024-03-31")]

        outcome = classify(device, "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.SERVICE
        assert outcome.cost == 0
        assert outcome.note == "Full Month Service"

    def test_wider_service_interval(self):
        logs = [make_log(start_date="2024-02-10", end_date="2024-04-05")]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.SERVICE

    def test_partial_service_is_billable(self):
        """Service that misses one day of the month does not suppress billing."""
        logs = [make_log(start_date="2024-03-02", end_date="2024-03-31")]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_overlapping_partial_logs_do_not_combine(self):
        """Each log is checked alone; two halves do not make a whole."""
        logs = [
            make_log(start_date="2024-03-01", end_date="2024-03-15"),
            make_log(start_date="2024-03-16", end_date="2024-03-31"),
        ]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_any_covering_log_counts(self):
        logs = [
            make_log(start_date="2024-03-05", end_date="2024-03-06"),
            make_log(start_date="2024-01-01", end_date="2024-05-01"),
        ]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.SERVICE

    def test_ongoing_log_runs_until_today(self):
        """An open-ended log covers months that ended before today."""
        logs = [make_log(start_date="2024-02-20", end_date=None)]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.SERVICE

    def test_ongoing_log_does_not_cover_future_month(self):
        """An open-ended log stops at today, not at the report month end."""
        logs = [make_log(start_date="2024-02-20", end_date=None)]

        outcome = classify(make_device(), "2024-06", logs, today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_ongoing_log_result_depends_on_today(self):
        """Re-running later can turn a billable month into a service month."""
        logs = [make_log(start_date="2024-06-01", end_date=None)]

        before = classify(make_device(), "2024-06", logs, today=date(2024, 6, 15))
        after = classify(make_device(), "2024-06", logs, today=date(2024, 7, 1))

        assert before.status == BillingStatus.BILLABLE
        assert after.status == BillingStatus.SERVICE

    def test_ongoing_log_covers_month_on_its_last_day(self):
        """Whole-day comparison: today being the last day is enough."""
        logs = [make_log(start_date="2024-05-01", end_date=None)]

        last_day = classify(make_device(), "2024-06", logs, today=date(2024, 6, 30))
        day_before = classify(make_device(), "2024-06", logs, today=date(2024, 6, 29))

        assert last_day.status == BillingStatus.SERVICE
        assert day_before.status == BillingStatus.BILLABLE

    def test_log_without_start_is_skipped(self):
        logs = [make_log(start_date=None, end_date="2024-12-31")]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_log_with_bad_end_date_is_skipped(self):
        logs = [make_log(start_date="2024-01-01", end_date="garbage")]

        outcome = classify(make_device(), "2024-03", logs, today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_covers_month_boundaries_inclusive(self):
        month = ReportMonth(2024, 2)
        log = make_log(start_date="2024-02-01", end_date="2024-02-29")

        assert covers_month(log, month, TODAY) is True


class TestBillable:
    """Tests for the default billable outcome."""

    def test_default_rate(self):
        """Active month without service is BILLABLE at the default rate."""
        outcome = classify(make_device("D3"), "2024-03", [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE
        assert outcome.cost == pytest.approx(DEFAULT_UNIT_RATE)
        assert outcome.note == "Active"

    def test_custom_rate(self):
        outcome = classify(make_device(), "2024-03", [], unit_rate=75000.0, today=TODAY)

        assert outcome.cost == pytest.approx(75000.0)

    def test_report_month_object(self):
        outcome = classify(make_device(), ReportMonth(2024, 3), [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE

    def test_date_objects_accepted(self):
        device = make_device(sub_start_date=date(2023, 1, 1), sub_end_date=date(2025, 1, 1))

        outcome = classify(device, "2024-03", [], today=TODAY)

        assert outcome.status == BillingStatus.BILLABLE


class TestClassifyDevices:
    """Tests for classify_devices function."""

    def test_logs_matched_by_device(self):
        """Each device only sees its own logs."""
        devices = [make_device("D1"), make_device("D2")]
        logs = [make_log("D2", "2024-03-01", "2024-03-31")]

        results = classify_devices(devices, logs, "2024-03", today=TODAY)

        assert [r.device_id for r in results] == ["D1", "D2"]
        assert results[0].status == BillingStatus.BILLABLE
        assert results[1].status == BillingStatus.SERVICE

    def test_result_pass_through(self):
        results = classify_devices([make_device("D1")], [], "2024-03", unit_rate=10.0, today=TODAY)

        assert results[0].cost == pytest.approx(10.0)
        assert results[0].note == "Active"
        assert results[0].device.device_id == "D1"

    def test_empty(self):
        assert classify_devices([], [], "2024-03", today=TODAY) == []

    def test_invalid_month_raises(self):
        with pytest.raises(ValueError):
            classify_devices([make_device()], [], "March 2024", today=TODAY)
