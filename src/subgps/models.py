"""Domain records shared by the classifier, aggregator and reconciler.

Devices, service logs and vendor records are snapshots handed in by the
caller; nothing here knows where they came from.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from enum import Enum

DateLike = date | str | None


class BillingStatus(str, Enum):
    """Outcome of classifying one device for one month."""

    EXPIRED = "EXPIRED"
    PENDING = "PENDING"
    SERVICE = "SERVICE"
    BILLABLE = "BILLABLE"
    ERROR = "ERROR"
    # Reconciliation only: vendor billed a device we have no record of
    NOT_IN_MASTER = "NOT_IN_MASTER"

    def __str__(self) -> str:
        return self.value


@dataclass
class Device:
    """Master data record for a GPS tracking device."""

    device_id: str
    name: str | None = None
    branch: str | None = None
    division: str | None = None
    type: str | None = None
    sub_start_date: DateLike = None
    sub_end_date: DateLike = None
    status: str | None = None  # Lifecycle label, informational only


@dataclass
class ServiceLog:
    """Maintenance interval for a device. No end date means still ongoing."""

    device_id: str
    start_date: DateLike
    end_date: DateLike = None
    description: str | None = None
    repair_type: str | None = None


@dataclass
class VendorRecord:
    """One device the vendor reports as billed for a month."""

    device_id: str
    report_month: str
    division: str | None = None


@dataclass(frozen=True)
class ReportMonth:
    """A calendar month, e.g. ``2024-03``."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")

    @classmethod
    def parse(cls, value: str) -> "ReportMonth":
        """Parse a ``YYYY-MM`` string.

        Raises:
            ValueError: If the string is not a valid month.
        """
        parts = value.strip().split("-") if value else []
        if len(parts) != 2 or len(parts[0]) != 4 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Report month must be YYYY-MM, got {value!r}")
        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def current(cls) -> "ReportMonth":
        """The current calendar month."""
        today = date.today()
        return cls(today.year, today.month)

    @classmethod
    def coerce(cls, value: "ReportMonth | str | None") -> "ReportMonth":
        """Accept a ReportMonth, a ``YYYY-MM`` string, or None for this month."""
        if value is None:
            return cls.current()
        if isinstance(value, ReportMonth):
            return value
        return cls.parse(value)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class ClassificationOutcome:
    """Billing decision for one device in one month."""

    status: BillingStatus
    cost: float
    note: str


@dataclass(frozen=True)
class DeviceResult:
    """A device paired with its classification outcome."""

    device: Device
    outcome: ClassificationOutcome

    @property
    def device_id(self) -> str:
        return self.device.device_id

    @property
    def status(self) -> BillingStatus:
        return self.outcome.status

    @property
    def cost(self) -> float:
        return self.outcome.cost

    @property
    def note(self) -> str:
        return self.outcome.note
