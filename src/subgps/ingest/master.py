"""Device master data and service history ingesters."""

from pathlib import Path
from typing import Any

import pandas as pd

from ..config import Config
from ..models import Device, ServiceLog
from .base import BaseIngester, IngestResult, cell, normalize_device_id

# Header row of the device master template
DEVICE_COLUMNS = {
    "deviceId": "device_id",
    "name": "name",
    "branch": "branch",
    "division": "division",
    "type": "type",
    "subStartDate": "sub_start_date",
    "subEndDate": "sub_end_date",
    "status": "status",
}

SERVICE_LOG_COLUMNS = {
    "deviceId": "device_id",
    "startDate": "start_date",
    "endDate": "end_date",
    "description": "description",
    "repairType": "repair_type",
}


class DeviceIngester(BaseIngester[Device]):
    """Reads the device master list.

    Device ids are unique: when an id repeats, the later row replaces the
    earlier one and takes its place at the end of the list.
    """

    COLUMNS = DEVICE_COLUMNS

    def parse_row(self, row: pd.Series, **kwargs: Any) -> Device | None:
        raw_id = cell(row, "device_id")
        if not raw_id:
            raise ValueError("Missing deviceId")

        name = cell(row, "name")
        if not name:
            raise ValueError("Missing name")

        # Contract dates are kept as given; the classifier reports bad ones
        return Device(
            device_id=normalize_device_id(raw_id),
            name=name,
            branch=cell(row, "branch"),
            division=cell(row, "division"),
            type=cell(row, "type"),
            sub_start_date=cell(row, "sub_start_date"),
            sub_end_date=cell(row, "sub_end_date"),
            status=cell(row, "status"),
        )

    def finish(self, result: IngestResult[Device]) -> None:
        latest: dict[str, tuple[Device, int]] = {}
        for device, line_num in zip(result.rows, result.line_numbers):
            previous = latest.pop(device.device_id, None)
            if previous is not None:
                result.errors.append(
                    f"Line {line_num}: Duplicate deviceId {device.device_id} replaces line {previous[1]}"
                )
                result.skipped_rows += 1
            latest[device.device_id] = (device, line_num)

        result.rows = [device for device, _ in latest.values()]
        result.line_numbers = [line_num for _, line_num in latest.values()]


class ServiceLogIngester(BaseIngester[ServiceLog]):
    """Reads the service history."""

    COLUMNS = SERVICE_LOG_COLUMNS

    def parse_row(self, row: pd.Series, **kwargs: Any) -> ServiceLog | None:
        device_id = cell(row, "device_id")
        if not device_id:
            raise ValueError("Missing deviceId")

        start_date = cell(row, "start_date")
        if not start_date:
            raise ValueError("Missing startDate")

        return ServiceLog(
            device_id=device_id,
            start_date=start_date,
            end_date=cell(row, "end_date"),
            description=cell(row, "description"),
            repair_type=cell(row, "repair_type"),
        )


def load_devices(file_path: Path, config: Config | None = None) -> IngestResult[Device]:
    """Load the device master list from a CSV file."""
    return DeviceIngester(config).ingest(file_path)


def load_service_logs(file_path: Path, config: Config | None = None) -> IngestResult[ServiceLog]:
    """Load service history from a CSV file."""
    return ServiceLogIngester(config).ingest(file_path)
