"""Pytest configuration and fixtures."""

from datetime import date
from pathlib import Path

import pytest


@pytest.fixture
def today() -> date:
    """Fixed reference date for ongoing service logs."""
    return date(2024, 6, 15)


@pytest.fixture
def devices_csv(tmp_path: Path) -> Path:
    """Device master CSV in the template layout."""
    csv_content = """deviceId,name,branch,division,type,subStartDate,subEndDate,status
D1,Truck A,Jakarta,Logistics,GPS Only,2023-01-01,2024-01-01,Active
D2,Truck B,Bandung,Logistics,GPS Only,2023-01-01,2025-01-01,Active
D3,Van C,Surabaya,Sales,GPS + Camera,2023-01-01,2025-01-01,Active
D5,Bike E,Medan,,GPS Only,,,Inactive
"""
    csv_file = tmp_path / "devices.csv"
    csv_file.write_text(csv_content)
    return csv_file


@pytest.fixture
def service_logs_csv(tmp_path: Path) -> Path:
    """Service history CSV."""
    csv_content = """deviceId,startDate,endDate,description,repairType
D2,2024-03-01,2024-03-31,Replace antenna,Hardware
D3,2024-03-10,2024-03-12,Firmware update,Software
"""
    csv_file = tmp_path / "service_logs.csv"
    csv_file.write_text(csv_content)
    return csv_file


@pytest.fixture
def vendor_csv(tmp_path: Path) -> Path:
    """Vendor invoice CSV in the vendor template layout."""
    csv_content = """MONTH,PLAT NO
2024-03,D2
2024-03,D4.0
2024-04, D3
"""
    csv_file = tmp_path / "vendor.csv"
    csv_file.write_text(csv_content)
    return csv_file
