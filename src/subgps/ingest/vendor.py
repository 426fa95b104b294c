"""Vendor invoice ingestion and per-month storage."""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..config import Config
from ..logging import get_logger
from ..models import ReportMonth, VendorRecord
from .base import BaseIngester, IngestResult, cell, normalize_device_id

logger = get_logger(__name__)


class VendorInvoiceIngester(BaseIngester[VendorRecord]):
    """Reads a vendor's billed device list."""

    def __init__(self, config: Config | None = None):
        super().__init__(config)
        ingest = self.config.ingest
        self.COLUMNS = {name: name for name in ingest.vendor_id_columns}
        self.COLUMNS[ingest.vendor_month_column] = "month"
        self.COLUMNS["division"] = "division"

    def parse_row(
        self,
        row: pd.Series,
        report_month: ReportMonth | None = None,
        **kwargs: Any,
    ) -> VendorRecord | None:
        raw_id = None
        for column in self.config.ingest.vendor_id_columns:
            raw_id = cell(row, column)
            if raw_id:
                break
        if not raw_id:
            return None

        # The month the file is uploaded for wins over the MONTH column
        if report_month is not None:
            month = report_month
        else:
            month_text = cell(row, "month")
            if not month_text:
                raise ValueError("Missing MONTH and no report month given")
            month = ReportMonth.parse(month_text[:7])

        return VendorRecord(
            device_id=normalize_device_id(raw_id),
            report_month=str(month),
            division=cell(row, "division"),
        )


def load_vendor_records(
    file_path: Path,
    report_month: ReportMonth | str | None = None,
    config: Config | None = None,
) -> IngestResult[VendorRecord]:
    """Load vendor billed devices from a CSV file.

    Args:
        file_path: Path to the vendor CSV file.
        report_month: Month every row is filed under. If None, each row
            uses its own MONTH value.
        config: Application configuration.

    Returns:
        IngestResult with one VendorRecord per row that has a device id.
    """
    month = ReportMonth.coerce(report_month) if report_month is not None else None
    return VendorInvoiceIngester(config).ingest(file_path, report_month=month)


class VendorInvoiceBook:
    """Vendor records grouped by report month.

    Storing a month replaces everything previously stored for it.
    """

    def __init__(self) -> None:
        self._months: dict[str, list[VendorRecord]] = {}

    def replace_month(self, report_month: ReportMonth | str, records: Iterable[VendorRecord]) -> int:
        """Overwrite a month's records. Returns the number stored."""
        key = str(ReportMonth.coerce(report_month))
        stored = [
            VendorRecord(device_id=r.device_id, report_month=key, division=r.division)
            for r in records
        ]
        replaced = len(self._months.get(key, []))
        self._months[key] = stored
        logger.info("vendor_month_replaced", month=key, records=len(stored), replaced=replaced)
        return len(stored)

    def records_for(self, report_month: ReportMonth | str) -> list[VendorRecord]:
        """Records for a month in upload order, duplicates included."""
        return list(self._months.get(str(ReportMonth.coerce(report_month)), []))

    def months(self) -> list[str]:
        return sorted(self._months)
