"""Base classes for snapshot ingesters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

import pandas as pd

from ..config import Config
from ..logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass
class IngestResult(Generic[T]):
    """Result of an ingest operation."""

    rows: list[T] = field(default_factory=list)
    line_numbers: list[int] = field(default_factory=list)  # Source line of each row
    total_rows: int = 0
    skipped_rows: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def normalize_device_id(value: Any) -> str:
    """Normalize a device id.

    Spreadsheets often turn long numeric ids into floats, so a trailing
    ``.0`` is dropped along with surrounding whitespace.
    """
    device_id = str(value).strip()
    if device_id.endswith(".0"):
        device_id = device_id[:-2]
    return device_id


def cell(row: pd.Series, column: str) -> str | None:
    """Return a stripped string cell value, or None if blank."""
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


class BaseIngester(ABC, Generic[T]):
    """Abstract base class for CSV snapshot ingesters.

    Subclasses declare ``COLUMNS`` (file header -> internal name) and turn
    each row into a domain record.
    """

    COLUMNS: dict[str, str] = {}

    def __init__(self, config: Config | None = None):
        """Initialize ingester.

        Args:
            config: Application configuration. Defaults are used if None.
        """
        self.config = config or Config()

    def read_frame(self, file_path: Path, result: IngestResult[T]) -> pd.DataFrame | None:
        """Read a CSV file with every column as text.

        Header matching against ``COLUMNS`` is case-insensitive. Returns None
        and records an error if the file cannot be read.
        """
        try:
            df = pd.read_csv(file_path, dtype=str)
        except Exception as e:
            result.errors.append(f"Failed to read CSV: {e}")
            logger.error("snapshot_read_failed", file=str(file_path), error=str(e))
            return None

        df.columns = df.columns.str.strip()
        column_map = {}
        for source_col, internal_col in self.COLUMNS.items():
            matches = [c for c in df.columns if c.lower() == source_col.lower()]
            if matches:
                column_map[matches[0]] = internal_col

        return df.rename(columns=column_map)

    def ingest(self, file_path: Path, **kwargs: Any) -> IngestResult[T]:
        """Ingest records from a CSV file.

        Args:
            file_path: Path to the CSV file.
            **kwargs: Passed through to ``parse_row``.

        Returns:
            IngestResult with parsed rows and any errors.
        """
        result: IngestResult[T] = IngestResult()

        df = self.read_frame(file_path, result)
        if df is None:
            return result

        for idx, row in df.iterrows():
            line_num = idx + 2  # Account for header and 0-indexing
            result.total_rows += 1
            try:
                record = self.parse_row(row, **kwargs)
            except ValueError as e:
                result.errors.append(f"Line {line_num}: {e}")
                result.skipped_rows += 1
                continue

            if record is None:
                result.skipped_rows += 1
                continue

            result.rows.append(record)
            result.line_numbers.append(line_num)

        self.finish(result)

        logger.info(
            "snapshot_ingested",
            file=file_path.name,
            kind=type(self).__name__,
            rows=len(result.rows),
            skipped=result.skipped_rows,
            errors=len(result.errors),
        )
        return result

    def finish(self, result: IngestResult[T]) -> None:
        """Post-process the parsed rows. Does nothing by default."""

    @abstractmethod
    def parse_row(self, row: pd.Series, **kwargs: Any) -> T | None:
        """Convert one row to a record.

        Returns None to skip the row silently; raises ValueError to skip it
        with an error message.
        """
