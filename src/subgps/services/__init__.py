"""Services that assemble reports from snapshot data."""

from .report_service import DivisionReport, ReportService

__all__ = ["DivisionReport", "ReportService"]
