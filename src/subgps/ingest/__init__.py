"""Snapshot loaders for device, service log and vendor invoice files."""

from .base import BaseIngester, IngestResult, normalize_device_id
from .master import DeviceIngester, ServiceLogIngester, load_devices, load_service_logs
from .vendor import VendorInvoiceBook, VendorInvoiceIngester, load_vendor_records

__all__ = [
    "BaseIngester",
    "DeviceIngester",
    "IngestResult",
    "ServiceLogIngester",
    "VendorInvoiceBook",
    "VendorInvoiceIngester",
    "load_devices",
    "load_service_logs",
    "load_vendor_records",
    "normalize_device_id",
]
