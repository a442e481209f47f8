"""Core module package."""

from ctr_invoice.core.config import Settings, get_settings
from ctr_invoice.core.exceptions import (
    CtrInvoiceError,
    FormatError,
    LayoutError,
    SourceNotFoundError,
    TagStoreError,
)
from ctr_invoice.core.logging import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "CtrInvoiceError",
    "FormatError",
    "LayoutError",
    "SourceNotFoundError",
    "TagStoreError",
]
