"""Services package."""

from ctr_invoice.services.document import document_service
from ctr_invoice.services.pipeline import ctr_pipeline
from ctr_invoice.services.projection import ctr_projector
from ctr_invoice.services.storage import storage_service
from ctr_invoice.services.tagging import tagging_service

__all__ = [
    "ctr_pipeline",
    "ctr_projector",
    "document_service",
    "storage_service",
    "tagging_service",
]
