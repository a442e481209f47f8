"""Database models package."""

from ctr_invoice.models.base import (
    AsyncSessionLocal,
    Base,
    engine,
    generate_run_id,
    get_db,
    init_db,
)
from ctr_invoice.models.models import (
    FieldLabel,
    QualityFlag,
    TextToken,
)

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "engine",
    "generate_run_id",
    "get_db",
    "init_db",
    "FieldLabel",
    "QualityFlag",
    "TextToken",
]
