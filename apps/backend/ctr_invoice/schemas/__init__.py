"""Pydantic schemas package."""

from ctr_invoice.schemas.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    CtrGenerationResponse,
    ProjectionErrorResponse,
    TaggingSummary,
    TokenIn,
    TokenResponse,
)

__all__ = [
    "ClassifyRequest",
    "ClassifyResponse",
    "CtrGenerationResponse",
    "ProjectionErrorResponse",
    "TaggingSummary",
    "TokenIn",
    "TokenResponse",
]
