"""Tag store models for the CTR invoice tagger."""

import enum

from sqlalchemy import Enum, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ctr_invoice.models.base import Base, created_at_column


class FieldLabel(str, enum.Enum):
    """Semantic field a token can be tagged with."""

    INVOICE_NUMBER = "invoice_number"
    FEDERAL_ID = "federal_id"
    CLIENT_CONTRACT = "client_contract"
    CLIENT_DPN = "client_dpn"
    INVOICE_END_DATE = "invoice_end_date"
    STATE = "state"

    # Reserved: rows with this label are removed before projection
    NOT_APPLICABLE = "NA"


class QualityFlag(str, enum.Enum):
    """Marks a token for visual review."""

    REVIEW = "REVIEW"


class TextToken(Base):
    """A word extracted from a source document, with its position."""

    __tablename__ = "text_tokens"
    __table_args__ = (Index("ix_text_tokens_run_sheet_y1", "run_id", "sheet", "y1"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(String(36), index=True)
    document_type: Mapped[str] = mapped_column(String(50), default="INVOICE")

    text: Mapped[str | None] = mapped_column(Text, default="")
    x1: Mapped[float] = mapped_column(Float, default=0.0)
    y1: Mapped[float] = mapped_column(Float, default=0.0)
    x2: Mapped[float] = mapped_column(Float, default=0.0)
    y2: Mapped[float] = mapped_column(Float, default=0.0)

    # 1-based page number
    sheet: Mapped[int] = mapped_column(Integer)

    label: Mapped[FieldLabel | None] = mapped_column(
        Enum(FieldLabel), default=None, nullable=True
    )
    quality_flag: Mapped[QualityFlag | None] = mapped_column(
        Enum(QualityFlag), default=None, nullable=True
    )

    created_at: Mapped[created_at_column]
