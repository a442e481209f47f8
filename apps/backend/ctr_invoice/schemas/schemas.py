"""Pydantic schemas for token input and API request/response validation."""

from pydantic import BaseModel, Field as PydanticField, field_validator

from ctr_invoice.models.models import FieldLabel, QualityFlag


# --- Base schemas ---


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    class Config:
        from_attributes = True


# --- Token schemas ---


class TokenIn(BaseModel):
    """A token as produced by a token source."""

    text: str = ""
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    sheet: int = PydanticField(..., ge=1)

    @field_validator("x1", "y1", "x2", "y2", mode="before")
    @classmethod
    def missing_coordinate_is_zero(cls, value):
        return 0.0 if value is None else value

    @field_validator("text", mode="before")
    @classmethod
    def missing_text_is_empty(cls, value):
        return "" if value is None else value


class TokenResponse(BaseSchema):
    """Schema for a stored token."""

    id: int
    text: str | None
    x1: float
    y1: float
    x2: float
    y2: float
    sheet: int
    label: FieldLabel | None = None
    quality_flag: QualityFlag | None = None


# --- Classification schemas ---


class ClassifyRequest(BaseModel):
    """Schema for classifying a set of tokens."""

    tokens: list[TokenIn]


class TaggingSummary(BaseModel):
    """Counts and findings from one tagging run."""

    total_tokens: int
    labeled_count: int
    deleted_count: int = 0
    flagged_count: int = 0
    duplicate_labels: dict[int, list[FieldLabel]] = {}
    unanchored_sheets: list[int] = []
    missing_labels: list[FieldLabel] = []
    classification_time_ms: float


class ClassifyResponse(BaseModel):
    """Schema for classification response."""

    tokens: list[TokenResponse]
    summary: TaggingSummary


# --- CTR generation schemas ---


class ProjectionErrorResponse(BaseModel):
    """A field that could not be written to the CTR."""

    label: str
    text: str
    message: str


class CtrGenerationResponse(BaseModel):
    """Schema for CTR generation response."""

    run_id: str
    output_url: str
    cells: dict[str, str]
    errors: list[ProjectionErrorResponse] = []
    summary: TaggingSummary
