"""
Declarative classification layouts.

A layout is an ordered list of rules. Each rule applies to one sheet and
combines a geometric window, measured from the sheet anchor, with an
optional exact-text test. Two window families exist:

- offset: the token's (x1, y1) lies at a near-fixed absolute distance from
  the anchor, expressed as closed intervals on dx and dy
- region: the token's box lies strictly inside a rectangle whose edges are
  offsets from the anchor

Layouts are stored as JSON and validated on load.
"""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field as PydanticField, ValidationError, model_validator

from ctr_invoice.core.exceptions import LayoutError
from ctr_invoice.models.models import FieldLabel
from ctr_invoice.services.classification.geometry import SheetAnchor, Token

DEFAULT_LAYOUT_PATH = Path(__file__).parent / "layouts" / "bmcd_invoice.json"


class Interval(BaseModel):
    """Closed numeric interval."""

    low: float
    high: float

    @model_validator(mode="after")
    def check_order(self) -> "Interval":
        if self.low > self.high:
            raise ValueError(f"Interval low {self.low} exceeds high {self.high}")
        return self

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


class OffsetWindow(BaseModel):
    """Matches when |dx| and |dy| of (x1, y1) fall in both intervals."""

    kind: Literal["offset"] = "offset"
    dx: Interval
    dy: Interval

    def matches(self, token: Token, anchor: SheetAnchor) -> bool:
        dx, dy = anchor.offsets(token)
        return self.dx.contains(dx) and self.dy.contains(dy)


class RegionWindow(BaseModel):
    """Matches when the token box is strictly inside an anchor-relative rectangle."""

    kind: Literal["region"] = "region"
    min_x1: float
    max_x2: float
    min_y1: float
    max_y2: float

    def matches(self, token: Token, anchor: SheetAnchor) -> bool:
        return (
            token.x1 > anchor.min_x + self.min_x1
            and token.x2 < anchor.min_x + self.max_x2
            and token.y1 > anchor.max_y + self.min_y1
            and token.y2 < anchor.max_y + self.max_y2
        )


Window = Annotated[OffsetWindow | RegionWindow, PydanticField(discriminator="kind")]


class ClassificationRule(BaseModel):
    """One row of the classification table."""

    sheet: int = PydanticField(ge=1)
    window: Window
    text_in: frozenset[str] | None = None
    label: FieldLabel

    class Config:
        frozen = True

    def matches(self, token: Token, anchor: SheetAnchor) -> bool:
        if token.sheet != self.sheet:
            return False
        if not self.window.matches(token, anchor):
            return False
        if self.text_in is not None:
            return (token.text or "").strip() in self.text_in
        return True


class Layout(BaseModel):
    """An ordered rule table for one document layout."""

    name: str
    rules: tuple[ClassificationRule, ...]
    required_labels: tuple[FieldLabel, ...] = ()

    class Config:
        frozen = True


def load_layout(path: Path | None = None) -> Layout:
    """
    Load and validate a layout file.

    Args:
        path: JSON layout file, or None for the bundled invoice layout

    Returns:
        The validated layout
    """
    layout_path = Path(path) if path else DEFAULT_LAYOUT_PATH

    try:
        raw = layout_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LayoutError(f"Cannot read layout file {layout_path}: {exc}") from exc

    try:
        return Layout.model_validate_json(raw)
    except ValidationError as exc:
        raise LayoutError(f"Invalid layout file {layout_path}: {exc}") from exc
