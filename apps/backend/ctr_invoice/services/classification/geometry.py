"""Token and anchor values used by the classifier."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    """A positioned word, read from the tag store."""

    row_id: int
    text: str
    x1: float
    y1: float
    x2: float
    y2: float
    sheet: int


@dataclass(frozen=True)
class SheetAnchor:
    """Reference point of a sheet: leftmost x1 and highest y1 of its tokens."""

    min_x: float
    max_y: float

    def offsets(self, token: Token) -> tuple[float, float]:
        """Absolute (dx, dy) of a token's first corner from this anchor."""
        return abs(self.min_x - token.x1), abs(self.max_y - token.y1)


# Used for tokens whose sheet has no resolved anchor
ZERO_ANCHOR = SheetAnchor(min_x=0.0, max_y=0.0)
