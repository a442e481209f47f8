"""Per-sheet anchor resolution."""

from typing import Iterable

from ctr_invoice.services.classification.geometry import SheetAnchor, Token


def resolve_anchors(tokens: Iterable[Token]) -> dict[int, SheetAnchor]:
    """
    Compute the anchor of every sheet that has at least one token.

    The anchor is (min x1, max y1) over the sheet's tokens. Missing
    coordinates count as 0.

    Args:
        tokens: All tokens of a document, any order

    Returns:
        Mapping of sheet number to its anchor
    """
    bounds: dict[int, list[float]] = {}

    for token in tokens:
        x1 = token.x1 or 0.0
        y1 = token.y1 or 0.0
        current = bounds.get(token.sheet)
        if current is None:
            bounds[token.sheet] = [x1, y1]
        else:
            current[0] = min(current[0], x1)
            current[1] = max(current[1], y1)

    return {
        sheet: SheetAnchor(min_x=min_x, max_y=max_y)
        for sheet, (min_x, max_y) in bounds.items()
    }
