"""Spatial field classification."""

from ctr_invoice.services.classification.anchors import resolve_anchors
from ctr_invoice.services.classification.classifier import FieldClassifier
from ctr_invoice.services.classification.geometry import ZERO_ANCHOR, SheetAnchor, Token
from ctr_invoice.services.classification.rules import (
    ClassificationRule,
    Interval,
    Layout,
    OffsetWindow,
    RegionWindow,
    load_layout,
)

__all__ = [
    "resolve_anchors",
    "FieldClassifier",
    "ZERO_ANCHOR",
    "SheetAnchor",
    "Token",
    "ClassificationRule",
    "Interval",
    "Layout",
    "OffsetWindow",
    "RegionWindow",
    "load_layout",
]
