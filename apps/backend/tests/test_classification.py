"""Anchor resolution, layout and classifier tests."""

import json

import pytest

from ctr_invoice.core.exceptions import LayoutError
from ctr_invoice.models import FieldLabel
from ctr_invoice.services.classification import (
    ZERO_ANCHOR,
    ClassificationRule,
    FieldClassifier,
    Interval,
    Layout,
    OffsetWindow,
    SheetAnchor,
    Token,
    load_layout,
    resolve_anchors,
)


ANCHOR = SheetAnchor(min_x=100, max_y=500)


def make_token(x1, y1, x2=None, y2=None, sheet=1, text="X", row_id=1) -> Token:
    return Token(
        row_id=row_id,
        text=text,
        x1=x1,
        y1=y1,
        x2=x1 + 10 if x2 is None else x2,
        y2=y1 + 6 if y2 is None else y2,
        sheet=sheet,
    )


@pytest.fixture(scope="module")
def classifier() -> FieldClassifier:
    return FieldClassifier(load_layout())


class TestResolveAnchors:
    """Anchor resolver tests."""

    def test_anchor_per_sheet(self):
        tokens = [
            make_token(120, 300, sheet=1),
            make_token(80, 450, sheet=1),
            make_token(95, 700, sheet=1),
            make_token(40, 100, sheet=2),
            make_token(60, 800, sheet=2),
        ]

        anchors = resolve_anchors(tokens)

        assert anchors == {
            1: SheetAnchor(min_x=80, max_y=700),
            2: SheetAnchor(min_x=40, max_y=800),
        }

    def test_sheet_without_tokens_has_no_anchor(self):
        anchors = resolve_anchors([make_token(10, 10, sheet=3)])
        assert 1 not in anchors
        assert 3 in anchors

    def test_empty_input(self):
        assert resolve_anchors([]) == {}

    def test_missing_coordinates_count_as_zero(self):
        tokens = [
            Token(row_id=1, text="a", x1=None, y1=None, x2=0, y2=0, sheet=1),
            Token(row_id=2, text="b", x1=25, y1=-40, x2=30, y2=-35, sheet=1),
        ]

        anchors = resolve_anchors(tokens)

        assert anchors[1] == SheetAnchor(min_x=0, max_y=0)


class TestOffsetRules:
    """Rules that place a token at a fixed distance from the anchor."""

    def test_invoice_number(self, classifier):
        token = make_token(541, 598, x2=560, y2=604)
        assert classifier.classify(token, ANCHOR) == FieldLabel.INVOICE_NUMBER

    @pytest.mark.parametrize(
        "dy, label",
        [
            (95, FieldLabel.INVOICE_NUMBER),
            (99, FieldLabel.INVOICE_NUMBER),
            (106, FieldLabel.FEDERAL_ID),
            (113, FieldLabel.CLIENT_CONTRACT),
            (117, FieldLabel.CLIENT_CONTRACT),
            (124, FieldLabel.CLIENT_DPN),
        ],
    )
    def test_rows_below_anchor(self, classifier, dy, label):
        token = make_token(542, 500 - dy)
        assert classifier.classify(token, ANCHOR) == label

    def test_offsets_are_absolute(self, classifier):
        # Same distance, opposite sides of the anchor
        left_above = make_token(100 - 442, 500 + 97)
        assert classifier.classify(left_above, ANCHOR) == FieldLabel.INVOICE_NUMBER

    @pytest.mark.parametrize("x1", [539.99, 544.01])
    def test_dx_just_outside_interval(self, classifier, x1):
        token = make_token(x1, 598)
        assert classifier.classify(token, ANCHOR) is None

    @pytest.mark.parametrize("x1", [540, 544])
    def test_dx_interval_is_closed(self, classifier, x1):
        token = make_token(x1, 598)
        assert classifier.classify(token, ANCHOR) == FieldLabel.INVOICE_NUMBER

    def test_gap_between_rows(self, classifier):
        token = make_token(542, 500 - 101)
        assert classifier.classify(token, ANCHOR) is None


class TestRegionRules:
    """Rules that place a token inside an anchor-relative rectangle."""

    def test_invoice_end_date(self, classifier):
        token = make_token(205, 215, x2=255, y2=230, text="31-Jan-2025")
        assert classifier.classify(token, ANCHOR) == FieldLabel.INVOICE_END_DATE

    def test_end_date_bounds_are_strict(self, classifier):
        token = make_token(200, 215, x2=255, y2=230)
        assert classifier.classify(token, ANCHOR) is None

    def test_end_date_must_fit_inside(self, classifier):
        token = make_token(205, 215, x2=261, y2=230)
        assert classifier.classify(token, ANCHOR) is None

    def test_state_code(self, classifier):
        token = make_token(150, 300, x2=200, y2=320, text="KY")
        assert classifier.classify(token, ANCHOR) == FieldLabel.STATE

    def test_state_text_is_trimmed(self, classifier):
        token = make_token(150, 300, x2=200, y2=320, text="  OH ")
        assert classifier.classify(token, ANCHOR) == FieldLabel.STATE

    @pytest.mark.parametrize("text", ["TX", "ky", "KY,", ""])
    def test_state_requires_known_code(self, classifier, text):
        token = make_token(150, 300, x2=200, y2=320, text=text)
        assert classifier.classify(token, ANCHOR) is None

    def test_state_window_top_edge(self, classifier):
        # y2 must stay below max_y - 153
        token = make_token(150, 400, x2=200, y2=420, text="KY")
        assert classifier.classify(token, ANCHOR) is None


class TestSheetScope:
    """Only sheets with rules produce labels."""

    @pytest.mark.parametrize("sheet", [2, 3, 10])
    def test_other_sheets_never_labeled(self, classifier, sheet):
        tokens = [
            make_token(541, 598, sheet=sheet),
            make_token(205, 215, x2=255, y2=230, sheet=sheet),
            make_token(150, 300, x2=200, y2=320, text="KY", sheet=sheet),
        ]
        for token in tokens:
            assert classifier.classify(token, ANCHOR) is None

    def test_zero_anchor(self, classifier):
        token = make_token(442, 97)
        assert classifier.classify(token, ZERO_ANCHOR) == FieldLabel.INVOICE_NUMBER


class TestLayout:
    """Layout loading and rule ordering tests."""

    def test_bundled_layout(self):
        layout = load_layout()

        assert layout.name == "bmcd_invoice"
        assert [rule.label for rule in layout.rules] == [
            FieldLabel.INVOICE_NUMBER,
            FieldLabel.FEDERAL_ID,
            FieldLabel.CLIENT_CONTRACT,
            FieldLabel.CLIENT_DPN,
            FieldLabel.INVOICE_END_DATE,
            FieldLabel.STATE,
        ]
        assert {rule.sheet for rule in layout.rules} == {1}
        assert layout.rules[-1].text_in == frozenset({"IN", "KY", "OH", "NC", "SC", "FL"})

    def test_first_matching_rule_wins(self):
        window = OffsetWindow(dx=Interval(low=0, high=10), dy=Interval(low=0, high=10))
        layout = Layout(
            name="overlap",
            rules=(
                ClassificationRule(sheet=1, window=window, label=FieldLabel.FEDERAL_ID),
                ClassificationRule(sheet=1, window=window, label=FieldLabel.CLIENT_DPN),
            ),
        )

        label = FieldClassifier(layout).classify(make_token(105, 495), ANCHOR)

        assert label == FieldLabel.FEDERAL_ID

    def test_rules_for_another_sheet(self):
        window = OffsetWindow(dx=Interval(low=0, high=10), dy=Interval(low=0, high=10))
        layout = Layout(
            name="second_page",
            rules=(ClassificationRule(sheet=2, window=window, label=FieldLabel.CLIENT_DPN),),
        )
        classifier = FieldClassifier(layout)

        assert classifier.classify(make_token(105, 495, sheet=2), ANCHOR) == FieldLabel.CLIENT_DPN
        assert classifier.classify(make_token(105, 495, sheet=1), ANCHOR) is None

    def test_missing_layout_file(self, tmp_path):
        with pytest.raises(LayoutError):
            load_layout(tmp_path / "missing.json")

    def test_invalid_interval(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "name": "bad",
                    "rules": [
                        {
                            "sheet": 1,
                            "label": "invoice_number",
                            "window": {
                                "kind": "offset",
                                "dx": {"low": 444, "high": 440},
                                "dy": {"low": 95, "high": 99},
                            },
                        }
                    ],
                }
            )
        )

        with pytest.raises(LayoutError):
            load_layout(path)

    def test_unknown_label(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "name": "bad",
                    "rules": [
                        {
                            "sheet": 1,
                            "label": "zip",
                            "window": {
                                "kind": "region",
                                "min_x1": 0,
                                "max_x2": 10,
                                "min_y1": -10,
                                "max_y2": 0,
                            },
                        }
                    ],
                }
            )
        )

        with pytest.raises(LayoutError):
            load_layout(path)
