"""Tests for pie layout, transitions and the color scale."""

import math

import pytest

from livedonut.core.application.chart_service import (
    FULL_CIRCLE,
    ArcTransition,
    OrdinalColorScale,
    arc_to_wedge_thetas,
    categorical_palette,
    coerce_cost,
    compute_pie_slices,
    find_slice_at,
    interpolate_arc,
    plan_transitions,
)
from livedonut.core.application.record_reducer import reduce_changes
from tests.fakes import modified, record

class TestComputePieSlices:
    def test_spans_sum_to_full_circle(self):
        records = [record("1", "A", 3), record("2", "B", 7.5), record("3", "C", 11)]
        slices = compute_pie_slices(records)

        assert sum(s.span for s in slices) == pytest.approx(FULL_CIRCLE)
        assert slices[-1].end_angle == pytest.approx(FULL_CIRCLE)

    def test_spans_proportional_to_cost(self):
        records = [record("1", "A", 3), record("2", "B", 7.5), record("3", "C", 11)]
        slices = compute_pie_slices(records)
        total = 3 + 7.5 + 11

        for s in slices:
            assert s.span == pytest.approx(FULL_CIRCLE * s.value / total)

    def test_quarter_and_three_quarters(self):
        slices = compute_pie_slices([record("1", "A", 10), record("2", "B", 30)])

        assert math.degrees(slices[0].span) == pytest.approx(90)
        assert math.degrees(slices[1].span) == pytest.approx(270)
        assert slices[0].start_angle == 0

    def test_modified_cost_changes_span(self):
        records = [record("1", "A", 10), record("2", "B", 30)]
        records = reduce_changes(records, [modified("2", "B", 10)])
        slices = compute_pie_slices(records)

        assert math.degrees(slices[1].span) == pytest.approx(180)
        assert slices[0].record == record("1", "A", 10)

    def test_input_order_is_kept(self):
        records = [record("1", "A", 50), record("2", "B", 1), record("3", "C", 20)]
        slices = compute_pie_slices(records)

        assert [s.record_id for s in slices] == ["1", "2", "3"]
        assert [s.index for s in slices] == [0, 1, 2]
        for prev, nxt in zip(slices, slices[1:]):
            assert prev.end_angle == pytest.approx(nxt.start_angle)

    def test_malformed_cost_is_zero_sized(self):
        records = [record("1", "A", "lots"), record("2", "B", None), record("3", "C", 5)]
        slices = compute_pie_slices(records)

        assert slices[0].span == 0
        assert slices[1].span == 0
        assert slices[2].span == pytest.approx(FULL_CIRCLE)

    def test_zero_total_gives_empty_slices(self):
        slices = compute_pie_slices([record("1", "A", 0), record("2", "B", 0)])

        assert all(s.span == 0 for s in slices)

    def test_empty_list(self):
        assert compute_pie_slices([]) == []

class TestCoerceCost:
    @pytest.mark.parametrize(
        "value, expected",
        [(4, 4.0), (2.5, 2.5), ("12", 12.0), ("x", 0.0), (None, 0.0),
         (True, 0.0), (-3, 0.0), (float("nan"), 0.0), (float("inf"), 0.0)],
    )
    def test_values(self, value, expected):
        assert coerce_cost(value) == expected

class TestTransitions:
    def test_enter_grows_from_end_angle(self):
        slices = compute_pie_slices([record("1", "A", 10), record("2", "B", 30)])
        transitions = plan_transitions({}, slices)

        assert [t.kind for t in transitions] == [ArcTransition.ENTER] * 2
        second = transitions[1]
        assert second.source == (slices[1].end_angle, slices[1].end_angle)
        assert second.at(1.0) == slices[1].arc

    def test_update_starts_from_displayed_arc(self):
        slices = compute_pie_slices([record("1", "A", 10), record("2", "B", 10)])
        current = {"1": (0.0, math.pi / 2), "2": (math.pi / 2, FULL_CIRCLE)}
        transitions = plan_transitions(current, slices)

        update = transitions[1]
        assert update.kind == ArcTransition.UPDATE
        assert update.source == (math.pi / 2, FULL_CIRCLE)
        assert update.at(0.5) == pytest.approx((math.pi * 0.75, FULL_CIRCLE))
        assert update.at(1.0) == pytest.approx((math.pi, FULL_CIRCLE))

    def test_exit_collapses_onto_end_angle(self):
        slices = compute_pie_slices([record("1", "A", 10)])
        current = {"1": (0.0, 1.0), "2": (1.0, FULL_CIRCLE)}
        transitions = plan_transitions(current, slices)

        exit_ = next(t for t in transitions if t.record_id == "2")
        assert exit_.kind == ArcTransition.EXIT
        assert exit_.at(1.0) == (FULL_CIRCLE, FULL_CIRCLE)

    def test_rerender_same_list_has_no_drift(self):
        slices = compute_pie_slices([record("1", "A", 10), record("2", "B", 30)])
        first = {t.record_id: t.at(1.0) for t in plan_transitions({}, slices)}
        second = {t.record_id: t.at(1.0) for t in plan_transitions(first, slices)}

        assert second == first
        assert all(t.source == t.target for t in plan_transitions(first, slices))

    def test_interpolate_clamps_t(self):
        assert interpolate_arc((0, 1), (1, 2), 2.0) == (1, 2)
        assert interpolate_arc((0, 1), (1, 2), -1.0) == (0, 1)

    def test_wedge_thetas_for_top_right_quarter(self):
        assert arc_to_wedge_thetas((0.0, math.pi / 2)) == pytest.approx((0.0, 90.0))
        theta1, theta2 = arc_to_wedge_thetas((0.0, FULL_CIRCLE))
        assert theta2 - theta1 == pytest.approx(360.0)

class TestFindSliceAt:
    def setup_method(self):
        self.slices = compute_pie_slices([record("1", "A", 10), record("2", "B", 30)])

    def test_hits_slice_by_angle(self):
        assert find_slice_at(self.slices, 70, 70).record_id == "1"
        assert find_slice_at(self.slices, -100, 0).record_id == "2"

    def test_hole_and_outside_miss(self):
        assert find_slice_at(self.slices, 0, 10) is None
        assert find_slice_at(self.slices, 0, 200) is None

    def test_displayed_arcs_take_precedence(self):
        arcs = {"1": (0.0, 0.0), "2": (0.0, FULL_CIRCLE)}

        assert find_slice_at(self.slices, 70, 70, arcs).record_id == "2"

class TestOrdinalColorScale:
    def test_palette_has_twelve_colors(self):
        palette = categorical_palette()

        assert len(palette) == 12
        assert all(c.startswith("#") and len(c) == 7 for c in palette)

    def test_first_appearance_order(self):
        scale = OrdinalColorScale(["#111111", "#222222", "#333333"])
        scale.set_domain(["B", "A", "B", "C"])

        assert scale.domain == ["B", "A", "C"]
        assert scale.color("B") == "#111111"
        assert scale.color("C") == "#333333"

    def test_colors_wrap_around_palette(self):
        scale = OrdinalColorScale(["#111111", "#222222"])
        scale.set_domain(["A", "B", "C"])

        assert scale.color("C") == "#111111"

    def test_set_domain_reports_change(self):
        scale = OrdinalColorScale()

        assert scale.set_domain(["A", "B"]) is True
        assert scale.set_domain(["A", "A", "B"]) is False
        assert scale.set_domain(["A"]) is True

    def test_unknown_name_extends_domain(self):
        scale = OrdinalColorScale(["#111111", "#222222"])
        scale.set_domain(["A"])

        assert scale.color("Z") == "#222222"
        assert scale.domain == ["A", "Z"]
