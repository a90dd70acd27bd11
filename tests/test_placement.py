"""Tests for placement.py — rows, frozen positions and collision avoidance."""

from __future__ import annotations

import itertools

import pytest

from canvas_flow.config import LayoutOptions
from canvas_flow.models import Position
from canvas_flow.placement import Box, compute_bounds, place_ranks
from canvas_flow.ranking import assign_ranks

# ─── Helpers ──────────────────────────────────────────────────────────────────

OPTS = LayoutOptions(node_gap=40, rank_gap=80)


def boxes_of(layout: dict[str, Position], sizes: dict[str, tuple[float, float]]) -> dict[str, Box]:
    return {
        eid: Box(x=p.x, y=p.y, width=sizes[eid][0], height=sizes[eid][1])
        for eid, p in layout.items()
    }


def assert_no_overlap(boxes: dict[str, Box]):
    for (a_id, a), (b_id, b) in itertools.combinations(boxes.items(), 2):
        assert not a.overlaps(b), f"{a_id} overlaps {b_id}"


# ─── Box / bounds ─────────────────────────────────────────────────────────────


def test_touching_boxes_do_not_overlap():
    assert not Box(0, 0, 10, 10).overlaps(Box(10, 0, 10, 10))
    assert Box(0, 0, 10, 10).overlaps(Box(9, 9, 10, 10))


def test_compute_bounds():
    bounds = compute_bounds([Box(0, 0, 10, 10), Box(20, 5, 10, 30)])
    assert (bounds.x, bounds.y, bounds.width, bounds.height) == (0, 0, 30, 35)
    assert compute_bounds([]) is None


# ─── Fresh canvas ─────────────────────────────────────────────────────────────


def test_rows_on_empty_canvas():
    index = assign_ranks(["A", "B", "C"], [("A", "B"), ("A", "C")])
    sizes = {"A": (160, 48), "B": (160, 48), "C": (100, 90)}
    layout = place_ranks(index, sizes, {}, OPTS)

    assert layout["A"] == Position(x=0, y=0)
    assert layout["B"] == Position(x=0, y=48 + 80)
    assert layout["C"] == Position(x=160 + 40, y=48 + 80)


def test_row_advances_by_tallest_element():
    index = assign_ranks(["A", "B", "C"], [("A", "B"), ("B", "C")])
    sizes = {"A": (160, 200), "B": (160, 48), "C": (160, 48)}
    layout = place_ranks(index, sizes, {}, OPTS)
    assert layout["B"].y == 200 + 80
    assert layout["C"].y == 200 + 80 + 48 + 80


def test_origin_is_honored():
    opts = LayoutOptions(origin_x=100, origin_y=50)
    index = assign_ranks(["A"], [])
    layout = place_ranks(index, {"A": (160, 48)}, {}, opts)
    assert layout["A"] == Position(x=100, y=50)


# ─── Frozen content ───────────────────────────────────────────────────────────


def test_frozen_positions_pass_through():
    index = assign_ranks(["A", "B", "N"], [("A", "B")])
    sizes = {"A": (160, 48), "B": (160, 48), "N": (160, 48)}
    frozen = {"A": Position(x=7, y=3), "B": Position(x=7, y=131)}
    layout = place_ranks(index, sizes, frozen, OPTS)
    assert layout["A"] == frozen["A"]
    assert layout["B"] == frozen["B"]


def test_new_member_of_anchored_rank_goes_right():
    index = assign_ranks(["A", "N"], [])
    sizes = {"A": (160, 48), "N": (160, 48)}
    layout = place_ranks(index, sizes, {"A": Position(x=0, y=0)}, OPTS)
    assert layout["N"] == Position(x=160 + 40, y=0)


def test_fresh_rank_goes_below_frozen_content():
    # X is frozen at rank 0; the new chain P -> Q has P at rank 0 (anchored)
    # and Q at rank 1, which is fresh.
    index = assign_ranks(["X", "P", "Q"], [("P", "Q")])
    sizes = {"X": (160, 48), "P": (160, 48), "Q": (160, 48)}
    layout = place_ranks(index, sizes, {"X": Position(x=0, y=0)}, OPTS)
    assert layout["P"] == Position(x=200, y=0)
    assert layout["Q"].y >= 48 + 80
    assert_no_overlap(boxes_of(layout, sizes))


def test_right_placement_starts_beside_frozen_content():
    opts = LayoutOptions(placement="right")
    sizes = {"X": (160, 48), "Y": (160, 48), "P": (160, 48)}
    frozen = {"X": Position(x=0, y=0), "Y": Position(x=0, y=128)}
    # P hangs below Y, so its rank has no frozen members
    index = assign_ranks(["X", "Y", "P"], [("X", "Y"), ("Y", "P")])
    layout = place_ranks(index, sizes, frozen, opts)
    assert layout["P"] == Position(x=160 + 40, y=128 + 48 + 80)
    assert_no_overlap(boxes_of(layout, sizes))


def test_band_clearing_avoids_tall_frozen_box():
    # A tall frozen container at rank 1 reaches into the fresh row
    index = assign_ranks(["A", "S", "N"], [("A", "S"), ("S", "N")])
    sizes = {"A": (160, 48), "S": (200, 600), "N": (160, 48)}
    frozen = {"A": Position(x=0, y=0)}
    layout = place_ranks(index, sizes, frozen, OPTS)
    assert_no_overlap(boxes_of(layout, sizes))


@pytest.mark.parametrize("placement", ["below", "right"])
def test_no_overlap_with_mixed_frozen_layout(placement):
    opts = LayoutOptions(placement=placement)
    elements = ["A", "B", "C", "D", "E", "F", "G"]
    edges = [("A", "B"), ("A", "C"), ("C", "D"), ("E", "F"), ("F", "G"), ("E", "D")]
    sizes = {e: (160, 48) for e in elements}
    sizes["C"] = (240, 400)
    frozen = {"A": Position(x=0, y=0), "B": Position(x=0, y=128), "C": Position(x=200, y=128)}
    layout = place_ranks(assign_ranks(elements, edges), sizes, frozen, opts)
    assert set(layout) == set(elements)
    assert_no_overlap(boxes_of(layout, sizes))
