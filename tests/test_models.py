"""Tests for models.py — fragment connections and snapshot helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from canvas_flow.models import (
    CanvasSnapshot,
    ContainerSpec,
    EdgeRecord,
    EdgeSpec,
    Fragment,
    NodeRecord,
    NodeSpec,
    Position,
    edge_record_id,
)


def test_container_accepts_alias_and_field_name():
    assert ContainerSpec(id="c", childIds=["A"]).child_ids == ["A"]
    assert ContainerSpec(id="c", child_ids=["A"]).child_ids == ["A"]


def test_all_connections_order_and_flags():
    fragment = Fragment(
        nodes=[NodeSpec(id="A", outputs=["B", "C"]), NodeSpec(id="B"), NodeSpec(id="C", inputs=["B"])],
        edges=[EdgeSpec(source="A", target="C")],
    )
    assert fragment.all_connections() == [
        ("A", "C", True),
        ("A", "B", False),
        ("B", "C", False),
    ]


def test_fragment_is_empty():
    assert Fragment().is_empty()
    assert not Fragment(nodes=[NodeSpec(id="A")]).is_empty()


def test_edge_record_id():
    assert edge_record_id("f1-A", "f1-B") == "edge-f1-A-f1-B"


def test_records_are_frozen():
    record = NodeRecord(id="A", position=Position(x=0, y=0), width=1, height=1, label="A")
    with pytest.raises(ValidationError):
        record.width = 5


def test_snapshot_helpers():
    box = NodeRecord(id="box", position=Position(x=100, y=50), width=200, height=100,
                     label="box", type="container")
    child = NodeRecord(id="C", position=Position(x=20, y=20), width=160, height=48,
                       label="C", parent_id="box", extent="parent")
    free = NodeRecord(id="A", position=Position(x=0, y=0), width=160, height=48, label="A")
    edges = (
        EdgeRecord(id="edge-A-C", source="A", target="C"),
        EdgeRecord(id="edge-C-C", source="C", target="C", parent_id="box"),
    )
    snap = CanvasSnapshot(version=3, nodes=(free, box, child), edges=edges)

    assert [r.id for r in snap.top_level()] == ["A", "box"]
    assert [r.id for r in snap.children_of("box")] == ["C"]
    assert [r.id for r in snap.containers()] == ["box"]
    assert [e.id for e in snap.main_edges()] == ["edge-A-C"]
    assert [e.id for e in snap.internal_edges()] == ["edge-C-C"]
    assert snap.absolute_position("C") == Position(x=120, y=70)
    assert snap.absolute_position("missing") is None
    assert snap.get_edge("edge-A-C").type == "bezier"


@pytest.mark.parametrize("size", [{"width": 0}, {"height": -10}])
def test_node_size_must_be_positive(size):
    with pytest.raises(ValidationError):
        NodeSpec(id="A", **size)
