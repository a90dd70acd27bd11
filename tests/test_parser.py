"""Tests for parser.py — YAML fragments and snapshot export."""

from __future__ import annotations

import pytest

from canvas_flow.canvas import LayoutCanvas
from canvas_flow.config import NODE_HEIGHT, NODE_WIDTH
from canvas_flow.parser import (
    fragment_to_yaml,
    parse_fragment_dict,
    parse_fragment_file,
    parse_fragment_yaml,
    snapshot_to_dict,
)

FRAGMENT_YAML = """
nodes:
  - id: A
  - id: B
    label: Check
    inputs: [A]
  - id: C
    width: 200
  - D
edges:
  - {source: A, target: C}
  - {from: C, to: D}
containers:
  - id: success
    childIds: [C, D]
    style:
      border_color: "#4CAF50"
"""


def test_parse_fragment_yaml():
    fragment = parse_fragment_yaml(FRAGMENT_YAML)

    assert [n.id for n in fragment.nodes] == ["A", "B", "C", "D"]
    assert fragment.nodes[1].get_label() == "Check"
    assert fragment.nodes[1].inputs == ["A"]
    assert fragment.nodes[2].width == 200
    assert fragment.nodes[3].height == NODE_HEIGHT
    assert [(e.source, e.target) for e in fragment.edges] == [("A", "C"), ("C", "D")]
    assert fragment.containers[0].child_ids == ["C", "D"]
    assert fragment.containers[0].style.border_color == "#4CAF50"


def test_container_child_key_aliases():
    for key in ("childIds", "child_ids", "children"):
        fragment = parse_fragment_dict({"nodes": ["X"], "containers": [{"id": "box", key: ["X"]}]})
        assert fragment.containers[0].child_ids == ["X"]


def test_nested_fragment_key():
    fragment = parse_fragment_yaml("fragment:\n  nodes: [A]\n")
    assert fragment.nodes[0].id == "A"


def test_empty_yaml_rejected():
    with pytest.raises(ValueError):
        parse_fragment_yaml("")


def test_non_mapping_rejected():
    with pytest.raises(ValueError):
        parse_fragment_yaml("- a\n- b\n")


def test_edge_without_target_rejected():
    with pytest.raises(ValueError):
        parse_fragment_dict({"edges": [{"source": "A"}]})


def test_parse_fragment_file(tmp_path):
    path = tmp_path / "fragment.yaml"
    path.write_text(FRAGMENT_YAML)
    assert len(parse_fragment_file(path).nodes) == 4


def test_yaml_round_trip_preserves_fragment():
    fragment = parse_fragment_yaml(FRAGMENT_YAML)
    again = parse_fragment_yaml(fragment_to_yaml(fragment))
    assert again == fragment


def test_default_sizes_omitted_from_yaml():
    text = fragment_to_yaml(parse_fragment_dict({"nodes": ["A"]}))
    assert "width" not in text
    assert str(NODE_WIDTH) not in text


def test_snapshot_export():
    canvas = LayoutCanvas()
    canvas.insert_fragment(parse_fragment_yaml(FRAGMENT_YAML), prefix="")
    data = snapshot_to_dict(canvas.snapshot())

    nodes = {n["id"]: n for n in data["nodes"]}
    assert data["version"] == 1
    assert nodes["C"]["parentId"] == "success"
    assert nodes["C"]["extent"] == "parent"
    assert "parentId" not in nodes["A"]
    assert nodes["success"]["type"] == "container"
    assert nodes["success"]["style"]["border_color"] == "#4CAF50"
    assert nodes["B"]["data"] == {"label": "Check"}

    edges = {e["id"]: e for e in data["edges"]}
    assert edges["edge-A-C"]["animated"] is False
    assert edges["edge-C-D"]["parentId"] == "success"


def test_null_lists_read_as_empty():
    fragment = parse_fragment_yaml(
        "nodes:\n  - id: A\n    inputs:\n    outputs:\n    width:\n"
        "containers:\n  - id: box\n    childIds:\n"
    )
    assert fragment.nodes[0].inputs == []
    assert fragment.nodes[0].outputs == []
    assert fragment.nodes[0].width == NODE_WIDTH
    assert fragment.containers[0].child_ids == []


@pytest.mark.parametrize("data", [
    {"nodes": [{"label": "no id"}]},
    {"containers": [{"childIds": ["A"]}]},
    {"edges": ["A -> B"]},
])
def test_malformed_entries_raise_value_error(data):
    with pytest.raises(ValueError):
        parse_fragment_dict(data)


def test_non_positive_size_rejected():
    with pytest.raises(ValueError):
        parse_fragment_dict({"nodes": [{"id": "A", "width": 0}]})
