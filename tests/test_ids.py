"""Tests for ids.py — prefix allocation and fragment scoping."""

from __future__ import annotations

from canvas_flow.ids import IdPolicy, PrefixAllocator, namespace_fragment
from canvas_flow.models import ContainerSpec, EdgeSpec, Fragment, NodeSpec


def sample_fragment() -> Fragment:
    return Fragment(
        nodes=[NodeSpec(id="A", outputs=["B"]), NodeSpec(id="B", label="Bee"), NodeSpec(id="C")],
        edges=[EdgeSpec(source="A", target="box"), EdgeSpec(source="B", target="C")],
        containers=[ContainerSpec(id="box", child_ids=["C"])],
    )


def test_allocator_is_monotonic():
    alloc = PrefixAllocator()
    assert [alloc.next_prefix() for _ in range(3)] == ["f1-", "f2-", "f3-"]
    assert alloc.issued == 3


def test_allocator_custom_base():
    assert PrefixAllocator("frag").next_prefix() == "frag1-"


def test_isolate_prefixes_everything():
    scoped = namespace_fragment(sample_fragment(), "p-", IdPolicy.ISOLATE)
    assert scoped.node_ids() == ["p-A", "p-B", "p-C"]
    assert scoped.container_ids() == ["p-box"]
    assert scoped.containers[0].child_ids == ["p-C"]
    assert ("p-A", "p-box", True) in scoped.connections
    assert ("p-A", "p-B", False) in scoped.connections


def test_share_nodes_prefixes_containers_only():
    scoped = namespace_fragment(sample_fragment(), "p-", "share_nodes")
    assert scoped.policy is IdPolicy.SHARE_NODES
    assert scoped.node_ids() == ["A", "B", "C"]
    assert scoped.container_ids() == ["p-box"]
    assert scoped.containers[0].child_ids == ["C"]
    assert ("A", "p-box", True) in scoped.connections
    assert ("B", "C", True) in scoped.connections


def test_labels_keep_unprefixed_ids():
    scoped = namespace_fragment(sample_fragment(), "p-")
    labels = {n.id: n.get_label() for n in scoped.nodes}
    assert labels == {"p-A": "A", "p-B": "Bee", "p-C": "C"}
    assert scoped.containers[0].get_label() == "box"


def test_explicit_wins_over_shorthand():
    fragment = Fragment(
        nodes=[NodeSpec(id="A", outputs=["B"]), NodeSpec(id="B", inputs=["A"])],
        edges=[EdgeSpec(source="A", target="B")],
    )
    scoped = namespace_fragment(fragment, "")
    assert scoped.connections == [("A", "B", True)]


def test_original_fragment_untouched():
    fragment = sample_fragment()
    namespace_fragment(fragment, "p-")
    assert fragment.nodes[0].id == "A"
    assert fragment.containers[0].child_ids == ["C"]
