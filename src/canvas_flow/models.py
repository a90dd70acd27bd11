"""
Data models for canvas-flow.

Two families of models live here:

**Fragment models** describe what a caller submits — one batch of nodes,
edges and containers, all using fragment-local ids:

    Fragment
    ├── NodeSpec       — a node (optional label / size / inputs / outputs)
    ├── EdgeSpec       — an explicitly declared directed edge
    └── ContainerSpec  — a rectangular grouping that owns child node ids

**Record models** describe what the canvas hands to a rendering consumer
after each insertion:

    CanvasSnapshot
    ├── NodeRecord     — a positioned node or container
    └── EdgeRecord     — a connection between two records

Coordinates are two-tier.  Top-level records carry absolute canvas
positions; a container's children carry positions relative to the
container's own top-left corner (``parent_id`` is set and ``extent`` is
``"parent"``).  Nothing here computes layout.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_EDGE_TYPE, NODE_HEIGHT, NODE_WIDTH


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------

class ContainerStyle(BaseModel):
    """Visual marker attached to container records.

    Containers are always drawn the same way: a rounded rectangle with a
    border and a translucent fill.  Renderers may fall back to their own
    palette for any field left unset.

    Attributes:
        border_color:  Outline color.
        fill_color:    Background fill color.
        label_color:   Color for the container label.
        alpha:         Fill opacity (0=transparent, 255=opaque).
        corner_radius: Border radius in pixels.
        border_width:  Width of the border in pixels.
    """
    border_color: Optional[str] = None
    fill_color: Optional[str] = None
    label_color: Optional[str] = None
    alpha: int = 90
    corner_radius: int = 10
    border_width: int = 1


# ---------------------------------------------------------------------------
# Fragment models
# ---------------------------------------------------------------------------

class NodeSpec(BaseModel):
    """A node as supplied in a fragment.

    Connections
    -----------
    ``inputs`` and ``outputs`` are shorthand for connections to *other node
    ids* in the same fragment.  Shorthand connections are **implied**: they
    order and rank the graph like any edge, but a shorthand connection
    between two children of the same container is not rendered.  Use the
    fragment's ``edges`` list to declare a connection that must be drawn.
    """
    id: str
    label: Optional[str] = None
    width: float = Field(default=NODE_WIDTH, gt=0)
    height: float = Field(default=NODE_HEIGHT, gt=0)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)

    def get_label(self) -> str:
        """Return ``label`` if explicitly set, otherwise ``id``."""
        return self.label if self.label else self.id


class EdgeSpec(BaseModel):
    """An explicitly declared directed edge."""
    source: str
    target: str


class ContainerSpec(BaseModel):
    """A container as supplied in a fragment.

    ``child_ids`` is ordered; that order is the fallback column order when
    the children's own edges don't single out a first child.  Containers do
    not nest, and a node belongs to at most one container.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: Optional[str] = None
    child_ids: list[str] = Field(default_factory=list, alias="childIds")
    style: Optional[ContainerStyle] = None

    def get_label(self) -> str:
        """Return ``label`` if explicitly set, otherwise ``id``."""
        return self.label if self.label else self.id


class Fragment(BaseModel):
    """One batch of nodes, edges and containers submitted together."""
    nodes: list[NodeSpec] = Field(default_factory=list)
    edges: list[EdgeSpec] = Field(default_factory=list)
    containers: list[ContainerSpec] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.nodes or self.edges or self.containers)

    def all_connections(self) -> list[tuple[str, str, bool]]:
        """Return every ``(source, target, explicit)`` connection, deduplicated.

        Explicit edges come first, in declaration order, followed by the
        node shorthand (``inputs`` then ``outputs``, node by node).  When a
        pair is declared both ways it is reported once, as explicit.
        """
        explicit: dict[tuple[str, str], None] = {}
        for edge in self.edges:
            explicit[(edge.source, edge.target)] = None

        implied: dict[tuple[str, str], None] = {}
        for node in self.nodes:
            for input_id in node.inputs:
                implied[(input_id, node.id)] = None
            for output_id in node.outputs:
                implied[(node.id, output_id)] = None

        connections = [(src, dst, True) for src, dst in explicit]
        connections.extend(
            (src, dst, False) for src, dst in implied if (src, dst) not in explicit
        )
        return connections


# ---------------------------------------------------------------------------
# Render records
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """Top-left corner of a record."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class NodeRecord(BaseModel):
    """A positioned node or container, ready for a rendering consumer.

    ``position`` is absolute for top-level records and container-relative
    for children.  Children set ``parent_id`` and ``extent="parent"``: they
    may be dragged, but never outside their container.  Container records
    have ``type="container"`` and carry a ``style`` marker.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    position: Position
    width: float
    height: float
    label: str
    draggable: bool = True
    type: str = "node"
    parent_id: Optional[str] = None
    extent: Optional[str] = None
    style: Optional[ContainerStyle] = None

    @property
    def is_container(self) -> bool:
        return self.type == "container"


def edge_record_id(source: str, target: str) -> str:
    """Derived identity of the edge ``source -> target``."""
    return f"edge-{source}-{target}"


class EdgeRecord(BaseModel):
    """A connection between two records.

    ``parent_id`` is set when both endpoints are children of the same
    container; such edges are internal to that container.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    type: str = DEFAULT_EDGE_TYPE
    animated: bool = False
    parent_id: Optional[str] = None


class CanvasSnapshot(BaseModel):
    """An immutable view of the canvas between two insertions.

    Flat Access
    -----------
    Records are kept in insertion order.  ``get_node`` / ``get_edge`` look
    records up by id; ``top_level()`` and ``children_of()`` split the two
    coordinate tiers; ``main_edges()`` and ``internal_edges()`` split edges
    by whether they stay inside one container.
    """
    model_config = ConfigDict(frozen=True)

    version: int = 0
    nodes: tuple[NodeRecord, ...] = ()
    edges: tuple[EdgeRecord, ...] = ()

    def get_node(self, node_id: str) -> Optional[NodeRecord]:
        """Look up a node or container record by id."""
        for record in self.nodes:
            if record.id == node_id:
                return record
        return None

    def get_edge(self, edge_id: str) -> Optional[EdgeRecord]:
        for record in self.edges:
            if record.id == edge_id:
                return record
        return None

    def top_level(self) -> list[NodeRecord]:
        """Records positioned in absolute canvas coordinates."""
        return [r for r in self.nodes if r.parent_id is None]

    def children_of(self, container_id: str) -> list[NodeRecord]:
        return [r for r in self.nodes if r.parent_id == container_id]

    def containers(self) -> list[NodeRecord]:
        return [r for r in self.nodes if r.is_container]

    def main_edges(self) -> list[EdgeRecord]:
        return [e for e in self.edges if e.parent_id is None]

    def internal_edges(self) -> list[EdgeRecord]:
        return [e for e in self.edges if e.parent_id is not None]

    def absolute_position(self, node_id: str) -> Optional[Position]:
        """Canvas-global top-left of a record, resolving container offsets."""
        record = self.get_node(node_id)
        if record is None:
            return None
        if record.parent_id is None:
            return record.position
        parent = self.get_node(record.parent_id)
        if parent is None:
            return None
        return Position(
            x=parent.position.x + record.position.x,
            y=parent.position.y + record.position.y,
        )
