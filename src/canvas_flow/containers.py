"""
Container interior layout.

A container's children are stacked in a single column.  The column order
follows the edges among the children: a breadth-first traversal seeded from
every child without an internal incoming edge, falling back to the child
list order for children the traversal never reaches (or for all of them
when every child has an incoming edge).

All child positions are relative to the container's own top-left corner.
Children share the same left inset (``container_padding``) and are stacked
``container_child_gap`` apart.  The container's size is then derived from
the actual extents of the placed children, so the padding on every side is
exact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import LayoutOptions
from .models import Position
from .ranking import find_roots


@dataclass
class ContainerLayout:
    """Computed interior of one container.

    Attributes:
        positions: Child id -> container-relative top-left.
        order:     Child ids top to bottom.
        width:     Required container width.
        height:    Required container height.
    """
    positions: dict[str, Position] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0


def internal_edges(
    child_ids: Iterable[str],
    edges: Iterable[tuple[str, str]],
) -> list[tuple[str, str]]:
    """Edges whose endpoints are both in ``child_ids`` (self-loops excluded)."""
    children = set(child_ids)
    return [
        (src, dst) for src, dst in edges
        if src in children and dst in children and src != dst
    ]


def order_children(child_ids: list[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    """Column order for a container's children.

    Breadth-first from the children with no internal incoming edge, in list
    order.  Children left unvisited (cycles without an entry point) follow in
    list order.
    """
    child_ids = list(dict.fromkeys(child_ids))
    edges = internal_edges(child_ids, edges)

    adjacency: dict[str, list[str]] = {child_id: [] for child_id in child_ids}
    for src, dst in edges:
        adjacency[src].append(dst)

    ordered: list[str] = []
    visited: set[str] = set()
    for root in find_roots(child_ids, edges):
        if root in visited:
            continue
        visited.add(root)
        queue = [root]
        while queue:
            current = queue.pop(0)
            ordered.append(current)
            for target in adjacency[current]:
                if target not in visited:
                    visited.add(target)
                    queue.append(target)

    ordered.extend(child_id for child_id in child_ids if child_id not in visited)
    return ordered


def layout_container(
    child_ids: list[str],
    sizes: dict[str, tuple[float, float]],
    edges: Iterable[tuple[str, str]] = (),
    options: Optional[LayoutOptions] = None,
) -> ContainerLayout:
    """Stack a container's children and size the container around them.

    Args:
        child_ids: The container's children, in declared order.
        sizes:     Child id -> (width, height).
        edges:     Any edges; only those between two children are used.
        options:   Padding and gap settings.

    An empty container gets a placeholder interior the size of one default
    node, plus padding, and no positions.
    """
    opts = options or LayoutOptions()
    pad = opts.container_padding

    if not child_ids:
        return ContainerLayout(
            width=opts.node_width + 2 * pad,
            height=opts.node_height + 2 * pad,
        )

    layout = ContainerLayout(order=order_children(child_ids, edges))

    cursor_y = pad
    for child_id in layout.order:
        width, height = sizes.get(child_id, (opts.node_width, opts.node_height))
        layout.positions[child_id] = Position(x=pad, y=cursor_y)
        cursor_y += height + opts.container_child_gap

    # Size from the real extents, not from the cursor
    min_x = min(p.x for p in layout.positions.values())
    min_y = min(p.y for p in layout.positions.values())
    max_x = max(
        p.x + sizes.get(cid, (opts.node_width, opts.node_height))[0]
        for cid, p in layout.positions.items()
    )
    max_y = max(
        p.y + sizes.get(cid, (opts.node_width, opts.node_height))[1]
        for cid, p in layout.positions.items()
    )

    layout.width = (max_x - min_x) + 2 * pad
    layout.height = (max_y - min_y) + 2 * pad
    return layout
