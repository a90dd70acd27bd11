"""
Rank assignment — which row each top-level element occupies.

Ranking works on *top-level elements*: free nodes plus containers treated
as atomic units.  Edges touching a container's child are first rewritten to
point at the owning container (``collapse_edges``), so a container sits in
the rank implied by the flow into and out of any of its children.

Algorithm:
  1. Roots are the elements with no incoming edge (self-loops ignored).
  2. Roots are visited in element order.  From each root a breadth-first
     traversal assigns ``rank = parent_rank + 1`` to every element it
     discovers for the first time.  An element already ranked is never
     revisited, so the first traversal to reach it wins.  This is a
     heuristic: it is neither the longest nor the shortest path rank when
     an element is reachable along several paths.
  3. Elements no traversal reaches (isolated nodes, or members of a cycle
     with no entry point) get rank 0.

On a canvas that already holds content, the ranks of placed elements are
passed in as ``pinned``.  They are copied through unchanged and seed the
traversal ahead of the roots, so ranks stay consistent across insertions.

The order within a rank is the order in which elements were ranked; it is
stable for identical input but makes no attempt to reduce edge crossings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass
class RankIndex:
    """Rank and in-rank order for every top-level element.

    Attributes:
        ranks:     Element id -> rank (0 is the top row).
        order:     Element id -> position within its rank.
        rows:      Rank -> element ids in order.
        unreached: Elements ranked 0 because no root reaches them.
    """
    ranks: dict[str, int] = field(default_factory=dict)
    order: dict[str, int] = field(default_factory=dict)
    rows: dict[int, list[str]] = field(default_factory=dict)
    unreached: list[str] = field(default_factory=list)

    def row(self, rank: int) -> list[str]:
        return list(self.rows.get(rank, []))

    @property
    def rank_count(self) -> int:
        return (max(self.rows) + 1) if self.rows else 0

    def _add(self, element_id: str, rank: int) -> None:
        row = self.rows.setdefault(rank, [])
        self.ranks[element_id] = rank
        self.order[element_id] = len(row)
        row.append(element_id)


# ---------------------------------------------------------------------------
# Edge resolution
# ---------------------------------------------------------------------------

def collapse_edges(
    edges: Iterable[tuple[str, str]],
    owner: dict[str, str],
) -> list[tuple[str, str]]:
    """Rewrite child endpoints to their owning container.

    If node C (in container S) connects to node X, this produces S -> X.
    Edges that collapse onto a single element (two children of the same
    container, or plain self-loops) are dropped.  Duplicates are removed,
    first occurrence kept.
    """
    seen: set[tuple[str, str]] = set()
    collapsed: list[tuple[str, str]] = []

    for src, dst in edges:
        src = owner.get(src, src)
        dst = owner.get(dst, dst)
        if src == dst:
            continue
        pair = (src, dst)
        if pair in seen:
            continue
        seen.add(pair)
        collapsed.append(pair)

    return collapsed


def _adjacency(
    elements: list[str],
    edges: Iterable[tuple[str, str]],
) -> tuple[dict[str, list[str]], dict[str, int]]:
    adjacency: dict[str, list[str]] = {element_id: [] for element_id in elements}
    indegree: dict[str, int] = {element_id: 0 for element_id in elements}

    for src, dst in edges:
        if src == dst:
            continue
        if src in adjacency and dst in indegree:
            adjacency[src].append(dst)
            indegree[dst] += 1

    return adjacency, indegree


def find_roots(elements: list[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    """Elements with no incoming edge, in element order.

    Edges with an endpoint outside ``elements`` are ignored, as are
    self-loops.
    """
    _, indegree = _adjacency(elements, edges)
    return [element_id for element_id in elements if indegree[element_id] == 0]


# ---------------------------------------------------------------------------
# Rank assignment
# ---------------------------------------------------------------------------

def assign_ranks(
    elements: list[str],
    edges: Iterable[tuple[str, str]],
    pinned: Optional[dict[str, int]] = None,
) -> RankIndex:
    """Assign an integer rank to every element.

    ``elements`` must already be top-level ids (see ``collapse_edges``);
    duplicates are ignored.  Returns an empty index for empty input.

    ``pinned`` holds ranks fixed by earlier insertions.  Pinned elements keep
    their rank and their order within it and are never reassigned.  They
    seed the traversal, so a new successor of a pinned element lands one
    rank below it.  A new root that feeds pinned elements directly goes one
    rank above the highest of them, or level with it when that is rank 0.
    """
    elements = list(dict.fromkeys(elements))
    pinned = {e: r for e, r in (pinned or {}).items() if e in elements}
    index = RankIndex()
    if not elements:
        return index

    adjacency, indegree = _adjacency(elements, edges)

    def traverse(start: str) -> None:
        queue = [start]
        while queue:
            current = queue.pop(0)
            current_rank = index.ranks[current]
            for target in adjacency[current]:
                if target in index.ranks:
                    continue
                index._add(target, current_rank + 1)
                queue.append(target)

    for element_id, rank in pinned.items():
        index._add(element_id, rank)
    for element_id in pinned:
        traverse(element_id)

    roots = [element_id for element_id in elements if indegree[element_id] == 0]
    for root in roots:
        if root in index.ranks:
            continue
        fed = [pinned[target] for target in adjacency[root] if target in pinned]
        index._add(root, max(min(fed) - 1, 0) if fed else 0)
        traverse(root)

    # Isolated elements and entry-less cycles
    for element_id in elements:
        if element_id not in index.ranks:
            index._add(element_id, 0)
            index.unreached.append(element_id)

    return index
