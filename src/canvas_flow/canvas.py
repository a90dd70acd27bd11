"""
Incremental canvas — merging fragments into an existing layout.

``LayoutCanvas`` owns the only mutable state in the package.  Each call to
``insert_fragment`` runs the whole pipeline to completion while holding a
lock:

  1. Scope the fragment's ids (prefix, per the chosen ID policy).
  2. Split its nodes and containers into already-present and new.
  3. Drop edges with an endpoint on neither the fragment nor the canvas.
  4. Check that the fragment has a root; abort the call if not.
  5. Lay out the interior of every new container.
  6. Rank the merged graph (container children collapsed into containers),
     keeping the ranks of everything already placed.
  7. Place every new top-level element; frozen ones stay where they are.
  8. Build node and edge records for everything new.

The canvas state is never edited in place.  A new ``CanvasState`` is built
from the old one plus the insertion's additions and swapped in at the very
end, so a snapshot handed out earlier stays valid and an aborted insertion
leaves nothing behind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from .config import LayoutOptions
from .containers import layout_container
from .errors import (
    MISSING_BOTH,
    MISSING_SOURCE,
    MISSING_TARGET,
    DroppedEdge,
    MissingRootNodeError,
)
from .ids import IdPolicy, PrefixAllocator, ScopedFragment, namespace_fragment
from .models import (
    CanvasSnapshot,
    ContainerSpec,
    ContainerStyle,
    EdgeRecord,
    Fragment,
    NodeRecord,
    NodeSpec,
    Position,
    edge_record_id,
)
from .placement import place_ranks
from .ranking import RankIndex, assign_ranks, collapse_edges, find_roots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanvasState:
    """Everything the canvas knows, as of one version.

    Attributes:
        version: Incremented by every insertion that adds records.
        records: Element id -> node record (nodes, containers, children).
        owner:   Child node id -> owning container id.
        edges:   Edge id -> edge record.
        links:   Every accepted connection, rendered or not; ranking input.
        ranks:   Top-level element id -> rank it was placed in.
    """
    version: int = 0
    records: dict[str, NodeRecord] = field(default_factory=dict)
    owner: dict[str, str] = field(default_factory=dict)
    edges: dict[str, EdgeRecord] = field(default_factory=dict)
    links: tuple[tuple[str, str], ...] = ()
    ranks: dict[str, int] = field(default_factory=dict)

    def top_level_ids(self) -> list[str]:
        return [rid for rid, record in self.records.items() if record.parent_id is None]

    def to_snapshot(self) -> CanvasSnapshot:
        return CanvasSnapshot(
            version=self.version,
            nodes=tuple(self.records.values()),
            edges=tuple(self.edges.values()),
        )


@dataclass
class InsertResult:
    """What a single insertion did.

    Attributes:
        prefix:           The prefix applied to the fragment.
        version:          Canvas version after the insertion.
        added_nodes:      Ids of new node and container records.
        added_edges:      Ids of new edge records.
        skipped:          Ids already present on the canvas (idempotent skips).
        dropped_edges:    Edges skipped for a missing endpoint.
        dropped_children: Container child ids that could not be adopted.
        suppressed_edges: Implied same-container connections not rendered.
        ranks:            Rank of every top-level element after the merge.
    """
    prefix: str
    version: int = 0
    added_nodes: list[str] = field(default_factory=list)
    added_edges: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    dropped_edges: list[DroppedEdge] = field(default_factory=list)
    dropped_children: list[str] = field(default_factory=list)
    suppressed_edges: list[tuple[str, str]] = field(default_factory=list)
    ranks: dict[str, int] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.added_nodes or self.added_edges)


class LayoutCanvas:
    """An infinite canvas that fragments are appended to over time.

    Positions, once assigned, never change.  New fragments are placed in
    free space only, below or beside what is already there.

    Usage::

        canvas = LayoutCanvas()
        result = canvas.insert_fragment(fragment)
        snapshot = canvas.snapshot()
    """

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options or LayoutOptions()
        self._lock = threading.Lock()
        self._prefixes = PrefixAllocator(self.options.prefix_base)
        self._state = CanvasState()
        self._snapshot = self._state.to_snapshot()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def snapshot(self) -> CanvasSnapshot:
        """The current immutable snapshot."""
        return self._snapshot

    @property
    def version(self) -> int:
        return self._state.version

    def reset(self) -> None:
        """Forget everything and start from an empty canvas."""
        with self._lock:
            self._prefixes = PrefixAllocator(self.options.prefix_base)
            self._swap(CanvasState())

    def rank_index(self) -> RankIndex:
        """Re-derive the rank index of every top-level element on the canvas."""
        state = self._state
        return assign_ranks(
            state.top_level_ids(),
            collapse_edges(state.links, state.owner),
            pinned=state.ranks,
        )

    def insert_fragment(
        self,
        fragment: Fragment,
        prefix: Optional[str] = None,
        id_policy: Optional[IdPolicy | str] = None,
    ) -> InsertResult:
        """Merge a fragment into the canvas and place everything new.

        Args:
            fragment:  Nodes, edges and containers using fragment-local ids.
            prefix:    Prefix for the fragment's ids.  Auto-generated from a
                       monotonic counter when omitted; reusing a prefix with
                       the same fragment is a no-op.
            id_policy: ``"isolate"`` or ``"share_nodes"``; defaults to the
                       canvas options.

        Raises:
            MissingRootNodeError: The fragment is non-empty and every one of
                its elements has an incoming edge.  The canvas is unchanged.
        """
        policy = IdPolicy(id_policy or self.options.id_policy)
        with self._lock:
            if prefix is None:
                prefix = self._prefixes.next_prefix()
            scoped = namespace_fragment(fragment, prefix, policy)
            state, result = self._merge(self._state, scoped)
            if state is not self._state:
                self._swap(state)
            result.version = self._state.version

        if result.changed:
            logger.info(
                f"Inserted fragment '{prefix}': {len(result.added_nodes)} nodes, "
                f"{len(result.added_edges)} edges (canvas v{result.version})"
            )
        else:
            logger.debug(f"Fragment '{prefix}' added nothing new")
        return result

    # ------------------------------------------------------------------
    # Merge pipeline
    # ------------------------------------------------------------------

    def _swap(self, state: CanvasState) -> None:
        self._state = state
        self._snapshot = state.to_snapshot()

    def _merge(
        self,
        state: CanvasState,
        scoped: ScopedFragment,
    ) -> tuple[CanvasState, InsertResult]:
        result = InsertResult(prefix=scoped.prefix)
        opts = self.options

        # --- Step 1: Genuinely new nodes and containers ---
        new_nodes: dict[str, NodeSpec] = {}
        for node in scoped.nodes:
            if node.id in state.records or node.id in new_nodes:
                result.skipped.append(node.id)
                logger.debug(f"Node '{node.id}' already present, skipping")
                continue
            new_nodes[node.id] = node

        claimed: dict[str, str] = {}
        new_containers: dict[str, ContainerSpec] = {}
        for container in scoped.containers:
            if (container.id in state.records or container.id in new_nodes
                    or container.id in new_containers):
                result.skipped.append(container.id)
                logger.debug(f"Container '{container.id}' already present, skipping")
                continue
            children = self._adopt_children(container, new_nodes, claimed, state, result)
            if container.child_ids and not children:
                result.skipped.append(container.id)
                logger.debug(f"Container '{container.id}' adopted none of its children, skipping")
                continue
            new_containers[container.id] = container.model_copy(update={"child_ids": children})

        owner = {**state.owner, **claimed}

        # --- Step 2: Edges need both endpoints ---
        known = set(state.records) | set(new_nodes) | set(new_containers)
        accepted: list[tuple[str, str, bool]] = []
        for src, dst, explicit in scoped.connections:
            if src in known and dst in known:
                accepted.append((src, dst, explicit))
                continue
            if src not in known and dst not in known:
                reason = MISSING_BOTH
            elif src not in known:
                reason = MISSING_SOURCE
            else:
                reason = MISSING_TARGET
            dropped = DroppedEdge(source=src, target=dst, reason=reason)
            result.dropped_edges.append(dropped)
            logger.warning(f"Fragment '{scoped.prefix}': dropping edge {dropped}")

        # --- Step 3: The fragment must have a root ---
        self._check_root(scoped, accepted, owner, known)

        # --- Step 4: Container interiors ---
        sizes: dict[str, tuple[float, float]] = {
            rid: (record.width, record.height) for rid, record in state.records.items()
        }
        for node in new_nodes.values():
            sizes[node.id] = (node.width, node.height)

        pairs = [(src, dst) for src, dst, _ in accepted]
        interiors = {}
        for container in new_containers.values():
            interior = layout_container(container.child_ids, sizes, pairs, opts)
            interiors[container.id] = interior
            sizes[container.id] = (interior.width, interior.height)

        # --- Step 5: Rank the merged graph ---
        free_nodes = [nid for nid in new_nodes if nid not in claimed]
        elements = state.top_level_ids() + free_nodes + list(new_containers)

        links = list(state.links)
        seen_links = set(links)
        for pair in pairs:
            if pair not in seen_links:
                seen_links.add(pair)
                links.append(pair)

        index = assign_ranks(elements, collapse_edges(links, owner), pinned=state.ranks)
        result.ranks = dict(index.ranks)

        # --- Step 6: Place new top-level elements ---
        frozen = {
            rid: state.records[rid].position for rid in state.top_level_ids()
        }
        positions = place_ranks(index, sizes, frozen, opts)

        # --- Step 7: Node records ---
        records = dict(state.records)
        for nid in free_nodes:
            node = new_nodes[nid]
            records[nid] = NodeRecord(
                id=nid,
                position=positions[nid],
                width=node.width,
                height=node.height,
                label=node.get_label(),
            )
            result.added_nodes.append(nid)

        for cid, container in new_containers.items():
            interior = interiors[cid]
            records[cid] = NodeRecord(
                id=cid,
                position=positions[cid],
                width=interior.width,
                height=interior.height,
                label=container.get_label(),
                type="container",
                style=container.style or ContainerStyle(),
            )
            result.added_nodes.append(cid)
            for child_id in interior.order:
                child = new_nodes[child_id]
                records[child_id] = NodeRecord(
                    id=child_id,
                    position=interior.positions[child_id],
                    width=child.width,
                    height=child.height,
                    label=child.get_label(),
                    parent_id=cid,
                    extent="parent",
                )
                result.added_nodes.append(child_id)

        # --- Step 8: Edge records ---
        edges = dict(state.edges)
        for src, dst, explicit in accepted:
            eid = edge_record_id(src, dst)
            if eid in edges:
                logger.debug(f"Edge '{eid}' already present, skipping")
                continue
            src_owner = owner.get(src)
            internal = src_owner is not None and src_owner == owner.get(dst)
            if internal and not explicit:
                if (src, dst) not in result.suppressed_edges:
                    result.suppressed_edges.append((src, dst))
                continue
            edges[eid] = EdgeRecord(
                id=eid,
                source=src,
                target=dst,
                type=opts.edge_type,
                parent_id=src_owner if internal else None,
            )
            result.added_edges.append(eid)

        if not result.changed and len(links) == len(state.links):
            return state, result

        new_state = CanvasState(
            version=state.version + 1 if result.changed else state.version,
            records=records,
            owner=owner,
            edges=edges,
            links=tuple(links),
            ranks=dict(index.ranks),
        )
        return new_state, result

    def _adopt_children(
        self,
        container: ContainerSpec,
        new_nodes: dict[str, NodeSpec],
        claimed: dict[str, str],
        state: CanvasState,
        result: InsertResult,
    ) -> list[str]:
        """Children of a new container that it can actually own.

        A child must be a new node of the same fragment, and not already
        claimed by another container.  Anything else is dropped with a
        warning; an existing node is never moved into a container.
        """
        children: list[str] = []
        for child_id in container.child_ids:
            if child_id in claimed:
                reason = f"already in container '{claimed[child_id]}'"
            elif child_id in new_nodes:
                claimed[child_id] = container.id
                children.append(child_id)
                continue
            elif child_id in state.records:
                reason = "already placed on the canvas"
            else:
                reason = "not a node of this fragment"
            result.dropped_children.append(child_id)
            logger.warning(f"Container '{container.id}': dropping child '{child_id}' ({reason})")
        return children

    def _check_root(
        self,
        scoped: ScopedFragment,
        accepted: list[tuple[str, str, bool]],
        owner: dict[str, str],
        known: set[str],
    ) -> None:
        """Raise MissingRootNodeError if the fragment has no root element.

        The fragment's elements are the top-level elements it names: its own
        nodes and containers plus any canvas element its edges reach, with
        children collapsed into their containers.  Only the fragment's own
        connections count as incoming edges.
        """
        named = scoped.node_ids() + scoped.container_ids()
        named.extend(end for src, dst, _ in accepted for end in (src, dst))
        elements = list(dict.fromkeys(owner.get(e, e) for e in named if e in known))
        if not elements:
            return

        edges = collapse_edges(((src, dst) for src, dst, _ in accepted), owner)
        if find_roots(elements, edges):
            return

        error = MissingRootNodeError(scoped.prefix, elements)
        logger.warning(f"Abandoning insertion: {error}")
        raise error
