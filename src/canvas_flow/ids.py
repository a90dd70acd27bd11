"""
ID disambiguation for fragments.

Fragments are authored independently, so two fragments may both contain a
node called ``A``.  Before a fragment is merged, every id it introduces is
rewritten into the canvas namespace by prepending a per-fragment prefix.

Two policies are supported:

  isolate      — node ids *and* container ids are prefixed.  Every fragment
                 is a self-contained island; edges can only connect elements
                 of the same fragment.
  share_nodes  — only container ids are prefixed.  Node ids are used as-is,
                 so a later fragment can draw an edge to a node placed by an
                 earlier one simply by naming it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .config import DEFAULT_PREFIX_BASE, ID_POLICY_ISOLATE, ID_POLICY_SHARE_NODES
from .models import ContainerSpec, Fragment, NodeSpec


class IdPolicy(str, Enum):
    ISOLATE = ID_POLICY_ISOLATE
    SHARE_NODES = ID_POLICY_SHARE_NODES


class PrefixAllocator:
    """Hands out fragment prefixes from a monotonic counter.

    Prefixes look like ``"f1-"``, ``"f2-"`` ...; a counter value is never
    handed out twice by the same allocator.
    """

    def __init__(self, base: str = DEFAULT_PREFIX_BASE):
        self.base = base
        self._counter = 0

    def next_prefix(self) -> str:
        self._counter += 1
        return f"{self.base}{self._counter}-"

    @property
    def issued(self) -> int:
        """How many prefixes have been handed out."""
        return self._counter


@dataclass
class ScopedFragment:
    """A fragment rewritten into the canvas namespace.

    Attributes:
        prefix:      The prefix applied to this fragment.
        policy:      The policy used to apply it.
        nodes:       Node specs carrying scoped ids.
        containers:  Container specs carrying scoped ids and scoped child ids.
        connections: Deduplicated ``(source, target, explicit)`` triples using
                     scoped ids; ``explicit`` is True for the fragment's
                     ``edges`` list and False for node shorthand.
    """
    prefix: str
    policy: IdPolicy
    nodes: list[NodeSpec] = field(default_factory=list)
    containers: list[ContainerSpec] = field(default_factory=list)
    connections: list[tuple[str, str, bool]] = field(default_factory=list)

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def container_ids(self) -> list[str]:
        return [c.id for c in self.containers]


def namespace_fragment(
    fragment: Fragment,
    prefix: str,
    policy: IdPolicy | str = IdPolicy.ISOLATE,
) -> ScopedFragment:
    """Rewrite a fragment's ids according to ``policy``.

    Edge endpoints follow the same rule as the ids they refer to: under
    ``isolate`` every endpoint is prefixed (an endpoint the fragment never
    declares ends up naming nothing and is dropped at merge time); under
    ``share_nodes`` only endpoints naming one of the fragment's own
    containers are prefixed.
    """
    policy = IdPolicy(policy)
    container_ids = {c.id for c in fragment.containers}

    def scope_node(node_id: str) -> str:
        if policy is IdPolicy.ISOLATE:
            return prefix + node_id
        return node_id

    def scope_endpoint(element_id: str) -> str:
        if element_id in container_ids or policy is IdPolicy.ISOLATE:
            return prefix + element_id
        return element_id

    scoped = ScopedFragment(prefix=prefix, policy=policy)

    for node in fragment.nodes:
        new_id = scope_node(node.id)
        scoped.nodes.append(node.model_copy(update={
            "id": new_id,
            "label": node.get_label(),
            "inputs": [scope_endpoint(i) for i in node.inputs],
            "outputs": [scope_endpoint(o) for o in node.outputs],
        }))

    for container in fragment.containers:
        new_id = prefix + container.id
        scoped.containers.append(container.model_copy(update={
            "id": new_id,
            "label": container.get_label(),
            "child_ids": [scope_node(c) for c in container.child_ids],
        }))

    scoped.connections = [
        (scope_endpoint(src), scope_endpoint(dst), explicit)
        for src, dst, explicit in fragment.all_connections()
    ]
    return scoped
