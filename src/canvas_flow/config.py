"""
Layout configuration for canvas-flow.

All geometry is expressed in canvas units (pixels at scale 1.0).  The
defaults below describe a top-to-bottom flow: one rank per row, rows
stacked with ``RANK_GAP`` between them, elements within a row separated by
``NODE_GAP``.

Spacing constants:
  - Nodes: 160 x 48
  - Between elements in a rank: 40px
  - Between ranks: 80px
  - Container padding: 20px, 24px between stacked children

Every option can be overridden per canvas with a ``LayoutOptions``
instance, or from the environment via ``LayoutOptions.from_env()``:

    CANVAS_FLOW_NODE_WIDTH, CANVAS_FLOW_NODE_HEIGHT, CANVAS_FLOW_NODE_GAP,
    CANVAS_FLOW_RANK_GAP, CANVAS_FLOW_CONTAINER_PADDING,
    CANVAS_FLOW_CONTAINER_CHILD_GAP, CANVAS_FLOW_ORIGIN_X,
    CANVAS_FLOW_ORIGIN_Y, CANVAS_FLOW_PLACEMENT, CANVAS_FLOW_ID_POLICY,
    CANVAS_FLOW_PREFIX_BASE, CANVAS_FLOW_EDGE_TYPE
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional


# --- Geometry constants ---

NODE_WIDTH = 160
NODE_HEIGHT = 48

NODE_GAP = 40
RANK_GAP = 80

CONTAINER_PADDING = 20
CONTAINER_CHILD_GAP = 24

# --- Policy values ---

PLACEMENT_BELOW = "below"
PLACEMENT_RIGHT = "right"
PLACEMENTS = (PLACEMENT_BELOW, PLACEMENT_RIGHT)

ID_POLICY_ISOLATE = "isolate"
ID_POLICY_SHARE_NODES = "share_nodes"
ID_POLICIES = (ID_POLICY_ISOLATE, ID_POLICY_SHARE_NODES)

DEFAULT_PREFIX_BASE = "f"
DEFAULT_EDGE_TYPE = "bezier"

ENV_PREFIX = "CANVAS_FLOW_"


@dataclass
class LayoutOptions:
    """Options shared by ranking, container layout and placement.

    Attributes:
        node_width / node_height: Default size for nodes that don't carry one,
            and the size of an empty container's placeholder interior.
        node_gap:     Horizontal gap between elements in the same rank.
        rank_gap:     Vertical gap between consecutive ranks.
        container_padding:   Inset between a container's edge and its children.
        container_child_gap: Vertical gap between stacked container children.
        origin_x / origin_y: Where the first fragment on an empty canvas starts.
        placement:    Where a new fragment's fresh rows begin — ``"below"``
                      (under everything already placed, at ``origin_x``) or
                      ``"right"`` (beside everything already placed).
        id_policy:    Default ID policy — ``"isolate"`` or ``"share_nodes"``.
        prefix_base:  Leading text of auto-generated fragment prefixes.
        edge_type:    Curve style written into every edge record.
    """
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT
    node_gap: float = NODE_GAP
    rank_gap: float = RANK_GAP
    container_padding: float = CONTAINER_PADDING
    container_child_gap: float = CONTAINER_CHILD_GAP
    origin_x: float = 0.0
    origin_y: float = 0.0
    placement: str = PLACEMENT_BELOW
    id_policy: str = ID_POLICY_ISOLATE
    prefix_base: str = DEFAULT_PREFIX_BASE
    edge_type: str = DEFAULT_EDGE_TYPE

    def __post_init__(self):
        if self.placement not in PLACEMENTS:
            valid = ", ".join(PLACEMENTS)
            raise ValueError(f"Unknown placement '{self.placement}'. Valid placements: {valid}")
        if self.id_policy not in ID_POLICIES:
            valid = ", ".join(ID_POLICIES)
            raise ValueError(f"Unknown id policy '{self.id_policy}'. Valid policies: {valid}")
        for name in ("node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("node_gap", "rank_gap", "container_padding", "container_child_gap"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> LayoutOptions:
        """Build options from ``CANVAS_FLOW_*`` environment variables.

        Unset variables keep their defaults.  Numeric fields are parsed as
        floats; a malformed value raises ``ValueError``.
        """
        env = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if isinstance(f.default, str):
                values[f.name] = raw.strip()
            else:
                try:
                    values[f.name] = float(raw)
                except ValueError:
                    raise ValueError(
                        f"{ENV_PREFIX + f.name.upper()} must be a number, got '{raw}'"
                    ) from None
        return cls(**values)
