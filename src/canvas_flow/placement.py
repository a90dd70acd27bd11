"""
Rank placement — turning ranks into canvas coordinates.

One rank is one horizontal row.  Rows are stacked top to bottom, elements
within a row are laid out left to right.  Elements that were placed by an
earlier insertion are *frozen*: their position is copied through and they
are treated as obstacles for everything new.

Placement rules, per rank in increasing order:

  1. A rank whose members include frozen elements is an *anchored* row.
     New members go into the frozen members' row (same top y), starting
     just past the rightmost frozen member.
  2. Any other rank is a *fresh* row, placed at the running vertical
     cursor.  The cursor starts below all frozen content (``"below"``
     placement) or level with its top (``"right"`` placement), and the
     row's horizontal start is ``origin_x`` or just past all frozen content
     respectively.
  3. Before placing a row, its horizontal start is pushed past every box
     already on the canvas (frozen or placed earlier in this call) whose
     vertical span intersects the row band.  This is what keeps new boxes
     from ever overlapping old ones, whatever the ranks say.
  4. After a row, the vertical cursor moves below the row's tallest
     element (new or frozen) plus ``rank_gap``, so later fresh rows always
     flow downward from earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import PLACEMENT_RIGHT, LayoutOptions
from .models import Position
from .ranking import RankIndex


@dataclass
class Box:
    """An axis-aligned bounding box in canvas coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: Box) -> bool:
        """True when the interiors intersect; touching edges don't count."""
        return (
            self.x < other.right and other.x < self.right
            and self.y < other.bottom and other.y < self.bottom
        )

    def spans_band(self, top: float, bottom: float) -> bool:
        """True when this box's vertical extent intersects ``[top, bottom)``."""
        return self.y < bottom and top < self.bottom


def compute_bounds(boxes: Iterable[Box]) -> Optional[Box]:
    """Bounding box of a set of boxes, or None when there are none."""
    boxes = list(boxes)
    if not boxes:
        return None

    min_x = min(b.x for b in boxes)
    min_y = min(b.y for b in boxes)
    max_x = max(b.right for b in boxes)
    max_y = max(b.bottom for b in boxes)

    return Box(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def _clear_band(
    start_x: float,
    top: float,
    height: float,
    obstacles: list[Box],
    gap: float,
) -> float:
    """Leftmost x >= start_x that is clear of every obstacle in the band."""
    x = start_x
    bottom = top + max(height, 1e-9)
    for box in obstacles:
        if box.spans_band(top, bottom):
            x = max(x, box.right + gap)
    return x


def place_ranks(
    index: RankIndex,
    sizes: dict[str, tuple[float, float]],
    frozen: Optional[dict[str, Position]] = None,
    options: Optional[LayoutOptions] = None,
) -> dict[str, Position]:
    """Absolute top-left for every ranked element.

    Args:
        index:   Ranks and in-rank order of the top-level elements.
        sizes:   Element id -> (width, height); containers use their
                 computed size.  Missing entries use the default node size.
        frozen:  Positions fixed by earlier insertions.  They are returned
                 unchanged and never moved.
        options: Gaps, origin and placement policy.

    Returns a mapping covering every frozen element and every ranked element.
    """
    opts = options or LayoutOptions()
    frozen = dict(frozen or {})

    def size_of(element_id: str) -> tuple[float, float]:
        return sizes.get(element_id, (opts.node_width, opts.node_height))

    obstacles: list[Box] = []
    for element_id, pos in frozen.items():
        w, h = size_of(element_id)
        obstacles.append(Box(x=pos.x, y=pos.y, width=w, height=h))

    bounds = compute_bounds(obstacles)
    if bounds is None:
        cursor_y = opts.origin_y
        baseline_x = opts.origin_x
    elif opts.placement == PLACEMENT_RIGHT:
        cursor_y = bounds.y
        baseline_x = bounds.right + opts.node_gap
    else:
        cursor_y = bounds.bottom + opts.rank_gap
        baseline_x = opts.origin_x

    layout: dict[str, Position] = dict(frozen)

    for rank in sorted(index.rows):
        members = index.rows[rank]
        new_members = [m for m in members if m not in frozen]
        anchored = [m for m in members if m in frozen]

        if anchored:
            anchored_bottom = max(frozen[m].y + size_of(m)[1] for m in anchored)
            cursor_y = max(cursor_y, anchored_bottom + opts.rank_gap)
        if not new_members:
            continue

        row_height = max(size_of(m)[1] for m in new_members)

        if anchored:
            row_y = min(frozen[m].y for m in anchored)
            start_x = max(frozen[m].x + size_of(m)[0] for m in anchored) + opts.node_gap
        else:
            row_y = cursor_y
            start_x = baseline_x

        cursor_x = _clear_band(start_x, row_y, row_height, obstacles, opts.node_gap)

        for element_id in new_members:
            w, h = size_of(element_id)
            layout[element_id] = Position(x=cursor_x, y=row_y)
            obstacles.append(Box(x=cursor_x, y=row_y, width=w, height=h))
            cursor_x += w + opts.node_gap

        cursor_y = max(cursor_y, row_y + row_height + opts.rank_gap)

    return layout
