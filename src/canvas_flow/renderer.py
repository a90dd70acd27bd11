"""Static PNG preview of a canvas snapshot, drawn with Pillow.

The preview is a debugging aid, not an interactive surface: it draws the
records exactly where the layout put them so overlaps or odd placements
are visible at a glance.  Containers are drawn first as translucent rounded
rectangles, then edges, then nodes on top.
"""

from __future__ import annotations

import math
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .models import CanvasSnapshot, NodeRecord, Position
from .placement import Box, compute_bounds
from .themes import ThemePalette, get_theme


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = hex_color[0]*2 + hex_color[1]*2 + hex_color[2]*2
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _hex_to_rgba(hex_color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """Convert hex color to RGBA tuple."""
    r, g, b = _hex_to_rgb(hex_color)
    return (r, g, b, alpha)


# --- Drawing primitives ---

def _draw_arrow(
    draw: ImageDraw.ImageDraw,
    start: tuple[float, float],
    end: tuple[float, float],
    color: str,
    width: int = 2,
    arrow_size: int = 10,
):
    """Draw a line with an arrowhead."""
    draw.line([start, end], fill=color, width=width)

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.sqrt(dx * dx + dy * dy)
    if length == 0:
        return

    udx = dx / length
    udy = dy / length

    ax = end[0] - arrow_size * udx + (arrow_size / 2) * udy
    ay = end[1] - arrow_size * udy - (arrow_size / 2) * udx
    bx = end[0] - arrow_size * udx - (arrow_size / 2) * udy
    by = end[1] - arrow_size * udy + (arrow_size / 2) * udx

    draw.polygon([(end[0], end[1]), (ax, ay), (bx, by)], fill=color)


# --- Main renderer ---

class SnapshotRenderer:
    """Renders a CanvasSnapshot to a PNG image."""

    PADDING = 40
    NODE_RADIUS = 8
    LABEL_INSET = 8

    def __init__(self, scale: float = 1.0, theme: str = "dark"):
        self.scale = scale
        self.theme: ThemePalette = get_theme(theme)
        self.font = ImageFont.load_default()

    def render(self, snapshot: CanvasSnapshot, output_path: Optional[str] = None) -> bytes:
        """Render the snapshot to PNG bytes. Optionally save to file."""
        boxes = {
            record.id: self._absolute_box(snapshot, record)
            for record in snapshot.nodes
        }
        bounds = compute_bounds(boxes.values()) or Box(x=0, y=0, width=200, height=120)

        img_width = max(1, int((bounds.width + 2 * self.PADDING) * self.scale))
        img_height = max(1, int((bounds.height + 2 * self.PADDING) * self.scale))

        img = Image.new("RGBA", (img_width, img_height), _hex_to_rgba(self.theme.background))
        draw = ImageDraw.Draw(img)

        # Offset for translating canvas coordinates to image space
        ox = -bounds.x + self.PADDING
        oy = -bounds.y + self.PADDING

        for record in snapshot.containers():
            self._draw_container(draw, record, boxes[record.id], ox, oy)

        for edge in snapshot.edges:
            source = boxes.get(edge.source)
            target = boxes.get(edge.target)
            if source is None or target is None:
                continue
            self._draw_edge(draw, source, target, ox, oy)

        for record in snapshot.nodes:
            if not record.is_container:
                self._draw_node(draw, record, boxes[record.id], ox, oy)

        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        png_bytes = buf.getvalue()

        if output_path:
            Path(output_path).write_bytes(png_bytes)

        return png_bytes

    def _absolute_box(self, snapshot: CanvasSnapshot, record: NodeRecord) -> Box:
        pos = snapshot.absolute_position(record.id) or Position(x=0, y=0)
        return Box(x=pos.x, y=pos.y, width=record.width, height=record.height)

    def _scaled(self, box: Box, ox: float, oy: float) -> tuple[float, float, float, float]:
        s = self.scale
        return (
            (box.x + ox) * s,
            (box.y + oy) * s,
            (box.right + ox) * s,
            (box.bottom + oy) * s,
        )

    def _draw_container(self, draw: ImageDraw.ImageDraw, record: NodeRecord, box: Box, ox: float, oy: float):
        """Draw a container as a translucent rounded rectangle with its label."""
        x1, y1, x2, y2 = self._scaled(box, ox, oy)

        # Record style overrides per field, theme defaults otherwise
        s = record.style
        fill_hex = s.fill_color if s and s.fill_color else self.theme.container_fill
        fill_alpha = s.alpha if s else self.theme.container_fill_alpha
        outline = s.border_color if s and s.border_color else self.theme.container_border
        label_color = s.label_color if s and s.label_color else self.theme.container_label
        radius = s.corner_radius if s else self.NODE_RADIUS
        border_w = s.border_width if s else 1

        draw.rounded_rectangle(
            [x1, y1, x2, y2],
            radius=int(radius * self.scale),
            fill=_hex_to_rgba(fill_hex, fill_alpha),
            outline=outline,
            width=max(1, int(border_w * self.scale)),
        )
        draw.text((x1 + 6, y1 + 4), record.label, fill=label_color, font=self.font)

    def _draw_node(self, draw: ImageDraw.ImageDraw, record: NodeRecord, box: Box, ox: float, oy: float):
        x1, y1, x2, y2 = self._scaled(box, ox, oy)
        draw.rounded_rectangle(
            [x1, y1, x2, y2],
            radius=int(self.NODE_RADIUS * self.scale),
            fill=self.theme.node_fill,
            outline=self.theme.node_border,
            width=max(1, int(2 * self.scale)),
        )
        draw.text(
            (x1 + self.LABEL_INSET * self.scale, (y1 + y2) / 2 - 5),
            record.label,
            fill=self.theme.node_label,
            font=self.font,
        )

    def _draw_edge(self, draw: ImageDraw.ImageDraw, source: Box, target: Box, ox: float, oy: float):
        """Draw a bezier connection.

        Flow is top-to-bottom, so a target below its source is joined
        bottom-center to top-center; anything else uses the side ports.
        """
        s = self.scale
        if target.y >= source.bottom:
            sx, sy = source.x + source.width / 2, source.bottom
            ex, ey = target.x + target.width / 2, target.y
            vertical = True
        else:
            if target.x >= source.right:
                sx, ex = source.right, target.x
            else:
                sx, ex = source.x, target.right
            sy = source.y + source.height / 2
            ey = target.y + target.height / 2
            vertical = False

        sx, sy, ex, ey = (sx + ox) * s, (sy + oy) * s, (ex + ox) * s, (ey + oy) * s

        if vertical:
            cp_offset = max(abs(ey - sy) * 0.4, 20 * s)
            cp1x, cp1y = sx, sy + cp_offset
            cp2x, cp2y = ex, ey - cp_offset
        else:
            cp_offset = max(abs(ex - sx) * 0.4, 20 * s)
            cp1x, cp1y = sx + (cp_offset if ex > sx else -cp_offset), sy
            cp2x, cp2y = ex - (cp_offset if ex > sx else -cp_offset), ey

        points = []
        steps = 24
        for i in range(steps + 1):
            t = i / steps
            x = (1-t)**3 * sx + 3*(1-t)**2*t * cp1x + 3*(1-t)*t**2 * cp2x + t**3 * ex
            y = (1-t)**3 * sy + 3*(1-t)**2*t * cp1y + 3*(1-t)*t**2 * cp2y + t**3 * ey
            points.append((x, y))

        color = self.theme.edge_color
        width = max(1, int(2 * s))
        for i in range(len(points) - 2):
            draw.line([points[i], points[i+1]], fill=color, width=width)
        _draw_arrow(draw, points[-2], points[-1], color=color, width=width, arrow_size=int(10 * s))
