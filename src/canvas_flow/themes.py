"""
Theme definitions for the canvas-flow preview renderer.

Provides dark and light color palettes.  Each theme defines colors for:
- Canvas background
- Containers (fill, border, label)
- Nodes (fill, border, label)
- Edges
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ThemePalette:
    """Color palette for a theme."""

    # Canvas
    background: str

    # Containers
    container_fill: str
    container_fill_alpha: int
    container_border: str
    container_label: str

    # Nodes
    node_fill: str
    node_border: str
    node_label: str

    # Edges
    edge_color: str


# Catppuccin Mocha (dark theme) - current default
DARK_THEME = ThemePalette(
    background="#11111b",
    container_fill="#181825",
    container_fill_alpha=120,
    container_border="#45475a",
    container_label="#a6adc8",
    node_fill="#1e1e2e",
    node_border="#89b4fa",
    node_label="#cdd6f4",
    edge_color="#7f849c",
)


# Light theme - clean white background with darker accents
LIGHT_THEME = ThemePalette(
    background="#ffffff",
    container_fill="#e6e9ef",
    container_fill_alpha=180,
    container_border="#9ca0b0",
    container_label="#4c4f69",
    node_fill="#eff1f5",
    node_border="#1e66f5",
    node_label="#1e1e2e",
    edge_color="#8c8fa1",
)


# Theme registry
THEMES: dict[str, ThemePalette] = {
    "dark": DARK_THEME,
    "light": LIGHT_THEME,
}


def get_theme(name: str) -> ThemePalette:
    """Get a theme palette by name.

    Raises:
        ValueError: If theme name is not recognized
    """
    if name not in THEMES:
        valid = ", ".join(THEMES.keys())
        raise ValueError(f"Unknown theme '{name}'. Valid themes: {valid}")
    return THEMES[name]
