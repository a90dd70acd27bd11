"""Errors and reports raised or collected while inserting fragments."""

from __future__ import annotations

from dataclasses import dataclass


class CanvasLayoutError(Exception):
    """Base class for errors that abort a single insertion."""


class MissingRootNodeError(CanvasLayoutError):
    """A non-empty fragment has no top-level element without incoming edges.

    Raised before the canvas is touched; the insertion is abandoned as a
    whole and the canvas keeps its previous state.
    """

    def __init__(self, prefix: str, element_ids: list[str]):
        self.prefix = prefix
        self.element_ids = element_ids
        preview = ", ".join(element_ids[:5])
        if len(element_ids) > 5:
            preview += ", ..."
        super().__init__(
            f"Fragment '{prefix}' has no root element "
            f"(every element has an incoming edge): {preview}"
        )


# Reasons recorded on DroppedEdge
MISSING_SOURCE = "missing source"
MISSING_TARGET = "missing target"
MISSING_BOTH = "missing source and target"


@dataclass
class DroppedEdge:
    """An edge skipped because an endpoint is on neither the fragment nor the canvas."""
    source: str
    target: str
    reason: str

    def __str__(self) -> str:
        return f"{self.source} -> {self.target} ({self.reason})"
