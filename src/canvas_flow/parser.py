"""YAML fragment loader for canvas-flow.

A fragment file lists nodes, edges and containers using local ids:

    nodes:
      - id: A
      - id: B
        label: Check
        inputs: [A]
      - id: C
        width: 200
    edges:
      - {source: A, target: C}
    containers:
      - id: success
        childIds: [C]

Containers accept ``childIds``, ``child_ids`` or ``children`` for their
child list; edges accept ``source``/``target`` or ``from``/``to``.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from .config import NODE_HEIGHT, NODE_WIDTH
from .models import (
    CanvasSnapshot,
    ContainerSpec,
    ContainerStyle,
    EdgeSpec,
    Fragment,
    NodeSpec,
)


def parse_fragment_yaml(yaml_str: str) -> Fragment:
    """Parse a YAML string into a Fragment."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level, got {type(data).__name__}")

    # Allow the fragment to be nested under a "fragment" key
    if "fragment" in data:
        data = data["fragment"] or {}

    return parse_fragment_dict(data)


def parse_fragment_file(path: str | Path) -> Fragment:
    """Parse a YAML file into a Fragment."""
    content = Path(path).read_text()
    return parse_fragment_yaml(content)


def parse_fragment_dict(data: dict) -> Fragment:
    """Build a Fragment from plain data (e.g. decoded YAML or JSON)."""
    return Fragment(
        nodes=[_parse_node(n) for n in data.get("nodes") or []],
        edges=[_parse_edge(e) for e in data.get("edges") or []],
        containers=[_parse_container(c) for c in data.get("containers") or []],
    )


def _parse_node(data: dict | str) -> NodeSpec:
    """Parse a single node; a bare string is shorthand for ``{id: ...}``."""
    if isinstance(data, str):
        return NodeSpec(id=data)
    if not isinstance(data, dict) or data.get("id") is None:
        raise ValueError(f"Node needs an id: {data!r}")

    width = data.get("width")
    height = data.get("height")
    return NodeSpec(
        id=str(data["id"]),
        label=data.get("label"),
        width=NODE_WIDTH if width is None else float(width),
        height=NODE_HEIGHT if height is None else float(height),
        inputs=[str(i) for i in data.get("inputs") or []],
        outputs=[str(o) for o in data.get("outputs") or []],
    )


def _parse_edge(data: dict) -> EdgeSpec:
    if not isinstance(data, dict):
        raise ValueError(f"Edge must be a mapping: {data!r}")
    source = data.get("source", data.get("from"))
    target = data.get("target", data.get("to"))
    if source is None or target is None:
        raise ValueError(f"Edge needs a source and a target: {data!r}")
    return EdgeSpec(source=str(source), target=str(target))


def _parse_container(data: dict) -> ContainerSpec:
    if not isinstance(data, dict) or data.get("id") is None:
        raise ValueError(f"Container needs an id: {data!r}")

    children = data.get("childIds", data.get("child_ids", data.get("children"))) or []
    style = None
    if data.get("style"):
        style = ContainerStyle(**data["style"])

    return ContainerSpec(
        id=str(data["id"]),
        label=data.get("label"),
        child_ids=[str(c) for c in children],
        style=style,
    )


def fragment_to_yaml(fragment: Fragment) -> str:
    """Serialize a Fragment back to YAML."""
    data = {"nodes": [], "edges": [], "containers": []}

    for node in fragment.nodes:
        node_data = {"id": node.id}
        if node.label:
            node_data["label"] = node.label
        if node.width != NODE_WIDTH:
            node_data["width"] = node.width
        if node.height != NODE_HEIGHT:
            node_data["height"] = node.height
        if node.inputs:
            node_data["inputs"] = list(node.inputs)
        if node.outputs:
            node_data["outputs"] = list(node.outputs)
        data["nodes"].append(node_data)

    for edge in fragment.edges:
        data["edges"].append({"source": edge.source, "target": edge.target})

    for container in fragment.containers:
        cont_data = {"id": container.id, "childIds": list(container.child_ids)}
        if container.label:
            cont_data["label"] = container.label
        if container.style:
            style_dict = {
                k: v for k, v in container.style.model_dump().items()
                if v is not None
            }
            if style_dict:
                cont_data["style"] = style_dict
        data["containers"].append(cont_data)

    return yaml.dump(data, default_flow_style=False, sort_keys=False)


def snapshot_to_dict(snapshot: CanvasSnapshot) -> dict:
    """Plain-data export of a snapshot for a rendering consumer.

    Node records use ``parentId`` for the owning container, matching the
    camelCase most browser-side graph renderers expect.
    """
    nodes = []
    for record in snapshot.nodes:
        node_data = {
            "id": record.id,
            "type": record.type,
            "position": {"x": record.position.x, "y": record.position.y},
            "width": record.width,
            "height": record.height,
            "data": {"label": record.label},
            "draggable": record.draggable,
        }
        if record.parent_id is not None:
            node_data["parentId"] = record.parent_id
            node_data["extent"] = record.extent
        if record.style is not None:
            node_data["style"] = record.style.model_dump(exclude_none=True)
        nodes.append(node_data)

    edges = []
    for record in snapshot.edges:
        edge_data = {
            "id": record.id,
            "source": record.source,
            "target": record.target,
            "type": record.type,
            "animated": record.animated,
        }
        if record.parent_id is not None:
            edge_data["parentId"] = record.parent_id
        edges.append(edge_data)

    return {"version": snapshot.version, "nodes": nodes, "edges": edges}
