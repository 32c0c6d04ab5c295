"""Serialization utilities — graph dataclasses ↔ JSON-safe dict conversion.

Used to load documents into the editor and to compare observable graph
state (e.g. before and after an undo sequence).
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Optional

import numpy as np

from graph_editor.constants import (
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    GRAPH_SCHEMA_VERSION,
)
from graph_editor.models.graph import (
    EdgeData,
    Graph,
    NodeData,
    NodeLayout,
    Point2D,
    RemovedElements,
    Viewport,
)


# =====================================================================
# Generic helpers
# =====================================================================


def _serialize_value(val: Any) -> Any:
    """Convert a value to a JSON-safe type."""
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, np.generic):
        return val.item()
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        return _dataclass_to_dict(val)
    if isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, (int, float, str, bool)):
        return val
    return str(val)


def _dataclass_to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a JSON-safe dict."""
    result = {}
    for f in dataclasses.fields(obj):
        val = getattr(obj, f.name)
        result[f.name] = _serialize_value(val)
    return result


# =====================================================================
# Graph serialization
# =====================================================================


def graph_to_dict(graph: Graph) -> dict:
    """Serialize a Graph to a JSON-safe dict.

    Nodes and edges are emitted as lists in insertion order; the schema
    version is embedded.
    """
    return {
        "schema_version": GRAPH_SCHEMA_VERSION,
        "name": graph.name,
        "nodes": [_dataclass_to_dict(n) for n in graph.nodes.values()],
        "edges": [_dataclass_to_dict(e) for e in graph.edges.values()],
        "viewport": _dataclass_to_dict(graph.viewport),
    }


def dict_to_graph(data: dict) -> Graph:
    """Deserialize a dict produced by :func:`graph_to_dict`.

    Raises:
        ValueError: If the document's schema version is newer than supported.
    """
    data = dict(data)  # shallow copy
    schema_version = data.pop("schema_version", GRAPH_SCHEMA_VERSION)
    if _version_tuple(schema_version) > _version_tuple(GRAPH_SCHEMA_VERSION):
        raise ValueError(f"Unsupported graph schema version: {schema_version}")

    nodes = [_dict_to_node(n) for n in data.get("nodes", [])]
    edges = [_dict_to_edge(e) for e in data.get("edges", [])]
    return Graph(
        name=data.get("name", "Untitled"),
        nodes={n.id: n for n in nodes},
        edges={e.id: e for e in edges},
        viewport=Viewport(**data["viewport"]) if data.get("viewport") else Viewport(),
    )


def _version_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in str(version).split("."))


def _dict_to_node(d: dict) -> NodeData:
    return NodeData(
        id=d["id"],
        label=d.get("label", ""),
        position=Point2D(**d["position"]) if "position" in d else Point2D(),
        width=d.get("width", DEFAULT_NODE_WIDTH),
        height=d.get("height", DEFAULT_NODE_HEIGHT),
        parent=d.get("parent"),
        selected=d.get("selected", False),
        collapsed=d.get("collapsed", False),
        collapsed_elements=_dict_to_removed(d.get("collapsed_elements")),
        expanded_layout=_dict_to_layout(d.get("expanded_layout")),
    )


def _dict_to_edge(d: dict) -> EdgeData:
    return EdgeData(
        id=d["id"],
        source=d["source"],
        target=d["target"],
        selected=d.get("selected", False),
    )


def _dict_to_removed(d: Optional[dict]) -> Optional[RemovedElements]:
    if d is None:
        return None
    return RemovedElements(
        nodes=[_dict_to_node(n) for n in d.get("nodes", [])],
        edges=[_dict_to_edge(e) for e in d.get("edges", [])],
    )


def _dict_to_layout(d: Optional[dict]) -> Optional[NodeLayout]:
    if d is None:
        return None
    return NodeLayout(**d)
