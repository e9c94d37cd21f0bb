"""Queries over a BGV document, returning JSON-ready values.

These back the CLI and are the contract external tools rely on: graph
listings, structural summaries, raw node and edge properties, incident
edges, source positions, and the simplified view renderers draw.
"""

from __future__ import annotations

import math
from typing import Any

from graphdump.bgv import GraphFile
from graphdump.bgv.pool import PoolObject, PoolSourcePosition, describe_value
from graphdump.core.exceptions import NodeNotFound
from graphdump.core.graph import Edge, Graph, Node, describe
from graphdump.core.graph.view import drawn_edges, drawn_nodes, inline_uses, node_needs_anchor
from graphdump.passes import PassOptions, apply_passes

SOURCE_POSITION_KEYS = ("nodeSourcePosition", "sourcePosition")


def to_json(value: Any) -> Any:
    """Convert a property value into plain JSON types."""
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, PoolObject):
        return value.describe()
    if isinstance(value, dict):
        return {str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return describe_value(value)


def get_node(graph: Graph, node_id: int) -> Node:
    node = graph.get_node(node_id)
    if node is None:
        raise NodeNotFound(f"Node {node_id} not found in graph {graph.index} ({graph.name})")
    return node


def edge_summary(edge: Edge) -> dict[str, Any]:
    return {
        "from": edge.from_node.id,
        "from_label": edge.from_node.label,
        "to": edge.to_node.id,
        "to_label": edge.to_node.label,
        "name": edge.name,
        "props": to_json(edge.props),
    }


def list_graphs(dump: GraphFile) -> list[dict[str, Any]]:
    """Index, compiler graph id and composed name of every graph."""
    return [
        {"index": header.index, "graph_id": header.graph_id, "name": header.name}
        for header in dump.graph_headers()
    ]


def graph_info(dump: GraphFile, index: int) -> dict[str, Any]:
    """Counts and structural summary of one graph."""
    graph = dump.read_graph(index)
    summary = describe(graph)
    return {
        "index": graph.index,
        "graph_id": graph.graph_id,
        "name": graph.name,
        "blocks": len(graph.blocks),
        **summary.to_dict(),
        "features": summary.features(),
    }


def node_properties(dump: GraphFile, index: int, node_id: int) -> dict[str, Any]:
    node = get_node(dump.read_graph(index), node_id)
    return to_json(node.props)


def edge_properties(dump: GraphFile, index: int, from_id: int, to_id: int) -> list[dict[str, Any]]:
    """Properties of every edge from ``from_id`` to ``to_id``."""
    graph = dump.read_graph(index)
    source = get_node(graph, from_id)
    get_node(graph, to_id)
    found = [to_json(edge.props) for edge in source.outputs if edge.to_node.id == to_id]
    if not found:
        raise NodeNotFound(f"No edge from node {from_id} to node {to_id} in graph {index}")
    return found


def node_edges(dump: GraphFile, index: int, node_id: int) -> dict[str, list[dict[str, Any]]]:
    """Input and output edges of a node, with endpoint labels."""
    node = get_node(dump.read_graph(index), node_id)
    return {
        "inputs": [edge_summary(edge) for edge in node.inputs],
        "outputs": [edge_summary(edge) for edge in node.outputs],
    }


def source_positions(dump: GraphFile, index: int, node_id: int) -> list[str]:
    """Source position chain of a node, innermost first. Empty if none was dumped."""
    node = get_node(dump.read_graph(index), node_id)
    for key in SOURCE_POSITION_KEYS:
        position = node.props.get(key)
        if isinstance(position, PoolSourcePosition):
            break
    else:
        return []

    lines = []
    for frame in position.chain():
        lines.append(frame.describe())
        lines.extend(f"  {location.describe()}" for location in frame.locations)
    return lines


def graph_view(dump: GraphFile, index: int, options: PassOptions | None = None) -> dict[str, Any]:
    """The graph after the pass pipeline, reduced to what a renderer draws."""
    graph = dump.read_graph(index)
    applied = apply_passes(graph, options)
    return {
        "index": graph.index,
        "name": graph.name,
        "passes": applied,
        "nodes": [
            {
                "id": node.id,
                "label": node.label,
                "kind": node.props.get("kind"),
                "synthetic": node.is_synthetic,
            }
            for node in drawn_nodes(graph)
        ],
        "anchors": [node.id for node in graph.nodes.values() if node_needs_anchor(node)],
        "edges": [
            {
                "from": edge.from_node.id,
                "to": edge.to_node.id,
                "kind": edge.props.get("kind"),
                "label": to_json(edge.props.get("label")),
                "inlined": inline_uses(edge),
            }
            for edge in drawn_edges(graph)
        ],
        "ranks": [[node.id for node in rank] for rank in graph.ranks],
    }
