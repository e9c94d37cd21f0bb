"""Helpers for building small graphs by hand."""

from __future__ import annotations

from typing import Any

from graphdump.core.graph import Edge, Graph, Node

TASTY = "org.tastytruffle.core"


def make_node(graph: Graph, node_class: str, **props: Any) -> Node:
    """Create a node of ``node_class`` with extra properties."""
    return graph.create_node({"node_class": node_class, **props})


def link(graph: Graph, parent: Node, child: Node, name: str, index: int | None = None) -> Edge:
    """Create an AST child edge from ``parent`` to ``child`` through slot ``name``."""
    props: dict[str, Any] = {"name": name}
    if index is not None:
        props["index"] = index
    return graph.create_edge(parent, child, props)


def visible_targets(node: Node) -> list[int]:
    return [e.to_node.id for e in node.outputs if not e.is_hidden and not e.to_node.is_hidden]
