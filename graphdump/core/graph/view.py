"""Visibility rules shared by renderers.

Renderers read a finished graph without changing it. These helpers decide
what a renderer should emit:

- a hidden node is not drawn, but gets an invisible anchor when an adjacent
  visible node is shaded, so dangling edges still point somewhere;
- an inlined node is never drawn on its own; each of its uses gets a copy
  drawn next to the consuming node;
- an edge is dropped when it is hidden itself, or when a hidden endpoint is
  paired with an endpoint that is not shaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphdump.core.graph.base import Graph
    from graphdump.core.graph.models import Edge, Node


def is_shaded(node: Node) -> bool:
    return node.props.get("spotlight") == "shaded"


def is_inlined(node: Node) -> bool:
    return bool(node.props.get("inlined"))


def node_is_drawn(node: Node) -> bool:
    """True for a node declared as an element of its own."""
    return not node.is_hidden and not is_inlined(node)


def node_needs_anchor(node: Node) -> bool:
    """True for a hidden node that still needs an invisible placeholder."""
    if not node.is_hidden or is_inlined(node):
        return False
    return any(not adjacent.is_hidden and is_shaded(adjacent) for adjacent in node.adjacent())


def edge_is_drawn(edge: Edge) -> bool:
    if edge.is_hidden:
        return False
    if edge.from_node.is_hidden and not is_shaded(edge.to_node):
        return False
    if edge.to_node.is_hidden and not is_shaded(edge.from_node):
        return False
    return True


def inline_uses(edge: Edge) -> bool:
    """True when the edge is drawn from a per-use copy of an inlined node."""
    return edge_is_drawn(edge) and is_inlined(edge.from_node) and not edge.to_node.is_hidden


def drawn_nodes(graph: Graph) -> list[Node]:
    return [node for node in graph.nodes.values() if node_is_drawn(node)]


def drawn_edges(graph: Graph) -> list[Edge]:
    return [edge for edge in graph.edges if edge_is_drawn(edge)]
