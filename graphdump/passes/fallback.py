"""Defaults for anything earlier passes left unset, and edge reduction."""

from __future__ import annotations

from typing import TYPE_CHECKING

from graphdump.passes.base import Pass

if TYPE_CHECKING:
    from graphdump.core.graph import Graph, Node


def has_visible_inputs(node: Node) -> bool:
    return any(not edge.is_hidden and not edge.from_node.is_hidden for edge in node.inputs)


class FallbackPass(Pass):
    """Always applies; runs last."""

    name = "fallback"

    @classmethod
    def applies(cls, graph: Graph) -> bool:
        return True

    def apply(self, graph: Graph) -> None:
        self.default_nodes(graph)
        self.default_edges(graph)
        if self.options.reduce_edges:
            self.inline_inputs(graph)
        self.hide_orphan_edges(graph)

    def default_nodes(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            node.props.setdefault("kind", "other")
            if node.label is None:
                node.props["label"] = node.simple_class or str(node.id)

    def default_edges(self, graph: Graph) -> None:
        for edge in graph.edges:
            edge.props.setdefault("kind", "other")
            if "label" in edge.props or edge.name is None:
                continue
            if edge.props["kind"] != "control":
                edge.props["label"] = edge.name

    def inline_inputs(self, graph: Graph) -> None:
        """Draw input nodes with no inputs of their own next to each user."""
        for node in graph.nodes.values():
            if node.is_hidden or node.props.get("kind") != "input" or has_visible_inputs(node):
                continue
            node.props["inlined"] = True

    def hide_orphan_edges(self, graph: Graph) -> None:
        for edge in graph.edges:
            if edge.from_node.is_hidden and edge.to_node.is_hidden:
                edge.props["hidden"] = True
