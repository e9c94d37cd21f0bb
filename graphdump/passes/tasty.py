"""Simplification of Truffle AST graphs dumped by the Tasty language."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from graphdump.core.graph.traversal import reachable_outputs
from graphdump.passes.base import Pass, has_namespace
from graphdump.passes.ranks import RECEIVER_SLOT, RankOrder, argument_index, order_arguments

if TYPE_CHECKING:
    from graphdump.core.graph import Edge, Graph, Node

TASTY_NAMESPACE = ("org.tastytruffle.core",)

LABEL_SUFFIXES = ("NodeGen", "Node")

# Accessor class suffix -> label prefix. Longer suffixes first, because
# CallFieldReadNode also ends with FieldReadNode.
ACCESSORS = (
    ("CallFieldReadNode", "CallFieldRead"),
    ("CallFieldWriteNode", "CallFieldWrite"),
    ("FieldReadNode", "FieldRead"),
    ("FieldWriteNode", "FieldWrite"),
)

LOCAL_PATTERN = re.compile(r"Local\((\w+), \w+\)")


def strip_label_suffix(name: str) -> str:
    """'IntAddNodeGen' -> 'IntAdd', 'ReturnNode' -> 'Return'."""
    for suffix in LABEL_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def label_arguments(edges: list[Edge]) -> None:
    """Label receiver and positional argument edges of a call."""
    for edge in edges:
        if edge.name == RECEIVER_SLOT:
            edge.props["label"] = "receiver"
            continue
        index = argument_index(edge)
        if index is not None:
            edge.props["argument_index"] = index
            edge.props["label"] = f"arg{index}"


class TastyPass(Pass):
    """Applies when the graph holds nodes of the Tasty interpreter."""

    name = "tasty"

    @classmethod
    def applies(cls, graph: Graph) -> bool:
        return has_namespace(graph, TASTY_NAMESPACE)

    def apply(self, graph: Graph) -> None:
        self.hide_data_trees(graph)
        self.simplify_labels(graph)
        self.simplify_blocks(graph)
        self.simplify_loops(graph)
        self.simplify_field_accessors(graph)
        self.simplify_applies(graph)
        self.simplify_literals(graph)
        self.simplify_ops(graph)
        self.simplify_locals(graph)

    def hide_data_trees(self, graph: Graph) -> None:
        """Hide literal data trees (classes like ``TastyData$Tuple``) and all below."""
        for node in list(graph.nodes.values()):
            node_class = node.node_class
            if "Data" in node_class and "$" in node_class and not node.is_hidden:
                for reached in reachable_outputs(node):
                    reached.props["hidden"] = True

    def simplify_labels(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            label = node.label
            if label:
                # Only labels decoded with a Tasty node are shortened.
                if node.is_synthetic or not node.node_class.startswith(TASTY_NAMESPACE):
                    continue
                shorter = strip_label_suffix(label)
                if shorter != label:
                    node.props["label"] = shorter
                continue

            node_class = node.node_class
            if not node_class:
                continue
            if node_class.endswith("DefDefNode") and "symbol" in node.props:
                node.props["label"] = f"Method({node.props['symbol']})"
            else:
                node.props["label"] = strip_label_suffix(node.simple_class)

    def simplify_blocks(self, graph: Graph) -> None:
        """Lift the elements of a Truffle BlockNode onto the block's owner.

        ``owner -block-> BlockNode -elements[i]-> child`` becomes
        ``owner -> child`` for every element, in order.
        """
        for node in list(graph.nodes.values()):
            if node.is_hidden or node.is_synthetic:
                continue
            if not node.node_class.startswith(TASTY_NAMESPACE):
                continue
            block_edges = [e for e in node.outputs_named("block") if not e.props.get("synthetic")]
            if not block_edges:
                continue
            if len(block_edges) > 1:
                self.fail(f"{len(block_edges)} block children, expected one", node)

            block_edge = block_edges[0]
            wrapper = block_edge.to_node
            if wrapper.is_hidden or not wrapper.node_class.endswith("BlockNode"):
                continue

            # Lifted edges name the element slot, never the block slot.
            slot = {k: v for k, v in block_edge.props.items() if k not in ("name", "index")}
            previous = block_edge
            for element in list(wrapper.outputs):
                previous = graph.create_edge(
                    node,
                    element.to_node,
                    {**slot, **element.props, "synthetic": True},
                    after=previous,
                )
            wrapper.props["hidden"] = True
            self.defer_rank(node, RankOrder.OUTPUT_ORDER)

    def simplify_loops(self, graph: Graph) -> None:
        """Collapse ``loop -loopNode-> LoopNode -repeatingNode-> repeating``.

        The repeating node's children (condition and body) hang off the loop
        node directly; the two indirection nodes are hidden.
        """
        for node in list(graph.nodes.values()):
            if node.is_hidden or node.is_synthetic:
                continue
            loop_edges = node.outputs_named("loopNode")
            if len(loop_edges) != 1:
                continue

            loop_edge = loop_edges[0]
            loop_node = loop_edge.to_node
            if loop_node.is_hidden:
                continue
            repeating_edges = loop_node.outputs_named("repeatingNode")
            if len(repeating_edges) != 1:
                self.fail(
                    f"Loop node {loop_node.id} has {len(repeating_edges)} "
                    "repeatingNode children, expected one",
                    node,
                )

            repeating = repeating_edges[0].to_node
            previous = loop_edge
            for child in list(repeating.outputs):
                previous = graph.create_edge(
                    node,
                    child.to_node,
                    {**child.props, "synthetic": True, "label": child.name},
                    after=previous,
                )
            loop_node.props["hidden"] = True
            repeating.props["hidden"] = True
            self.defer_rank(node, RankOrder.NAMED_SLOTS, ("condition", "body"))

    def simplify_field_accessors(self, graph: Graph) -> None:
        """Replace ``accessor -applyNode-> call`` with one synthetic node.

        The synthetic node takes over the accessor's inputs and the call's
        outputs, and is labelled ``FieldRead(name)`` and so on.
        """
        for node in list(graph.nodes.values()):
            if node.is_hidden or node.is_synthetic:
                continue
            prefix = _accessor_label(node.node_class)
            if prefix is None or "field" not in node.props:
                continue

            apply_edges = node.outputs_named("applyNode")
            if len(apply_edges) != 1:
                self.fail(f"Accessor has {len(apply_edges)} applyNode children, expected one", node)
            apply_edge = apply_edges[0]
            call = apply_edge.to_node

            desugared = graph.create_node(
                {
                    "label": f"{prefix}({node.props['field']})",
                    "kind": "call" if prefix.startswith("Call") else "memory",
                    "synthetic": True,
                    "desugared_from": node.id,
                }
            )
            for edge in list(node.inputs):
                if edge.is_hidden:
                    continue
                graph.create_edge(
                    edge.from_node, desugared, {**edge.props, "synthetic": True}, after=edge
                )
            for edge in list(node.outputs):
                if edge is not apply_edge and not edge.is_hidden:
                    graph.create_edge(desugared, edge.to_node, {**edge.props, "synthetic": True})
            for edge in list(call.outputs):
                if not edge.is_hidden:
                    graph.create_edge(desugared, edge.to_node, {**edge.props, "synthetic": True})

            node.props["hidden"] = True
            call.props["hidden"] = True
            label_arguments(desugared.outputs)
            self.defer_rank(desugared, RankOrder.ARGUMENTS)

    def simplify_applies(self, graph: Graph) -> None:
        """Label calls ``Call(method)`` and their receiver/argument edges."""
        for node in graph.nodes.values():
            if "Apply" not in node.node_class or node.is_hidden:
                continue

            if "selector" in node.props:
                method = str(node.props["selector"]).split(".")[-1]
            elif "signature" in node.props:
                method = str(node.props["signature"]).split("(")[0]
            else:
                continue
            node.props["label"] = f"Call({method})"
            node.props["kind"] = "call"

            receiver, arguments, _ = order_arguments(node.outputs)
            label_arguments(receiver + arguments)
            self.defer_rank(node, RankOrder.ARGUMENTS)

    def simplify_literals(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            if "Literal" not in node.node_class or "constant" not in node.props:
                continue
            node.props["label"] = f"Constant({node.props['constant']})"
            node.props["kind"] = "input"

    def simplify_ops(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            op = node.props.get("op")
            if "IntArithmetic" not in node.node_class or not isinstance(op, str) or not op:
                continue
            node.props["label"] = f"Int{op[0]}{op[1:].lower()}"
            node.props["kind"] = "calc"

    def simplify_locals(self, graph: Graph) -> None:
        """Attach local-variable accesses to one shared node per local."""
        locals_by_name: dict[str, Node] = {
            str(node.props["local_of"]): node
            for node in graph.nodes.values()
            if node.is_synthetic and "local_of" in node.props
        }

        for node in list(graph.nodes.values()):
            if node.is_synthetic or "Local" not in node.node_class or "local" not in node.props:
                continue

            local = str(node.props["local"])
            local_node = locals_by_name.get(local)
            if local_node is None:
                local_node = graph.create_node(
                    {
                        "synthetic": True,
                        "label": local,
                        "kind": "info",
                        "style": "rounded",
                        "local_of": local,
                    }
                )
                locals_by_name[local] = local_node

            if not any(edge.to_node is local_node for edge in node.outputs):
                graph.create_edge(node, local_node, {"kind": "info", "synthetic": True})

            match = LOCAL_PATTERN.fullmatch(local)
            if match and "local_name" not in node.props:
                local_name = match.group(1)
                node.props["local_name"] = local_name
                node.props["label"] = f"{node.label or node.simple_class}({local_name})"


def _accessor_label(node_class: str) -> str | None:
    if not node_class.startswith(TASTY_NAMESPACE):
        return None
    for suffix, label in ACCESSORS:
        if node_class.endswith(suffix):
            return label
    return None
