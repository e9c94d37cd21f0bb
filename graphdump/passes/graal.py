"""Annotation of Graal compiler graphs: node kinds, labels and edge kinds."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from graphdump.bgv.pool import describe_value
from graphdump.passes.base import Pass, has_namespace

if TYPE_CHECKING:
    from graphdump.core.graph import Edge, Graph, Node

GRAAL_NAMESPACES = (
    "org.graalvm.compiler.",
    "jdk.graal.compiler.",
    "jdk.internal.vm.compiler.",
)

CLASSES_BY_KIND: dict[str, tuple[str, ...]] = {
    "control": (
        "StartNode",
        "BeginNode",
        "KillingBeginNode",
        "EndNode",
        "MergeNode",
        "IfNode",
        "IntegerSwitchNode",
        "TypeSwitchNode",
        "LoopBeginNode",
        "LoopEndNode",
        "LoopExitNode",
        "ReturnNode",
        "UnwindNode",
        "ExceptionObjectNode",
    ),
    "call": (
        "InvokeNode",
        "InvokeWithExceptionNode",
        "MethodCallTargetNode",
        "ForeignCallNode",
        "ForeignCallWithExceptionNode",
    ),
    "alloc": ("NewInstanceNode", "NewArrayNode", "CommitAllocationNode", "AllocatedObjectNode"),
    "virtual": ("VirtualInstanceNode", "VirtualArrayNode", "VirtualBoxingNode"),
    "guard": ("FixedGuardNode", "GuardNode", "DeoptimizeNode", "DynamicDeoptimizeNode", "PiNode"),
    "sync": ("MonitorEnterNode", "MonitorExitNode", "RawMonitorEnterNode", "MonitorIdNode"),
    "memory": (
        "LoadFieldNode",
        "StoreFieldNode",
        "LoadIndexedNode",
        "StoreIndexedNode",
        "ReadNode",
        "WriteNode",
        "ArrayLengthNode",
        "MemoryPhiNode",
    ),
    "input": ("ConstantNode", "ParameterNode"),
    "info": ("FrameState", "VirtualObjectState", "StateSplitProxyNode"),
}

# Simple class name -> node kind.
NODE_KINDS_BY_CLASS = {name: kind for kind, names in CLASSES_BY_KIND.items() for name in names}

FRAME_STATE_CLASSES = frozenset({"FrameState", "VirtualObjectState"})

INFO_INPUT_TYPES = frozenset(
    {"Condition", "State", "Guard", "Anchor", "Association", "Extension", "Memory"}
)
DATA_INPUT_TYPES = frozenset({"Value", "Unchecked"})

SUCCESSOR_LABELS = {"trueSuccessor": "T", "falseSuccessor": "F", "exceptionEdge": "exception"}

_TEMPLATE_FIELD = re.compile(r"\{(p|i)#(\w+)(/s)?\}")


def node_kind(node: Node) -> str | None:
    """Kind from the class tables, then from the class's package."""
    kind = NODE_KINDS_BY_CLASS.get(node.simple_class)
    if kind is not None:
        return kind
    if ".calc." in node.node_class:
        return "calc"
    if node.simple_class.endswith("PhiNode"):
        return "calc"
    return None


def render_template(node: Node, template: str) -> str:
    """Fill a node-class name template.

    ``{p#name}`` is a property value, ``{p#name/s}`` its short form (the
    part after the last dot), and ``{i#name}`` the ids of the nodes wired
    into input slot ``name``.
    """

    def substitute(match: re.Match[str]) -> str:
        source, key, short = match.groups()
        if source == "i":
            return ", ".join(str(edge.from_node.id) for edge in node.inputs_named(key)) or "?"
        if key not in node.props:
            return "?"
        text = describe_value(node.props[key])
        if short:
            text = text.rsplit(".", 1)[-1]
        return text

    return _TEMPLATE_FIELD.sub(substitute, template)


def edge_kind(edge: Edge) -> str | None:
    if edge.props.get("successor"):
        return "control"
    input_type = edge.props.get("type")
    if input_type in DATA_INPUT_TYPES:
        return "data"
    if input_type in INFO_INPUT_TYPES:
        return "info"
    return None


def is_fixed(node: Node) -> bool:
    return bool(node.props.get("has_predecessor")) or node.props.get("kind") == "control"


class GraalPass(Pass):
    """Applies when the graph holds nodes of the Graal compiler."""

    name = "graal"

    @classmethod
    def applies(cls, graph: Graph) -> bool:
        return has_namespace(graph, GRAAL_NAMESPACES)

    def apply(self, graph: Graph) -> None:
        self.annotate_nodes(graph)
        self.annotate_edges(graph)
        self.label_invokes(graph)
        if self.options.hide_frame_state:
            self.hide_frame_states(graph)
        if self.options.hide_pi:
            self.hide_pi_nodes(graph)
        if self.options.hide_floating:
            self.hide_floating_nodes(graph)

    def annotate_nodes(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            if node.is_synthetic or not node.node_class.startswith(GRAAL_NAMESPACES):
                continue
            kind = node_kind(node)
            if kind is not None:
                node.props.setdefault("kind", kind)
            if node.label is None:
                template = node.props.get("name_template")
                if isinstance(template, str) and template:
                    node.props["label"] = render_template(node, template)
                else:
                    simple = node.simple_class
                    node.props["label"] = simple.removesuffix("Node") or simple

    def annotate_edges(self, graph: Graph) -> None:
        for edge in graph.edges:
            if edge.props.get("synthetic"):
                continue
            kind = edge_kind(edge)
            if kind is not None:
                edge.props.setdefault("kind", kind)
            name = edge.name
            if name in SUCCESSOR_LABELS and edge.props.get("successor"):
                edge.props.setdefault("label", SUCCESSOR_LABELS[name])
            if name == "loopBegin" and edge.to_node.simple_class == "LoopEndNode":
                edge.props["kind"] = "loop"
                edge.props["reverse"] = True

    def label_invokes(self, graph: Graph) -> None:
        """Label invokes with the method their call target names."""
        for node in graph.nodes.values():
            if not node.simple_class.startswith("Invoke"):
                continue
            for edge in node.inputs_named("callTarget"):
                target = edge.from_node.props.get("targetMethod")
                if target is not None:
                    node.props["label"] = f"Call {describe_value(target)}"

    def hide_frame_states(self, graph: Graph) -> None:
        for node in graph.nodes.values():
            if node.simple_class in FRAME_STATE_CLASSES:
                node.props["hidden"] = True

    def hide_pi_nodes(self, graph: Graph) -> None:
        """Wire each Pi node's users straight to the value it narrows."""
        for node in list(graph.nodes.values()):
            if node.simple_class != "PiNode" or node.is_hidden:
                continue
            objects = node.inputs_named("object")
            if len(objects) != 1:
                self.fail(f"Pi node has {len(objects)} object inputs, expected one", node)
            source = objects[0].from_node
            previous = objects[0]
            for use in list(node.outputs):
                previous = graph.create_edge(
                    source,
                    use.to_node,
                    {**use.props, "synthetic": True},
                    after=previous,
                    input_after=use,
                )
            node.props["hidden"] = True

    def hide_floating_nodes(self, graph: Graph) -> None:
        """Hide floating nodes none of whose users is a fixed node."""
        for node in graph.nodes.values():
            if node.is_hidden or is_fixed(node) or node.is_synthetic:
                continue
            if not any(is_fixed(edge.to_node) for edge in node.outputs):
                node.props["hidden"] = True
