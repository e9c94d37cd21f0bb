"""Graph analysis: structural summary of branches, calls, deopts and loops."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphdump.core.graph.base import Graph

BRANCH_CLASSES = frozenset({"IfNode", "IntegerSwitchNode", "TypeSwitchNode", "SwitchNode"})
CALL_CLASSES = frozenset(
    {
        "InvokeNode",
        "InvokeWithExceptionNode",
        "ForeignCallNode",
        "ForeignCallWithExceptionNode",
        "ApplyNode",
        "IndirectCallNode",
        "DirectCallNode",
    }
)
DEOPT_CLASSES = frozenset(
    {"DeoptimizeNode", "DynamicDeoptimizeNode", "FixedGuardNode", "GuardNode"}
)
LOOP_CLASSES = frozenset({"LoopBeginNode", "WhileNode", "RepeatingNode"})


@dataclass
class GraphSummary:
    """Counts describing the shape of one graph."""

    nodes: int
    edges: int
    branch_count: int = 0
    call_count: int = 0
    deopt_count: int = 0
    loop_count: int = 0
    node_classes: Counter[str] = field(default_factory=Counter)

    @property
    def branches(self) -> bool:
        return self.branch_count > 0

    @property
    def calls(self) -> bool:
        return self.call_count > 0

    @property
    def deopts(self) -> bool:
        return self.deopt_count > 0

    @property
    def loops(self) -> bool:
        return self.loop_count > 0

    @property
    def linear(self) -> bool:
        """No control-flow splits and no loops."""
        return not self.branches and not self.loops

    def features(self) -> list[str]:
        """Names of the features present, in a fixed order."""
        names = ["branches", "calls", "deopts", "loops", "linear"]
        return [name for name in names if getattr(self, name)]

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": self.nodes,
            "edges": self.edges,
            "branches": self.branches,
            "calls": self.calls,
            "deopts": self.deopts,
            "loops": self.loops,
            "linear": self.linear,
            "node_classes": dict(self.node_classes.most_common()),
        }


def describe(graph: Graph) -> GraphSummary:
    """Summarise a graph. O(V).

    Counts come from the decoded structure; hidden and synthetic state set
    by passes is ignored, so describe before or after passes agrees on the
    decoded nodes.
    """
    summary = GraphSummary(
        nodes=sum(1 for node in graph.nodes.values() if not node.is_synthetic),
        edges=sum(1 for edge in graph.edges if not edge.props.get("synthetic")),
    )

    for node in graph.nodes.values():
        if node.is_synthetic:
            continue
        simple = node.simple_class
        if not simple:
            continue
        summary.node_classes[simple] += 1
        if simple in BRANCH_CLASSES:
            summary.branch_count += 1
        elif simple in CALL_CLASSES:
            summary.call_count += 1
        elif simple in DEOPT_CLASSES:
            summary.deopt_count += 1
        elif simple in LOOP_CLASSES or simple.endswith("RepeatingNode"):
            summary.loop_count += 1

    return summary
