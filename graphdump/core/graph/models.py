"""Node, Edge and Block: the mutable pieces of a compiler graph."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from graphdump.bgv.pool import PoolObject

# Property values: strings, numbers, booleans, lists, nested dicts, and
# resolved pool objects.
PropValue = Union[str, int, float, bool, list, dict, "PoolObject", None]
Props = dict[str, PropValue]

NODE_KINDS = (
    "info",
    "input",
    "control",
    "memory",
    "call",
    "sync",
    "alloc",
    "virtual",
    "guard",
    "calc",
    "other",
)

EDGE_KINDS = ("data", "control", "loop", "info", "other")


@dataclass(eq=False)
class Node:
    """A node in a compiler graph.

    ``inputs`` and ``outputs`` hold the incident edges. Their order is
    meaningful (it encodes positional operands) and is kept in step with the
    owning graph's edge list.
    """

    id: int
    props: Props = field(default_factory=dict)
    inputs: list[Edge] = field(default_factory=list)
    outputs: list[Edge] = field(default_factory=list)

    @property
    def node_class(self) -> str:
        """Fully qualified class of the compiler node, or '' if unknown."""
        node_class = self.props.get("node_class")
        return node_class if isinstance(node_class, str) else ""

    @property
    def simple_class(self) -> str:
        """Class name without package or enclosing class."""
        return self.node_class.rsplit(".", 1)[-1].rsplit("$", 1)[-1]

    @property
    def label(self) -> str | None:
        label = self.props.get("label")
        return str(label) if label is not None else None

    @property
    def is_hidden(self) -> bool:
        return bool(self.props.get("hidden"))

    @property
    def is_synthetic(self) -> bool:
        return bool(self.props.get("synthetic"))

    def adjacent(self) -> list[Node]:
        """Nodes on the other end of every input and output edge."""
        return [edge.from_node for edge in self.inputs] + [edge.to_node for edge in self.outputs]

    def id_and_label(self) -> str:
        label = self.label
        return f"{self.id} ({label})" if label else str(self.id)

    def outputs_named(self, name: str) -> list[Edge]:
        """Output edges whose input-slot name is ``name``."""
        return [edge for edge in self.outputs if edge.props.get("name") == name]

    def inputs_named(self, name: str) -> list[Edge]:
        return [edge for edge in self.inputs if edge.props.get("name") == name]

    def __repr__(self) -> str:
        return f"Node({self.id_and_label()})"


@dataclass(eq=False)
class Edge:
    """A directed edge. ``from_node`` and ``to_node`` belong to the same graph."""

    from_node: Node
    to_node: Node
    props: Props = field(default_factory=dict)

    @property
    def nodes(self) -> tuple[Node, Node]:
        return self.from_node, self.to_node

    @property
    def name(self) -> str | None:
        name = self.props.get("name")
        return name if isinstance(name, str) else None

    @property
    def is_hidden(self) -> bool:
        return bool(self.props.get("hidden"))

    def __repr__(self) -> str:
        return f"Edge({self.from_node.id} -> {self.to_node.id}, name={self.name!r})"


@dataclass(eq=False)
class Block:
    """A basic block: an ordered group of nodes plus successor block ids."""

    id: int
    nodes: list[Node] = field(default_factory=list)
    followers: list[int] = field(default_factory=list)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)
