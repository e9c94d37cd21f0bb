"""Deferred rank registration.

Passes do not add ranks while they rewrite structure. They register a node
and an ordering strategy; after the whole pipeline has run, each strategy
is evaluated against the final graph, so siblings re-parented or replaced
by later passes are ranked as they end up.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphdump.core.graph import Edge, Graph, Node

RECEIVER_SLOT = "receiver_"
ARGUMENT_PATTERN = re.compile(r"arguments\[(\d+)\]")


class RankOrder(Enum):
    """How to compute the ordered siblings below a node."""

    OUTPUT_ORDER = "output_order"
    NAMED_SLOTS = "named_slots"
    ARGUMENTS = "arguments"


@dataclass(frozen=True)
class DeferredRank:
    node_id: int
    order: RankOrder
    slots: tuple[str, ...] = ()


def visible_outputs(node: Node) -> list[Edge]:
    """Output edges that are not hidden and do not lead to hidden nodes."""
    return [edge for edge in node.outputs if not edge.is_hidden and not edge.to_node.is_hidden]


def argument_index(edge: Edge) -> int | None:
    """Positional index of an argument edge, or None if it is not one.

    Matches slot names like ``arguments[2]`` and list slots named
    ``arguments`` that carry an ``index``.
    """
    name = edge.name
    if name is None:
        return None
    match = ARGUMENT_PATTERN.fullmatch(name)
    if match:
        return int(match.group(1))
    index = edge.props.get("index")
    if name == "arguments" and isinstance(index, int):
        return index
    return None


def order_arguments(edges: list[Edge]) -> tuple[list[Edge], list[Edge], list[Edge]]:
    """Split edges into receiver, arguments by index, and the rest.

    Relative order inside the receiver and rest groups is kept.
    """
    receiver = [edge for edge in edges if edge.name == RECEIVER_SLOT]
    indexed = [(argument_index(edge), edge) for edge in edges if edge.name != RECEIVER_SLOT]
    arguments = sorted(
        ((index, edge) for index, edge in indexed if index is not None), key=lambda pair: pair[0]
    )
    rest = [edge for index, edge in indexed if index is None]
    return receiver, [edge for _, edge in arguments], rest


def ordered_edges(node: Node, order: RankOrder, slots: tuple[str, ...] = ()) -> list[Edge]:
    edges = visible_outputs(node)
    if order is RankOrder.OUTPUT_ORDER:
        return edges
    if order is RankOrder.NAMED_SLOTS:
        by_slot: list[Edge] = []
        for slot in slots:
            by_slot.extend(edge for edge in edges if edge.name == slot)
        return by_slot
    receiver, arguments, rest = order_arguments(edges)
    return receiver + arguments + rest


class RankRegistry:
    """Registrations collected during one pipeline run."""

    def __init__(self) -> None:
        self._pending: list[DeferredRank] = []

    def defer(self, node: Node, order: RankOrder, slots: tuple[str, ...] = ()) -> None:
        rank = DeferredRank(node.id, order, tuple(slots))
        if rank not in self._pending:
            self._pending.append(rank)

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[DeferredRank]:
        return iter(self._pending)

    def evaluate(self, graph: Graph, rank: DeferredRank) -> list[Node]:
        node = graph.nodes[rank.node_id]
        siblings: list[Node] = []
        for edge in ordered_edges(node, rank.order, rank.slots):
            if edge.to_node not in siblings:
                siblings.append(edge.to_node)
        return siblings

    def emit(self, graph: Graph) -> None:
        """Evaluate every registration and append the resulting ranks."""
        for rank in self._pending:
            if graph.nodes[rank.node_id].is_hidden:
                continue
            siblings = self.evaluate(graph, rank)
            if len(siblings) >= 2:
                graph.add_rank(siblings)
        self._pending.clear()
