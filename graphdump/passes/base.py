"""Pass base class and options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, NoReturn

from graphdump.core.exceptions import UnexpectedGraphShape
from graphdump.passes.ranks import RankOrder, RankRegistry

if TYPE_CHECKING:
    from graphdump.core.graph import Graph, Node


@dataclass(frozen=True)
class PassOptions:
    """Switches that tune what passes simplify."""

    hide_frame_state: bool = True
    hide_pi: bool = False
    hide_floating: bool = False
    reduce_edges: bool = True


class Pass:
    """A graph simplification pass.

    ``applies`` decides from the graph alone whether the pass is relevant;
    ``apply`` rewrites the graph in place. Passes may add synthetic nodes
    and edges and hide existing ones, but never remove anything.
    """

    name: ClassVar[str] = "pass"

    def __init__(
        self, options: PassOptions | None = None, ranks: RankRegistry | None = None
    ) -> None:
        self.options = options if options is not None else PassOptions()
        self.ranks = ranks if ranks is not None else RankRegistry()

    @classmethod
    def applies(cls, graph: Graph) -> bool:
        raise NotImplementedError

    def apply(self, graph: Graph) -> None:
        raise NotImplementedError

    def defer_rank(self, node: Node, order: RankOrder, slots: tuple[str, ...] = ()) -> None:
        self.ranks.defer(node, order, slots)

    def fail(self, message: str, node: Node | None = None) -> NoReturn:
        raise UnexpectedGraphShape(message, self.name, node.id if node is not None else None)


def has_namespace(graph: Graph, prefixes: tuple[str, ...]) -> bool:
    """True if any node's class lives under one of ``prefixes``."""
    return any(node.node_class.startswith(prefixes) for node in graph.nodes.values())
