"""Core Graph class: nodes by id, ordered edges, blocks and ranks."""

from __future__ import annotations

from graphdump.core.graph.models import Block, Edge, Node, Props


class Graph:
    """Mutable compiler graph.

    Node ids are scoped to the graph and never reused, including ids handed
    out to synthetic nodes. Nodes are never removed; passes hide them.
    """

    __slots__ = (
        "nodes",
        "edges",
        "blocks",
        "ranks",
        "props",
        "name",
        "index",
        "graph_id",
        "_next_id",
    )

    def __init__(
        self,
        props: Props | None = None,
        name: str = "",
        index: int | None = None,
        graph_id: int | None = None,
    ) -> None:
        self.nodes: dict[int, Node] = {}
        self.edges: list[Edge] = []
        self.blocks: list[Block] = []
        self.ranks: list[list[Node]] = []
        self.props: Props = props if props is not None else {}
        self.name = name
        self.index = index
        self.graph_id = graph_id
        self._next_id = 0

    def new_id(self) -> int:
        """Next free node id. O(1)."""
        return self._next_id

    def create_node(self, props: Props | None = None, id: int | None = None) -> Node:
        """Create a node, allocating a fresh id if none is given. O(1)."""
        if id is None:
            id = self._next_id
        if id in self.nodes:
            raise ValueError(f"Duplicate node id {id} in graph {self.name!r}")
        node = Node(id, props if props is not None else {})
        self.nodes[id] = node
        self._next_id = max(self._next_id, id + 1)
        return node

    def create_edge(
        self,
        from_node: Node,
        to_node: Node,
        props: Props | None = None,
        after: Edge | None = None,
        input_after: Edge | None = None,
    ) -> Edge:
        """Create an edge and append it to both endpoints.

        With ``after``, the edge is placed directly behind that edge in
        ``from_node.outputs`` instead of at the end, so a replacement keeps
        the position of the edge it stands in for. ``input_after`` does the
        same in ``to_node.inputs``.
        """
        for node in (from_node, to_node):
            if self.nodes.get(node.id) is not node:
                raise ValueError(f"Node {node.id} does not belong to graph {self.name!r}")
        edge = Edge(from_node, to_node, props if props is not None else {})
        self.edges.append(edge)
        position = _index_of(from_node.outputs, after) if after is not None else None
        if position is None:
            from_node.outputs.append(edge)
        else:
            from_node.outputs.insert(position + 1, edge)
        position = _index_of(to_node.inputs, input_after) if input_after is not None else None
        if position is None:
            to_node.inputs.append(edge)
        else:
            to_node.inputs.insert(position + 1, edge)
        return edge

    def create_block(self, id: int, nodes: list[Node], followers: list[int] | None = None) -> Block:
        block = Block(id, list(nodes), list(followers or []))
        self.blocks.append(block)
        return block

    def add_rank(self, nodes: list[Node]) -> None:
        """Record that ``nodes`` render at the same depth, left to right."""
        ids = [node.id for node in nodes]
        if any([n.id for n in rank] == ids for rank in self.ranks):
            return
        self.ranks.append(list(nodes))

    def get_node(self, node_id: int) -> Node | None:
        return self.nodes.get(node_id)

    def synthetic_nodes(self) -> list[Node]:
        return [node for node in self.nodes.values() if node.is_synthetic]

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def __repr__(self) -> str:
        return f"Graph({self.name!r}, nodes={self.num_nodes}, edges={self.num_edges})"


def _index_of(edges: list[Edge], edge: Edge) -> int | None:
    for i, candidate in enumerate(edges):
        if candidate is edge:
            return i
    return None
