"""Build a Graph from the records of one decoded graph."""

from __future__ import annotations

from collections.abc import Iterable

from graphdump.bgv.pool import describe_value
from graphdump.bgv.records import BlockDefine, EdgeDefine, GraphBegin, GraphEnd, NodeDefine, Record
from graphdump.core.exceptions import DanglingEdgeReference, DecodeError
from graphdump.core.graph import Graph


class GraphBuilder:
    """Materialises nodes, edges and blocks for a single graph.

    Node properties are the decoded properties plus ``node_class`` (the
    fully qualified class name), ``name_template`` and ``has_predecessor``.
    Edges are appended to both endpoints in declaration order.
    """

    def __init__(self, header: GraphBegin) -> None:
        self._header = header
        self.graph = Graph(
            props=dict(header.props),
            name=header.name,
            index=header.index,
            graph_id=header.graph_id,
        )
        self.graph.props["groups"] = [describe_value(group.short_name) for group in header.groups]

    def build(self, records: Iterable[Record]) -> Graph:
        for record in records:
            if isinstance(record, NodeDefine):
                self.add_node(record)
            elif isinstance(record, EdgeDefine):
                self.add_edge(record)
            elif isinstance(record, BlockDefine):
                self.add_block(record)
            elif isinstance(record, GraphEnd):
                break
        return self.graph

    def add_node(self, record: NodeDefine) -> None:
        if record.id in self.graph.nodes:
            raise DecodeError(
                f"Duplicate node id {record.id} in graph {self.graph.index}", record.offset
            )
        props = dict(record.props)
        props["node_class"] = record.node_class.name
        props["name_template"] = record.node_class.name_template
        props["has_predecessor"] = record.has_predecessor
        self.graph.create_node(props, id=record.id)

    def add_edge(self, record: EdgeDefine) -> None:
        from_node = self.graph.get_node(record.from_id)
        to_node = self.graph.get_node(record.to_id)
        if from_node is None or to_node is None:
            missing = record.from_id if from_node is None else record.to_id
            raise DanglingEdgeReference(
                f"Edge {record.name!r} of node {record.owner_id} in graph "
                f"{self.graph.index} references undefined node {missing}",
                record.offset,
            )
        self.graph.create_edge(from_node, to_node, record.props())

    def add_block(self, record: BlockDefine) -> None:
        nodes = []
        for node_id in record.node_ids:
            node = self.graph.get_node(node_id)
            if node is None:
                raise DanglingEdgeReference(
                    f"Block {record.id} in graph {self.graph.index} "
                    f"references undefined node {node_id}",
                    record.offset,
                )
            nodes.append(node)
        self.graph.create_block(record.id, nodes, list(record.followers))
