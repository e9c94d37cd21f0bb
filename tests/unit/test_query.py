"""Unit tests for the JSON queries."""

import json

import pytest

from graphdump import query
from graphdump.bgv import GraphFile
from graphdump.bgv.pool import PoolClass
from graphdump.core.exceptions import GraphNotFound, NodeNotFound
from graphdump.passes import PassOptions

GRAPH_NAME = "17:Fib.fib(int)/After parsing"


class TestToJson:
    """Tests for converting property values."""

    def test_plain_values(self) -> None:
        assert query.to_json({"a": [1, "x", None, True]}) == {"a": [1, "x", None, True]}

    def test_non_finite_floats(self) -> None:
        assert query.to_json(float("inf")) == "inf"
        assert query.to_json(float("nan")) == "nan"
        assert query.to_json(0.5) == 0.5

    def test_pool_objects(self) -> None:
        assert query.to_json((PoolClass("a.B"), 3)) == ["a.B", 3]


class TestListings:
    """Tests for list_graphs and graph_info."""

    def test_list_graphs(self, fib_dump: GraphFile) -> None:
        assert query.list_graphs(fib_dump) == [
            {"index": 0, "graph_id": 0, "name": GRAPH_NAME},
            {"index": 1, "graph_id": 1, "name": "17:Fib.fib(int)/After phase Canonicalizer"},
        ]

    def test_graph_info(self, fib_dump: GraphFile) -> None:
        info = query.graph_info(fib_dump, 0)

        assert info["name"] == GRAPH_NAME
        assert info["nodes"] == 21
        assert info["edges"] == 30
        assert info["blocks"] == 3
        assert info["branches"] is True
        assert info["calls"] is True
        assert info["loops"] is False
        assert info["features"] == ["branches", "calls"]
        assert info["node_classes"]["InvokeNode"] == 2
        assert info["node_classes"]["FrameState"] == 4

    def test_missing_graph(self, fib_dump: GraphFile) -> None:
        with pytest.raises(GraphNotFound):
            query.graph_info(fib_dump, 9)


class TestNodeQueries:
    """Tests for node, edge and source position queries."""

    def test_node_properties(self, fib_dump: GraphFile) -> None:
        props = query.node_properties(fib_dump, 0, 11)

        assert props["node_class"] == "org.graalvm.compiler.nodes.InvokeNode"
        assert props["targetMethod"] == "Fib.fib(int)"
        assert props["nodeSourcePosition"] == "Fib.fib(int) @ 12"
        assert props["bci"] == 12
        assert props["has_predecessor"] is True

    def test_missing_node(self, fib_dump: GraphFile) -> None:
        with pytest.raises(NodeNotFound):
            query.node_properties(fib_dump, 0, 99)

    def test_edge_properties(self, fib_dump: GraphFile) -> None:
        assert query.edge_properties(fib_dump, 0, 5, 6) == [
            {"name": "trueSuccessor", "successor": True}
        ]
        assert query.edge_properties(fib_dump, 0, 16, 17) == [
            {"name": "values", "successor": False, "index": 1, "type": "Value"}
        ]

    def test_missing_edge(self, fib_dump: GraphFile) -> None:
        with pytest.raises(NodeNotFound):
            query.edge_properties(fib_dump, 0, 6, 5)

    def test_node_edges(self, fib_dump: GraphFile) -> None:
        edges = query.node_edges(fib_dump, 0, 4)

        assert [(e["from"], e["name"]) for e in edges["inputs"]] == [(3, "x"), (1, "y")]
        assert [(e["to"], e["name"]) for e in edges["outputs"]] == [(5, "condition")]

    def test_source_positions(self, fib_dump: GraphFile) -> None:
        assert query.source_positions(fib_dump, 0, 11) == ["Fib.fib(int) @ 12", "  fib.js:3"]

    def test_no_source_position(self, fib_dump: GraphFile) -> None:
        assert query.source_positions(fib_dump, 0, 4) == []


class TestGraphView:
    """Tests for the simplified view."""

    def test_view(self, fib_dump: GraphFile) -> None:
        view = query.graph_view(fib_dump, 0)

        assert view["passes"] == ["graal", "fallback"]
        drawn = {node["id"] for node in view["nodes"]}
        assert drawn.isdisjoint({1, 2, 3, 12, 13, 17, 20})
        assert len(drawn) == 14
        assert view["anchors"] == []
        assert view["ranks"] == []
        json.dumps(view)

    def test_inlined_uses(self, fib_dump: GraphFile) -> None:
        view = query.graph_view(fib_dump, 0)
        inlined = {(e["from"], e["to"]) for e in view["edges"] if e["inlined"]}
        assert (3, 4) in inlined
        assert (13, 14) in inlined
        assert (4, 5) not in inlined

    def test_options(self, fib_dump: GraphFile) -> None:
        options = PassOptions(hide_frame_state=False, reduce_edges=False)
        view = query.graph_view(fib_dump, 0, options)
        assert len(view["nodes"]) == 21
