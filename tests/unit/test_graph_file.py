"""Unit tests for GraphBuilder and GraphFile."""

import io
from pathlib import Path

import pytest
from bgv_writer import BGVWriter, NodeClassSpec, NodeSpec, write_fib

from graphdump.bgv import GraphBuilder, GraphFile
from graphdump.bgv.pool import PoolNodeClass
from graphdump.bgv.records import EdgeDefine, GraphBegin, NodeDefine
from graphdump.core.exceptions import DanglingEdgeReference, DecodeError, GraphNotFound

USER = NodeClassSpec(
    "org.graalvm.compiler.nodes.calc.NegateNode", "-", (("value", "Value", False),)
)


class UnseekableStream(io.BytesIO):
    """A stream that can only be read forward, like a pipe."""

    def seekable(self) -> bool:
        return False


def make_header(index: int = 0) -> GraphBegin:
    return GraphBegin(index, 7, "g", (), {"scope": "test"}, "g")


def make_node_record(id: int) -> NodeDefine:
    node_class = PoolNodeClass("org.graalvm.compiler.nodes.ConstantNode", "C")
    return NodeDefine(id, node_class, False, {"rawvalue": id})


class TestGraphBuilder:
    """Tests for building graphs from records."""

    def test_nodes_and_edges(self) -> None:
        records = [
            make_node_record(0),
            make_node_record(1),
            EdgeDefine(0, 1, 1, "value", input_type="Value"),
        ]
        graph = GraphBuilder(make_header()).build(records)

        assert graph.num_nodes == 2
        assert graph.num_edges == 1
        assert graph.nodes[0].props["node_class"] == "org.graalvm.compiler.nodes.ConstantNode"
        assert graph.nodes[0].props["has_predecessor"] is False
        edge = graph.nodes[0].outputs[0]
        assert edge is graph.nodes[1].inputs[0]
        assert edge.props == {"name": "value", "successor": False, "type": "Value"}
        assert graph.props["scope"] == "test"
        assert graph.graph_id == 7

    def test_dangling_edge(self) -> None:
        records = [make_node_record(0), EdgeDefine(0, 9, 9, "value", offset=55)]
        with pytest.raises(DanglingEdgeReference) as exc_info:
            GraphBuilder(make_header()).build(records)

        assert "9" in str(exc_info.value)
        assert exc_info.value.offset == 55

    def test_duplicate_node(self) -> None:
        with pytest.raises(DecodeError):
            GraphBuilder(make_header()).build([make_node_record(0), make_node_record(0)])

    def test_dangling_edge_in_stream(self) -> None:
        writer = BGVWriter()
        writer.graph(0, "broken", [NodeSpec(0, USER, inputs={"value": 5})])
        with pytest.raises(DanglingEdgeReference):
            GraphFile(writer.to_bytes()).read_graph(0)


class TestGraphFile:
    """Tests for indexing and reading graphs."""

    def test_headers(self, fib_dump: GraphFile) -> None:
        headers = fib_dump.graph_headers()
        assert [h.index for h in headers] == [0, 1]
        assert [h.graph_id for h in headers] == [0, 1]
        assert len(fib_dump) == 2
        assert fib_dump.version == (8, 0)

    def test_headers_are_cached(self, fib_dump: GraphFile) -> None:
        assert fib_dump.graph_headers() is fib_dump.graph_headers()

    def test_offsets_are_stable(self, fib_dump: GraphFile) -> None:
        first = fib_dump.offsets
        fib_dump.read_graph(1)
        assert fib_dump.offsets == first

    def test_read_graph(self, fib_dump: GraphFile) -> None:
        graph = fib_dump.read_graph(0)
        assert graph.name == "17:Fib.fib(int)/After parsing"
        assert graph.num_nodes == 21
        assert graph.num_edges == 30
        assert len(graph.blocks) == 3
        assert [n.id for n in graph.blocks[1]] == [6, 11, 16, 19]
        assert graph.props["groups"] == ["17:Fib.fib(int)"]

    def test_read_graph_matches_sequential(self, fib_dump: GraphFile) -> None:
        sequential = list(fib_dump.graphs())
        seeked = fib_dump.read_graph(1)

        assert seeked.num_nodes == sequential[1].num_nodes == 20
        assert seeked.num_edges == sequential[1].num_edges == 29
        for node_id, node in seeked.nodes.items():
            assert node.props == sequential[1].nodes[node_id].props

    def test_reads_are_independent(self, fib_dump: GraphFile) -> None:
        first = fib_dump.read_graph(0)
        first.nodes[0].props["hidden"] = True
        again = fib_dump.read_graph(0)
        assert not again.nodes[0].is_hidden

    def test_gzip_file(self, fib_gz_path: Path) -> None:
        dump = GraphFile(fib_gz_path)
        assert len(dump) == 2
        assert dump.read_graph(0).num_nodes == 21

    def test_bytes_and_file_object(self, fib_bytes: bytes) -> None:
        assert GraphFile(fib_bytes).read_graph(0).num_edges == 30
        assert GraphFile(io.BytesIO(fib_bytes)).read_graph(0).num_edges == 30

    def test_file_object_is_reused_not_copied(self, fib_bytes: bytes) -> None:
        stream = io.BytesIO(b"junk" + fib_bytes)
        stream.seek(4)
        dump = GraphFile(stream)

        assert dump.read_graph(1).num_nodes == 20
        assert dump.read_graph(0).num_nodes == 21
        assert len(dump) == 2
        assert not stream.closed

    def test_open_binary_file(self, fib_path: Path) -> None:
        with open(fib_path, "rb") as f:
            dump = GraphFile(f)
            edges = [graph.num_edges for graph in dump.graphs()]
            assert len(edges) == 2
            assert edges[0] == 30
            assert dump.read_graph(0).num_edges == 30
            assert not f.closed

    def test_unseekable_stream_is_read_once(self, fib_bytes: bytes) -> None:
        stream = UnseekableStream(fib_bytes)
        dump = GraphFile(stream)

        assert dump.read_graph(0).num_nodes == 21
        assert dump.read_graph(1).num_nodes == 20

    def test_missing_graph(self, fib_dump: GraphFile) -> None:
        with pytest.raises(GraphNotFound):
            fib_dump.read_graph(5)

    def test_missing_graph_before_indexing(self, fib_bytes: bytes) -> None:
        with pytest.raises(GraphNotFound):
            GraphFile(fib_bytes).read_graph(2)

    def test_negative_index(self, fib_dump: GraphFile) -> None:
        with pytest.raises(GraphNotFound):
            fib_dump.read_graph(-1)

    def test_lenient_file(self) -> None:
        writer = BGVWriter()
        writer.sint8(0x7F)
        write_fib(writer)
        data = writer.to_bytes()

        assert len(GraphFile(data, lenient=True)) == 2
        with pytest.raises(DecodeError):
            GraphFile(data).graph_headers()
