"""Decode, summarise and simplify whole dumps."""

from pathlib import Path

from bgv_writer import BGVWriter, NodeClassSpec, NodeSpec
from graph_helpers import TASTY, visible_targets

from graphdump.bgv import GraphFile
from graphdump.core.graph import describe
from graphdump.passes import apply_passes

# Truffle ASTs dump their children as successor slots.
DEF_DEF = NodeClassSpec(f"{TASTY}.nodes.DefDefNode", successors=(("block", False),))
BLOCK = NodeClassSpec(f"{TASTY}.nodes.BlockNode", successors=(("elements", True),))
LITERAL = NodeClassSpec(f"{TASTY}.nodes.IntLiteralNode")


def tasty_document() -> bytes:
    writer = BGVWriter()
    writer.begin_group("main", "main")
    writer.graph(
        0,
        "AST",
        [
            NodeSpec(0, DEF_DEF, {"symbol": "main"}, successors={"block": 1}),
            NodeSpec(1, BLOCK, successors={"elements": [2, 3]}),
            NodeSpec(2, LITERAL, {"constant": 1}),
            NodeSpec(3, LITERAL, {"constant": 2}),
        ],
    )
    writer.close_group()
    return writer.to_bytes()


class TestFib:
    """The Graal fib dump."""

    def test_summary(self, fib_gz_path: Path) -> None:
        graph = GraphFile(fib_gz_path).read_graph(0)
        summary = describe(graph)

        assert (summary.nodes, summary.edges) == (21, 30)
        assert summary.branches
        assert summary.calls
        assert not summary.loops

    def test_summary_survives_passes(self, fib_dump: GraphFile) -> None:
        graph = fib_dump.read_graph(0)
        before = describe(graph).to_dict()
        apply_passes(graph)
        assert describe(graph).to_dict() == before

    def test_every_node_is_labelled(self, fib_dump: GraphFile) -> None:
        for graph in fib_dump.graphs():
            apply_passes(graph)
            assert all(node.label for node in graph.nodes.values())
            assert all("kind" in edge.props for edge in graph.edges)


class TestTastyDump:
    """A Tasty AST written with successor-slot children."""

    def test_block_is_flattened(self) -> None:
        graph = GraphFile(tasty_document()).read_graph(0)

        assert apply_passes(graph) == ["tasty", "fallback"]

        method = graph.nodes[0]
        assert method.label == "Method(main)"
        assert graph.nodes[1].is_hidden
        assert visible_targets(method) == [2, 3]
        assert [graph.nodes[i].label for i in (2, 3)] == ["Constant(1)", "Constant(2)"]
        assert [[node.id for node in rank] for rank in graph.ranks] == [[2, 3]]

    def test_second_run_adds_nothing(self) -> None:
        graph = GraphFile(tasty_document()).read_graph(0)
        apply_passes(graph)
        counts = (graph.num_nodes, graph.num_edges, len(graph.ranks))

        assert apply_passes(graph) == ["tasty", "fallback"]

        assert (graph.num_nodes, graph.num_edges, len(graph.ranks)) == counts
        assert visible_targets(graph.nodes[0]) == [2, 3]

    def test_group_name(self) -> None:
        dump = GraphFile(tasty_document())
        assert dump.graph_headers()[0].name == "main/AST"
