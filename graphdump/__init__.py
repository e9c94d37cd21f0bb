"""
Graphdump: decode and simplify BGV compiler graph dumps.

Graphdump reads the binary graph dumps a JIT compiler writes and turns them
into mutable graphs, enabling you to:
- List the graphs in a dump and load one of them without decoding the rest
- Summarise a graph (branches, calls, deopts, loops)
- Simplify a graph with an ordered pass pipeline before rendering it

Usage:
    from graphdump.bgv import GraphFile
    from graphdump.passes import apply_passes

    dump = GraphFile("fib.bgv.gz")
    graph = dump.read_graph(1)
    apply_passes(graph)
"""

__version__ = "0.1.0"
