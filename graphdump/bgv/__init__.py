"""
BGV decoding: binary graph dumps into Graph objects.

Components:
    - BinaryReader: big-endian primitives, gzip detection, byte offsets
    - ConstantPool: pool ids bound to strings, classes, methods, ...
    - StreamDecoder: typed records, skip mode and seek_to_graph
    - GraphBuilder: records of one graph into a Graph
    - GraphFile: index a document and load graphs by index

Usage:
    from graphdump.bgv import GraphFile

    dump = GraphFile("fib.bgv.gz")
    for header in dump.graph_headers():
        print(header.index, header.name)
    graph = dump.read_graph(1)
"""

from graphdump.bgv.builder import GraphBuilder
from graphdump.bgv.decoder import StreamDecoder, compose_graph_name
from graphdump.bgv.file import GraphFile
from graphdump.bgv.pool import ConstantPool, PoolRef
from graphdump.bgv.reader import BinaryReader
from graphdump.bgv.records import (
    BlockDefine,
    DocumentEnd,
    EdgeDefine,
    GraphBegin,
    GraphEnd,
    GroupBegin,
    GroupEnd,
    NodeDefine,
    Record,
)

__all__ = [
    "BinaryReader",
    "ConstantPool",
    "PoolRef",
    "StreamDecoder",
    "GraphBuilder",
    "GraphFile",
    "compose_graph_name",
    # Records
    "Record",
    "GroupBegin",
    "GroupEnd",
    "GraphBegin",
    "NodeDefine",
    "EdgeDefine",
    "BlockDefine",
    "GraphEnd",
    "DocumentEnd",
]
