"""
Core module: exceptions and the graph model.

Exceptions (exceptions.py):
    - GraphdumpError: Base exception for all graphdump errors
    - DecodeError and subclasses: malformed or truncated dumps, pool errors
    - UnexpectedGraphShape: a pass met a structure it cannot handle

Graph (graph/):
    - Graph, Node, Edge, Block: the mutable model all passes operate on
"""

from graphdump.core.exceptions import (
    DanglingEdgeReference,
    DecodeError,
    GraphdumpError,
    GraphNotFound,
    MalformedHeader,
    NodeNotFound,
    PoolCycleDetected,
    TruncatedStream,
    UnexpectedGraphShape,
    UnknownRecordTag,
    UnresolvedPoolReference,
)
from graphdump.core.graph import Block, Edge, Graph, Node

__all__ = [
    # Graph
    "Graph",
    "Node",
    "Edge",
    "Block",
    # Exceptions
    "GraphdumpError",
    "DecodeError",
    "MalformedHeader",
    "TruncatedStream",
    "UnknownRecordTag",
    "UnresolvedPoolReference",
    "PoolCycleDetected",
    "DanglingEdgeReference",
    "UnexpectedGraphShape",
    "GraphNotFound",
    "NodeNotFound",
]
