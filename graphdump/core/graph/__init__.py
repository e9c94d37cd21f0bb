"""
Compiler graph data structures and algorithms.

Data Structures:
    - Graph: nodes by id, ordered edges, basic blocks and layout ranks
    - Node / Edge: property bags with ordered incident edge lists
    - Block: optional basic-block grouping

Algorithms:
    - traversal: worklist reachability over outputs (cycle safe)
    - analysis: structural summary (branches, calls, deopts, loops)
    - view: visibility rules renderers apply to a finished graph
"""

from graphdump.core.graph.analysis import GraphSummary, describe
from graphdump.core.graph.base import Graph
from graphdump.core.graph.models import Block, Edge, Node

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "Block",
    "GraphSummary",
    "describe",
]
