"""Worklist traversal over node outputs."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphdump.core.graph.models import Node


def reachable_outputs(root: Node) -> list[Node]:
    """All nodes reachable from ``root`` through output edges, root first.

    BFS with a visited set, so cycles terminate. O(V + E) in the subgraph.
    """
    visited: set[int] = {root.id}
    order: list[Node] = [root]
    queue: deque[Node] = deque([root])

    while queue:
        node = queue.popleft()
        for edge in node.outputs:
            target = edge.to_node
            if target.id not in visited:
                visited.add(target.id)
                order.append(target)
                queue.append(target)

    return order
