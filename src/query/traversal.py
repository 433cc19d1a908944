"""
Graph Traversal

Read-side queries over stored flowcharts: outgoing edges of a node and
the nodes reachable from it.
"""

from typing import Iterator, List, Sequence, Set

from ..graph.adjacency import build_adjacency
from ..graph.schema import Node, Edge


def reachable_from(nodes: Sequence[Node], edges: Sequence[Edge], start_id: str) -> List[str]:
    """
    Find every node reachable from start_id via one or more edges.

    Depth-first, following each node's targets in declared order, so the
    result is in first-discovery order. start_id itself is never included,
    even when a cycle leads back to it. An unknown start_id or one without
    outgoing edges yields an empty list.

    Example:
        nodes 1, 2, 3 with edges 1 -> 2, 2 -> 3
        reachable_from(nodes, edges, "1")  # ["2", "3"]
    """
    adjacency = build_adjacency(nodes, edges)
    if start_id not in adjacency:
        return []

    seen: Set[str] = {start_id}
    result: List[str] = []
    stack: List[Iterator[str]] = [iter(adjacency[start_id])]

    while stack:
        for neighbor in stack[-1]:
            if neighbor not in seen:
                seen.add(neighbor)
                result.append(neighbor)
                stack.append(iter(adjacency.get(neighbor, [])))
                break
        else:
            stack.pop()

    return result


def outgoing_edges(edges: Sequence[Edge], node_id: str) -> List[Edge]:
    """Edges whose source is node_id, in declared order"""
    return [edge for edge in edges if edge.source == node_id]
