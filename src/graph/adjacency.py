"""
Adjacency Projection

Builds the node -> successors mapping shared by validation and traversal.
"""

from typing import Dict, List, Sequence

from .schema import Node, Edge


Adjacency = Dict[str, List[str]]


class UnknownIdentifier(KeyError):
    """Raised when an edge source does not name a declared node"""

    def __init__(self, identifier: str):
        super().__init__(identifier)
        self.identifier = identifier

    def __str__(self) -> str:
        return f"Unknown node identifier: {self.identifier}"


def build_adjacency(nodes: Sequence[Node], edges: Sequence[Edge]) -> Adjacency:
    """
    Map every node ID to the targets of its outgoing edges.

    Node order and edge order are preserved, nodes without outgoing
    edges map to an empty list and repeated edges are kept.

    Raises:
        UnknownIdentifier: an edge source is not among the node IDs
    """
    adjacency: Adjacency = {}
    for node in nodes:
        adjacency.setdefault(node.id, [])

    for edge in edges:
        if edge.source not in adjacency:
            raise UnknownIdentifier(edge.source)
        adjacency[edge.source].append(edge.target)

    return adjacency
