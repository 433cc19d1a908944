"""
Graph Validator

Decides whether a submitted node/edge set is a well-formed flowchart:
every edge endpoint must name a declared node and the graph must be acyclic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Set, Tuple

from .adjacency import Adjacency, build_adjacency
from .schema import Node, Edge


class InvalidReason(str, Enum):
    EDGE_REFERENCES_INVALID_NODE = "Edge references invalid nodes"
    GRAPH_CONTAINS_CYCLE = "Graph contains a cycle"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate(); failures carry a reason plus diagnostics"""
    valid: bool
    reason: Optional[InvalidReason] = None
    offending_id: Optional[str] = None
    cycle: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def invalid(
        cls,
        reason: InvalidReason,
        offending_id: Optional[str] = None,
        cycle: Optional[List[str]] = None
    ) -> "ValidationResult":
        return cls(valid=False, reason=reason, offending_id=offending_id, cycle=cycle or [])

    @property
    def message(self) -> Optional[str]:
        return self.reason.value if self.reason else None

    def __bool__(self) -> bool:
        return self.valid


def validate(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
    """
    Validate a flowchart graph.

    Args:
        nodes: Declared nodes, in order
        edges: Directed edges, in order

    Returns:
        ValidationResult.ok() or a failure with EDGE_REFERENCES_INVALID_NODE
        (naming the identifier) or GRAPH_CONTAINS_CYCLE (with the cycle path)
    """
    node_ids = {node.id for node in nodes}

    for edge in edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in node_ids:
                return ValidationResult.invalid(
                    InvalidReason.EDGE_REFERENCES_INVALID_NODE,
                    offending_id=endpoint
                )

    adjacency = build_adjacency(nodes, edges)
    cycle = find_cycle(adjacency)
    if cycle:
        return ValidationResult.invalid(
            InvalidReason.GRAPH_CONTAINS_CYCLE,
            offending_id=cycle[0],
            cycle=cycle
        )

    return ValidationResult.ok()


def find_cycle(adjacency: Adjacency) -> Optional[List[str]]:
    """
    Return one directed cycle as a closed path (first == last), or None.

    Explores from every unvisited node in key order so disconnected
    components are covered; each node is expanded at most once.
    """
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for root in adjacency:
        if root in visited:
            continue

        visited.add(root)
        on_stack.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(adjacency[root]))]

        while stack:
            current, successors = stack[-1]
            for neighbor in successors:
                if neighbor in on_stack:
                    path = [node_id for node_id, _ in stack]
                    return path[path.index(neighbor):] + [neighbor]
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_stack.add(neighbor)
                    stack.append((neighbor, iter(adjacency.get(neighbor, []))))
                    break
            else:
                stack.pop()
                on_stack.discard(current)

    return None
