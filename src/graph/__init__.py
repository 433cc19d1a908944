"""
Graph module - Flowchart schema, validation and storage
"""

from .schema import Node, Edge, Flowchart, FlowchartCreate, FlowchartUpdate
from .adjacency import Adjacency, UnknownIdentifier, build_adjacency
from .validator import InvalidReason, ValidationResult, validate
from .store import FlowchartStore, DuplicateFlowchartError
from .neo4j_client import Neo4jClient

__all__ = [
    "Node",
    "Edge",
    "Flowchart",
    "FlowchartCreate",
    "FlowchartUpdate",
    "Adjacency",
    "UnknownIdentifier",
    "build_adjacency",
    "InvalidReason",
    "ValidationResult",
    "validate",
    "FlowchartStore",
    "DuplicateFlowchartError",
    "Neo4jClient",
]
