"""
Flowchart Schema Definitions

Defines the structure of nodes, edges and flowchart documents.
"""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List


def _require_unique_ids(nodes: List["Node"]) -> List["Node"]:
    seen = set()
    for node in nodes:
        if node.id in seen:
            raise ValueError(f"Duplicate node id: {node.id}")
        seen.add(node.id)
    return nodes


class Node(BaseModel):
    """
    A labeled vertex in a flowchart.

    Example:
        id: "1"
        label: "Start"
    """
    id: str = Field(..., min_length=1, description="Unique identifier for the node")
    label: str = Field(..., description="Label of the node")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"id": "1", "label": "Start"}
        }


class Edge(BaseModel):
    """
    A directed connection between two nodes.

    Direction: source -> target
    """
    source: str = Field(..., description="Source node ID")
    target: str = Field(..., description="Target node ID")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"source": "1", "target": "2"}
        }


class Flowchart(BaseModel):
    """A stored flowchart document"""
    id: int = Field(..., alias="_id", description="Numerical identifier (user-provided)")
    name: str = Field(..., description="Name of the flowchart")
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "_id": 1,
                "name": "Sample Flowchart",
                "nodes": [
                    {"id": "1", "label": "Start"},
                    {"id": "2", "label": "Process"},
                    {"id": "3", "label": "End"}
                ],
                "edges": [
                    {"source": "1", "target": "2"},
                    {"source": "2", "target": "3"}
                ],
                "createdAt": "2023-08-10T10:00:00.000Z",
                "updatedAt": "2023-08-10T10:00:00.000Z"
            }
        }


class FlowchartCreate(BaseModel):
    """Request body for creating a flowchart"""
    id: Optional[int] = Field(default=None, alias="_id")
    name: str
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("nodes")
    @classmethod
    def unique_node_ids(cls, nodes: List[Node]) -> List[Node]:
        return _require_unique_ids(nodes)


class FlowchartUpdate(BaseModel):
    """Request body for updating a flowchart; graph is replaced only when both nodes and edges are sent"""
    name: Optional[str] = None
    nodes: Optional[List[Node]] = None
    edges: Optional[List[Edge]] = None

    @field_validator("nodes")
    @classmethod
    def unique_node_ids(cls, nodes: Optional[List[Node]]) -> Optional[List[Node]]:
        if nodes is None:
            return nodes
        return _require_unique_ids(nodes)


class ConnectedNodes(BaseModel):
    """Node IDs reachable from a node"""
    connected_nodes: List[str] = Field(..., alias="connectedNodes")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {"connectedNodes": ["2", "3"]}
        }


class FlowchartStats(BaseModel):
    """Statistics about a stored flowchart"""
    flowchart_id: int
    total_nodes: int
    total_edges: int
    entry_nodes: List[str]
    exit_nodes: List[str]
    components: int
    longest_path: Optional[List[str]] = None
