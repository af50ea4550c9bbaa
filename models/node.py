"""
Node and Edge models for the Deadlock Visualizer.

Represents the vertices and directed edges of a resource-allocation graph.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(Enum):
    """Kinds of vertex in a resource-allocation graph."""
    PROCESS = "process"
    RESOURCE = "resource"

    @property
    def prefix(self) -> str:
        """Id prefix used when numbering nodes of this kind."""
        return "P" if self is NodeKind.PROCESS else "R"


class EdgeKind(Enum):
    """Meaning of a directed edge, derived from its endpoints."""
    REQUEST = "request"        # process -> resource
    ALLOCATION = "allocation"  # resource -> process


@dataclass
class Node:
    """
    Represents a process or resource vertex.

    Attributes:
        node_id: Unique identifier ("P1", "R2", ...)
        kind: Process or resource
        x: Horizontal position (presentation only)
        y: Vertical position (presentation only)
        label: Display name, defaults to node_id
    """
    node_id: str
    kind: NodeKind
    x: float = 0.0
    y: float = 0.0
    label: Optional[str] = None

    def __post_init__(self):
        """Default the label to the node id."""
        if not self.label:
            self.label = self.node_id

    @property
    def is_process(self) -> bool:
        return self.kind is NodeKind.PROCESS

    def distance_to(self, x: float, y: float) -> float:
        """Euclidean distance from this node's position to (x, y)."""
        return ((self.x - x) ** 2 + (self.y - y) ** 2) ** 0.5

    def __repr__(self) -> str:
        """String representation for debugging."""
        if self.label != self.node_id:
            return f"Node({self.node_id} '{self.label}', {self.kind.value})"
        return f"Node({self.node_id}, {self.kind.value})"


@dataclass(frozen=True)
class Edge:
    """
    Directed edge between a process and a resource.

    Edges reference nodes by id only; the graph owns the nodes.

    Attributes:
        source: Id of the node the edge leaves
        target: Id of the node the edge enters
        kind: REQUEST (process -> resource) or ALLOCATION (resource -> process)
    """
    source: str
    target: str
    kind: EdgeKind

    def connects(self, a: str, b: str) -> bool:
        """Check if this edge joins a and b, in either direction."""
        return {self.source, self.target} == {a, b}

    def __str__(self) -> str:
        # R1 -> P1 reads "R1 held by P1"
        verb = "requests" if self.kind is EdgeKind.REQUEST else "held by"
        return f"{self.source} {verb} {self.target}"
