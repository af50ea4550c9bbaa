"""
Resource-Allocation Graph model for the Deadlock Visualizer.

Maintains the process and resource nodes of an editable allocation graph
and the request/allocation edges between them.
"""

import numpy as np
from typing import Dict, List, Optional

from models.node import Edge, EdgeKind, Node, NodeKind


CANVAS_WIDTH = 800
CANVAS_HEIGHT = 500
CANVAS_MARGIN = 100
NODE_RADIUS = 25


class GraphModel:
    """
    Bipartite directed graph of processes and resources.

    Node ids are numbered per kind ("P1", "P2", ... and "R1", "R2", ...).
    At most one edge may join any pair of nodes, whatever its direction.

    Attributes:
        processes: Process nodes in creation order
        resources: Resource nodes in creation order
        edges: Edges in creation order
    """

    def __init__(
        self,
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize an empty graph.

        Args:
            width: Canvas width used to place nodes without a position
            height: Canvas height used to place nodes without a position
            rng: Random generator for node placement (seedable for tests)
        """
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()
        self.processes: List[Node] = []
        self.resources: List[Node] = []
        self.edges: List[Edge] = []
        self._nodes: Dict[str, Node] = {}
        self._counters = {NodeKind.PROCESS: 0, NodeKind.RESOURCE: 0}

    @property
    def nodes(self) -> List[Node]:
        """All nodes: processes first, then resources, each in creation order."""
        return self.processes + self.resources

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def add_process(
        self,
        label: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None
    ) -> Node:
        """Create a process node with the next free id."""
        return self._add_node(NodeKind.PROCESS, label, x, y)

    def add_resource(
        self,
        label: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None
    ) -> Node:
        """Create a resource node with the next free id."""
        return self._add_node(NodeKind.RESOURCE, label, x, y)

    def _add_node(
        self,
        kind: NodeKind,
        label: Optional[str],
        x: Optional[float],
        y: Optional[float]
    ) -> Node:
        self._counters[kind] += 1
        node_id = f"{kind.prefix}{self._counters[kind]}"

        if x is None:
            x = CANVAS_MARGIN + self.rng.random() * (self.width - 2 * CANVAS_MARGIN)
        if y is None:
            y = CANVAS_MARGIN + self.rng.random() * (self.height - 2 * CANVAS_MARGIN)

        node = Node(node_id=node_id, kind=kind, x=float(x), y=float(y), label=label)
        self._nodes[node_id] = node
        if kind is NodeKind.PROCESS:
            self.processes.append(node)
        else:
            self.resources.append(node)
        return node

    def add_edge(self, source_id: str, target_id: str) -> bool:
        """
        Add a directed edge between a process and a resource.

        Process -> resource is a request, resource -> process an allocation.
        Invalid requests are ignored rather than raised, so interactive
        editing can never fail.

        Args:
            source_id: Id of the node the edge leaves
            target_id: Id of the node the edge enters

        Returns:
            True if the edge was created, False if the call was a no-op
            (self-loop, unknown id, same-kind endpoints, or an edge already
            joins the pair in either direction)
        """
        if source_id == target_id:
            return False

        source = self._nodes.get(source_id)
        target = self._nodes.get(target_id)
        if source is None or target is None:
            return False

        if source.kind is target.kind:
            return False

        if self.has_edge_between(source_id, target_id):
            return False

        kind = EdgeKind.REQUEST if source.is_process else EdgeKind.ALLOCATION
        self.edges.append(Edge(source=source_id, target=target_id, kind=kind))
        return True

    def has_edge_between(self, a: str, b: str) -> bool:
        """Check if any edge joins a and b, in either direction."""
        return any(edge.connects(a, b) for edge in self.edges)

    def clear(self) -> None:
        """Remove every node and edge and restart numbering at 1."""
        self.processes = []
        self.resources = []
        self.edges = []
        self._nodes = {}
        self._counters = {NodeKind.PROCESS: 0, NodeKind.RESOURCE: 0}

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def find_by_label(self, label: str) -> Optional[Node]:
        """Return the first node whose label (or id) matches."""
        for node in self.nodes:
            if node.label == label or node.node_id == label:
                return node
        return None

    def node_at(self, x: float, y: float, radius: float = NODE_RADIUS) -> Optional[Node]:
        """
        Hit-test a canvas position.

        Returns:
            First node (processes before resources) within radius of (x, y)
        """
        for node in self.nodes:
            if node.distance_to(x, y) <= radius:
                return node
        return None

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Reposition a node. Position is the only mutable node attribute."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.x = float(x)
        node.y = float(y)
        return True

    def find_cycle(self) -> Optional[List[str]]:
        """Return the node ids of the first cycle found, or None."""
        # Import here to avoid circular dependency
        from algorithms.detection import find_cycle
        return find_cycle(self)

    def has_cycle(self) -> bool:
        """Check whether the graph contains a circular wait."""
        from algorithms.detection import has_cycle
        return has_cycle(self)

    def display(self) -> str:
        """
        Generate readable string representation of the graph.

        Returns:
            Formatted string listing nodes and edges
        """
        output = []
        output.append("\n" + "=" * 60)
        output.append("RESOURCE-ALLOCATION GRAPH")
        output.append("=" * 60)

        output.append("\nProcesses:")
        for node in self.processes:
            output.append(f"  {node.node_id}: {node.label}")
        if not self.processes:
            output.append("  (none)")

        output.append("\nResources:")
        for node in self.resources:
            output.append(f"  {node.node_id}: {node.label}")
        if not self.resources:
            output.append("  (none)")

        output.append("\nEdges:")
        for edge in self.edges:
            source = self._nodes[edge.source]
            target = self._nodes[edge.target]
            output.append(
                f"  {edge.source} -> {edge.target}  "
                f"({edge.kind.value}: {source.label} -> {target.label})"
            )
        if not self.edges:
            output.append("  (none)")

        output.append("\n" + "=" * 60)
        return "\n".join(output)

    def __repr__(self) -> str:
        return (
            f"GraphModel(processes={len(self.processes)}, "
            f"resources={len(self.resources)}, edges={len(self.edges)})"
        )
