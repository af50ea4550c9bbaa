"""
Deadlock Detection for the Deadlock Visualizer.

Implements circular-wait detection over a resource-allocation graph
(single-instance resources).
"""

from typing import Dict, List, Optional

from models.graph import GraphModel


def build_adjacency(graph: GraphModel) -> Dict[str, List[str]]:
    """
    Build an adjacency list from the current graph.

    Every node is seeded as a vertex (processes first, then resources, in
    creation order) and each edge appends its target to its source's list
    in creation order. Dict order preserves both for the traversal.

    Args:
        graph: Resource-allocation graph

    Returns:
        Mapping of node id to successor ids
    """
    adjacency: Dict[str, List[str]] = {node.node_id: [] for node in graph.nodes}
    for edge in graph.edges:
        adjacency[edge.source].append(edge.target)
    return adjacency


def find_cycle(graph: GraphModel) -> Optional[List[str]]:
    """
    Find a directed cycle using depth-first search with a recursion stack.

    Algorithm:
    1. Visit each unvisited vertex in insertion order
    2. Push the vertex on the recursion stack, explore successors in order
    3. A successor already on the stack closes a cycle -> stop
    4. Pop the vertex once all successors are explored

    With one node per resource, a cycle is both necessary and sufficient
    for deadlock (circular wait).

    Time Complexity: O(V + E)

    Args:
        graph: Resource-allocation graph

    Returns:
        Node ids along the first cycle found (starting at the vertex that
        closes it), or None if the graph is acyclic

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8.6: Deadlock Detection.
    """
    adjacency = build_adjacency(graph)
    visited = set()
    on_stack = set()
    path: List[str] = []

    def dfs(node_id: str) -> Optional[List[str]]:
        visited.add(node_id)
        on_stack.add(node_id)
        path.append(node_id)

        for neighbor in adjacency.get(node_id, []):
            if neighbor not in visited:
                cycle = dfs(neighbor)
                if cycle is not None:
                    return cycle
            elif neighbor in on_stack:
                return path[path.index(neighbor):]

        on_stack.discard(node_id)
        path.pop()
        return None

    for node_id in adjacency:
        if node_id not in visited:
            cycle = dfs(node_id)
            if cycle is not None:
                return cycle

    return None


def has_cycle(graph: GraphModel) -> bool:
    """
    Check if the graph contains a circular wait.

    Args:
        graph: Resource-allocation graph

    Returns:
        True at the first cycle found, False after all components are searched
    """
    return find_cycle(graph) is not None
