"""Path-based analyses: longest path, critical path and parallel opportunities.

Traversal order is deterministic: roots are entry nodes in declaration
order (or the first node when there is no entry node) and outgoing edges
are followed in insertion order. When several paths share the maximum
length, the first one discovered in that order wins. Both searches keep
an explicit stack, so path length is not bounded by the recursion limit.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from intentgraph.models.graph import Edge, EdgeType, Node, NodeType
from intentgraph.validation.validator import has_cycle


@dataclass
class ParallelOpportunity:
    """Independent targets of one source that could run concurrently."""

    from_node: str
    parallel_nodes: list[str] = field(default_factory=list)


@dataclass
class CriticalPath:
    """The longest path together with its summed duration estimate."""

    path: list[str]
    estimated_duration_ms: float = 0


def _adjacency(nodes: list[Node], edges: list[Edge]) -> dict[str, list[str]]:
    known = {node.node_id for node in nodes}
    adjacency: dict[str, list[str]] = {node.node_id: [] for node in nodes}
    for edge in edges:
        if edge.from_node in known and edge.to_node in known:
            adjacency[edge.from_node].append(edge.to_node)
    return adjacency


def _roots(nodes: list[Node]) -> list[str]:
    entries = [node.node_id for node in nodes if node.node_type == NodeType.entry]
    if entries:
        return entries
    return [nodes[0].node_id] if nodes else []


def _longest_from_acyclic(
    root: str,
    adjacency: dict[str, list[str]],
    length: dict[str, int],
    successor: dict[str, str | None],
) -> list[str]:
    """Longest path from root in a DAG, via an iterative post-order walk.

    length and successor are shared across roots. A node's best successor
    is the first one, in edge order, with the greatest path length.
    """
    if root not in length:
        stack = [(root, iter(adjacency[root]))]
        while stack:
            node_id, successors = stack[-1]
            for nxt in successors:
                if nxt not in length:
                    stack.append((nxt, iter(adjacency[nxt])))
                    break
            else:
                stack.pop()
                best_length, best_next = 0, None
                for nxt in adjacency[node_id]:
                    if length[nxt] > best_length:
                        best_length, best_next = length[nxt], nxt
                length[node_id] = best_length + 1
                successor[node_id] = best_next

    path: list[str] = []
    current: str | None = root
    while current is not None:
        path.append(current)
        current = successor[current]
    return path


def _longest_from_cyclic(root: str, adjacency: dict[str, list[str]]) -> list[str]:
    """Exhaustive DFS that never revisits a node on the current path."""
    longest = [root]
    path = [root]
    on_path = {root}
    stack = [iter(adjacency[root])]
    while stack:
        for nxt in stack[-1]:
            if nxt in on_path:
                continue
            path.append(nxt)
            on_path.add(nxt)
            stack.append(iter(adjacency[nxt]))
            if len(path) > len(longest):
                longest = list(path)
            break
        else:
            stack.pop()
            on_path.discard(path.pop())
    return longest


def longest_path(nodes: list[Node], edges: list[Edge]) -> list[str]:
    """Longest simple path (in nodes) reachable from the roots over all edge types."""
    if not nodes:
        return []

    adjacency = _adjacency(nodes, edges)
    # shared tables are only sound when no path can revisit a node
    acyclic = not has_cycle(nodes, edges, include_iteration=True)
    length: dict[str, int] = {}
    successor: dict[str, str | None] = {}

    longest: list[str] = []
    for root in _roots(nodes):
        if acyclic:
            candidate = _longest_from_acyclic(root, adjacency, length, successor)
        else:
            candidate = _longest_from_cyclic(root, adjacency)
        if len(candidate) > len(longest):
            longest = candidate
    return list(longest)


def calculate_depth(nodes: list[Node], edges: list[Edge]) -> int:
    """Maximum number of nodes on any path from an entry node."""
    return len(longest_path(nodes, edges))


def calculate_critical_path(nodes: list[Node], edges: list[Edge]) -> list[str]:
    """Node ids of the longest path from any entry node."""
    return longest_path(nodes, edges)


def critical_path_with_duration(nodes: list[Node], edges: list[Edge]) -> CriticalPath:
    """Critical path plus the sum of its nodes' duration estimates."""
    path = calculate_critical_path(nodes, edges)
    durations = {
        node.node_id: (node.metadata.estimated_duration_ms or 0) if node.metadata else 0
        for node in nodes
    }
    return CriticalPath(path=path, estimated_duration_ms=sum(durations[n] for n in path))


def find_parallel_opportunities(nodes: list[Node], edges: list[Edge]) -> list[ParallelOpportunity]:
    """Sources with two or more sequential out-edges whose targets are independent.

    Targets are independent when no edge of any type connects two of them.
    """
    edges_by_source: dict[str, list[Edge]] = defaultdict(list)
    for edge in edges:
        edges_by_source[edge.from_node].append(edge)

    opportunities: list[ParallelOpportunity] = []
    for source, outgoing in edges_by_source.items():
        sequential = [edge for edge in outgoing if edge.edge_type == EdgeType.sequential]
        if len(sequential) < 2:
            continue

        targets = [edge.to_node for edge in sequential]
        target_set = set(targets)
        interdependent = any(
            edge.from_node in target_set and edge.to_node in target_set for edge in edges
        )
        if not interdependent:
            opportunities.append(ParallelOpportunity(from_node=source, parallel_nodes=targets))

    return opportunities
