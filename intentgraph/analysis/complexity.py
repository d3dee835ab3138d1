"""Complexity metrics and resource estimates for a node/edge set.

The composite complexity score is a ranking heuristic, not a derived metric:

    floor(2 * nodes + 1.5 * edges + 3 * depth + 5 * cyclomatic), clamped to [1, 100]
"""

import math
from collections import Counter

from intentgraph.analysis.paths import calculate_depth
from intentgraph.models.document import ComplexityMetrics, ResourceEstimates
from intentgraph.models.graph import AgentType, Edge, EdgeType, Node

# single connected component assumed
_CONNECTED_COMPONENTS = 1


def calculate_width(nodes: list[Node], edges: list[Edge]) -> int:
    """Largest number of parallel edges leaving one node (1 if there are none)."""
    if not nodes:
        return 0
    parallel_counts = Counter(
        edge.from_node for edge in edges if edge.edge_type == EdgeType.parallel
    )
    return max(parallel_counts.values(), default=1)


def calculate_cyclomatic_complexity(node_count: int, edge_count: int) -> int:
    return edge_count - node_count + 2 * _CONNECTED_COMPONENTS


def calculate_complexity_score(
    node_count: int,
    edge_count: int,
    depth: int,
    cyclomatic_complexity: int,
) -> int:
    raw = node_count * 2 + edge_count * 1.5 + depth * 3 + cyclomatic_complexity * 5
    return min(100, max(1, math.floor(raw)))


def calculate_complexity_metrics(nodes: list[Node], edges: list[Edge]) -> ComplexityMetrics:
    """Compute all complexity metrics for a graph."""
    node_count = len(nodes)
    edge_count = len(edges)
    depth = calculate_depth(nodes, edges)
    cyclomatic = calculate_cyclomatic_complexity(node_count, edge_count)

    return ComplexityMetrics(
        node_count=node_count,
        edge_count=edge_count,
        depth=depth,
        width=calculate_width(nodes, edges),
        complexity_score=calculate_complexity_score(node_count, edge_count, depth, cyclomatic),
        cyclomatic_complexity=cyclomatic,
    )


def complexity_rating(score: int) -> str:
    """Bucket a complexity score into low / medium / high."""
    if score < 30:
        return "low"
    if score < 60:
        return "medium"
    return "high"


def estimate_resources(nodes: list[Node]) -> ResourceEstimates:
    """Sum per-node duration and cost estimates.

    Tokens are a rough 1000 per unit of cost; api calls count llm and api agents.
    """
    total_duration = sum(
        node.metadata.estimated_duration_ms or 0 for node in nodes if node.metadata
    )
    total_cost = sum(node.metadata.cost_estimate or 0 for node in nodes if node.metadata)
    api_calls = sum(
        1 for node in nodes if node.agent_type in (AgentType.api, AgentType.llm)
    )
    return ResourceEstimates(
        estimated_duration_ms=total_duration,
        estimated_cost=total_cost,
        estimated_tokens=math.floor(total_cost * 1000),
        estimated_api_calls=api_calls,
    )
