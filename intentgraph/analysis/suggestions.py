"""Heuristic review of a graph: bottlenecks and improvement suggestions."""

from collections import Counter
from dataclasses import dataclass
from typing import Literal

from intentgraph import config
from intentgraph.analysis.paths import find_parallel_opportunities
from intentgraph.models.document import ComplexityMetrics
from intentgraph.models.graph import IntentGraph


@dataclass
class Bottleneck:
    """A node likely to slow down or serialize execution."""

    node_id: str
    reason: str
    impact: Literal["high", "medium", "low"]


def identify_bottlenecks(
    graph: IntentGraph,
    duration_threshold_ms: float = config.BOTTLENECK_DURATION_MS,
    fan_threshold: int = config.BOTTLENECK_FAN_THRESHOLD,
) -> list[Bottleneck]:
    """Flag slow nodes and nodes with high fan-in or fan-out."""
    fan_in = Counter(edge.to_node for edge in graph.edges)
    fan_out = Counter(edge.from_node for edge in graph.edges)

    bottlenecks: list[Bottleneck] = []
    for node in graph.nodes:
        duration = (node.metadata.estimated_duration_ms or 0) if node.metadata else 0
        if duration > duration_threshold_ms:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"Long execution time ({duration:g}ms)",
                impact="high",
            ))
        if fan_in[node.node_id] > fan_threshold:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"High fan-in ({fan_in[node.node_id]} incoming edges)",
                impact="medium",
            ))
        if fan_out[node.node_id] > fan_threshold:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"High fan-out ({fan_out[node.node_id]} outgoing edges)",
                impact="medium",
            ))
    return bottlenecks


def suggest_improvements(graph: IntentGraph, metrics: ComplexityMetrics) -> list[str]:
    """Plain-language suggestions; never empty."""
    suggestions: list[str] = []

    opportunities = find_parallel_opportunities(graph.nodes, graph.edges)
    if opportunities:
        suggestions.append(
            f"Found {len(opportunities)} opportunities to parallelize sequential operations"
        )

    if metrics.complexity_score > config.HIGH_COMPLEXITY_THRESHOLD:
        suggestions.append("High complexity detected - consider breaking into smaller sub-graphs")

    without_error_handling = [node for node in graph.nodes if node.error_handling is None]
    if without_error_handling:
        suggestions.append(f"{len(without_error_handling)} nodes lack error handling strategies")

    without_timeouts = [
        node for node in graph.nodes
        if node.configuration is None or not node.configuration.timeout_ms
    ]
    if without_timeouts:
        suggestions.append(f"{len(without_timeouts)} nodes lack timeout configuration")

    if graph.nodes and not graph.edges:
        suggestions.append("Graph has nodes but no edges - nodes are disconnected")

    if not suggestions:
        suggestions.append("Graph is well-optimized - no improvements suggested")
    return suggestions
