"""Graph optimization passes.

Each strategy either rewrites the copy it is given or only reports what it
found. improve_reliability is the only rewriting pass; the others describe
the opportunity and leave the structure to the author.
"""

from dataclasses import dataclass

from intentgraph.analysis.paths import critical_path_with_duration, find_parallel_opportunities
from intentgraph.errors import InvalidInputError
from intentgraph.models.graph import IntentGraph, Node, NodeConfiguration, RetryPolicy
from intentgraph.utils.logging import get_logger

log = get_logger(__name__)

OPTIMIZATION_STRATEGIES = ("parallelize", "reduce_latency", "minimize_cost", "improve_reliability")

# assumed for nodes without a duration estimate
DEFAULT_NODE_DURATION_MS = 1000.0


@dataclass
class Optimization:
    """One optimization that was applied or identified."""

    type: str
    description: str
    impact: str


def _duration(node: Node | None, default: float = DEFAULT_NODE_DURATION_MS) -> float:
    if node is None or node.metadata is None or node.metadata.estimated_duration_ms is None:
        return default
    return node.metadata.estimated_duration_ms


def _cost(node: Node) -> float:
    if node.metadata is None or node.metadata.cost_estimate is None:
        return 0.0
    return node.metadata.cost_estimate


def _parallelize(graph: IntentGraph) -> Optimization | None:
    opportunities = find_parallel_opportunities(graph.nodes, graph.edges)
    if not opportunities:
        return None
    by_id = {node.node_id: node for node in graph.nodes}
    savings = 0.0
    for opportunity in opportunities:
        durations = [_duration(by_id.get(node_id)) for node_id in opportunity.parallel_nodes]
        savings += sum(durations) - max(durations)
    return Optimization(
        type="parallelize",
        description=f"Identified {len(opportunities)} parallel execution opportunities",
        impact=f"Potential savings: {savings:g}ms",
    )


def _reduce_latency(graph: IntentGraph) -> Optimization | None:
    critical = critical_path_with_duration(graph.nodes, graph.edges)
    if not critical.path:
        return None
    by_id = {node.node_id: node for node in graph.nodes}
    slowest = max(critical.path, key=lambda node_id: _duration(by_id.get(node_id), 0.0))
    return Optimization(
        type="reduce_latency",
        description=(
            f"Critical path has {len(critical.path)} nodes; "
            f"'{slowest}' is its slowest step"
        ),
        impact=f"Critical path duration: {critical.estimated_duration_ms:g}ms",
    )


def _minimize_cost(graph: IntentGraph) -> Optimization | None:
    costed = [node for node in graph.nodes if _cost(node) > 0]
    if not costed:
        return None
    costliest = max(costed, key=_cost)
    total = sum(_cost(node) for node in costed)
    return Optimization(
        type="minimize_cost",
        description=f"'{costliest.node_id}' is the most expensive node ({_cost(costliest):g})",
        impact=f"Total estimated cost: {total:g}",
    )


def _improve_reliability(graph: IntentGraph) -> Optimization | None:
    changed = 0
    for node in graph.nodes:
        if node.configuration is None:
            node.configuration = NodeConfiguration()
        if node.configuration.retry_policy is None:
            node.configuration.retry_policy = RetryPolicy()
            changed += 1
    if not changed:
        return None
    return Optimization(
        type="improve_reliability",
        description=f"Added retry policies to {changed} nodes",
        impact="Improved fault tolerance",
    )


_PASSES = {
    "parallelize": _parallelize,
    "reduce_latency": _reduce_latency,
    "minimize_cost": _minimize_cost,
    "improve_reliability": _improve_reliability,
}


def optimize_graph(
    graph: IntentGraph, strategies: list[str] | None = None
) -> tuple[IntentGraph, list[Optimization]]:
    """Run the selected strategies (all by default) over a copy of graph.

    Returns the optimized copy and what each strategy did. Strategies with
    nothing to report are left out of the list.

    Raises:
        InvalidInputError: an unknown strategy name.
    """
    requested = list(strategies) if strategies is not None else list(OPTIMIZATION_STRATEGIES)
    unknown = [name for name in requested if name not in _PASSES]
    if unknown:
        raise InvalidInputError(
            f"Unknown optimization strategies: {', '.join(unknown)}",
            details={"supported_strategies": list(OPTIMIZATION_STRATEGIES)},
        )

    optimized = graph.model_copy(deep=True)
    applied = []
    for name in OPTIMIZATION_STRATEGIES:
        if name in requested:
            optimization = _PASSES[name](optimized)
            if optimization is not None:
                applied.append(optimization)

    log.debug("graph_optimized", strategies=requested, applied=[o.type for o in applied])
    return optimized, applied
