"""Recompute derived document state after a mutation.

refresh_document() is the single place that keeps metadata, the execution
plan and the validation record consistent with the current node/edge set.
"""

from intentgraph.analysis.complexity import calculate_complexity_metrics, estimate_resources
from intentgraph.analysis.paths import calculate_critical_path, find_parallel_opportunities
from intentgraph.models.document import GraphWarning, IntentGraphDocument
from intentgraph.models.graph import ExecutionMode, NodeType, ParallelGroup
from intentgraph.utils.logging import get_logger
from intentgraph.validation.validator import validate_graph

log = get_logger(__name__)

# reachability problems are reported, but do not break the structure
_CHECK_SEVERITY = {"all_nodes_reachable": "medium"}


def refresh_document(document: IntentGraphDocument) -> IntentGraphDocument:
    """Recompute metrics, estimates, execution plan, notes, warnings and validation in place."""
    graph = document.intent_graph
    nodes, edges = graph.nodes, graph.edges
    metrics = calculate_complexity_metrics(nodes, edges)

    metadata = document.metadata
    metadata.complexity_metrics = metrics
    metadata.resource_estimates = estimate_resources(nodes)

    plan = graph.execution_plan
    plan.entry_points = [node.node_id for node in nodes if node.node_type == NodeType.entry]
    plan.exit_points = [node.node_id for node in nodes if node.node_type == NodeType.exit]
    plan.total_estimated_steps = len(nodes)
    plan.critical_path = calculate_critical_path(nodes, edges)

    opportunities = find_parallel_opportunities(nodes, edges)
    plan.parallel_groups = [
        ParallelGroup(
            group_id=f"parallel_group_{idx}",
            nodes=list(opportunity.parallel_nodes),
            execution_mode=ExecutionMode.all,
        )
        for idx, opportunity in enumerate(opportunities, 1)
    ]
    # also counts parallel-edge width, not only the largest sequential fan-out group
    largest_group = max((len(o.parallel_nodes) for o in opportunities), default=1)
    plan.max_parallel_nodes = max(1, largest_group, metrics.width)

    metadata.optimization_notes = [
        f"Nodes {', '.join(o.parallel_nodes)} after '{o.from_node}' are independent "
        "and could run in parallel"
        for o in opportunities
    ]

    document.validation = validate_graph(graph)
    metadata.warnings = [
        GraphWarning(severity=_CHECK_SEVERITY.get(check.check_name, "high"), message=check.message)
        for check in document.validation.failed_checks()
    ]

    log.debug(
        "document_refreshed",
        graph_id=metadata.graph_id,
        node_count=metrics.node_count,
        edge_count=metrics.edge_count,
        is_valid=document.validation.is_valid,
    )
    return document
