"""Structural validation of intent graphs.

Every check is independent and reported by name; a graph can be invalid
without that being an operational error. Checks, in order:

1. unique_node_ids
2. unique_edge_ids
3. valid_edge_references (edge endpoints and fallback_node references)
4. entry_exit_points
5. dag_structure (cycles are tolerated only if iteration edges exist)
6. all_nodes_reachable
"""

from collections import defaultdict

from intentgraph.models.document import IntentGraphDocument, ValidationCheck, ValidationResult
from intentgraph.models.graph import Edge, IntentGraph, Node, NodeType
from intentgraph.utils.identifiers import utc_timestamp


def _duplicates(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for item in ids:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def _check_unique_node_ids(nodes: list[Node]) -> ValidationCheck:
    duplicates = _duplicates([node.node_id for node in nodes])
    if not duplicates:
        return ValidationCheck(
            check_name="unique_node_ids", passed=True, message="All node IDs are unique"
        )
    return ValidationCheck(
        check_name="unique_node_ids",
        passed=False,
        message=f"Duplicate node IDs: {', '.join(duplicates)}",
        details={"duplicates": duplicates},
    )


def _check_unique_edge_ids(edges: list[Edge]) -> ValidationCheck:
    duplicates = _duplicates([edge.edge_id for edge in edges])
    if not duplicates:
        return ValidationCheck(
            check_name="unique_edge_ids", passed=True, message="All edge IDs are unique"
        )
    return ValidationCheck(
        check_name="unique_edge_ids",
        passed=False,
        message=f"Duplicate edge IDs: {', '.join(duplicates)}",
        details={"duplicates": duplicates},
    )


def _check_references(nodes: list[Node], edges: list[Edge]) -> ValidationCheck:
    node_ids = {node.node_id for node in nodes}
    invalid_edges = [
        edge.edge_id
        for edge in edges
        if edge.from_node not in node_ids or edge.to_node not in node_ids
    ]
    invalid_fallbacks = [
        node.node_id
        for node in nodes
        if node.error_handling
        and node.error_handling.fallback_node
        and node.error_handling.fallback_node not in node_ids
    ]

    if not invalid_edges and not invalid_fallbacks:
        return ValidationCheck(
            check_name="valid_edge_references",
            passed=True,
            message="All edges and fallback nodes reference existing nodes",
        )

    problems = []
    if invalid_edges:
        problems.append(f"Invalid edges: {', '.join(invalid_edges)}")
    if invalid_fallbacks:
        problems.append(f"Invalid fallback references on nodes: {', '.join(invalid_fallbacks)}")
    return ValidationCheck(
        check_name="valid_edge_references",
        passed=False,
        message="; ".join(problems),
        details={"invalid_edges": invalid_edges, "invalid_fallback_nodes": invalid_fallbacks},
    )


def _check_entry_exit(nodes: list[Node]) -> ValidationCheck:
    has_entry = any(node.node_type == NodeType.entry for node in nodes)
    has_exit = any(node.node_type == NodeType.exit for node in nodes)
    if has_entry and has_exit:
        return ValidationCheck(
            check_name="entry_exit_points", passed=True, message="Entry and exit points defined"
        )
    missing = []
    if not has_entry:
        missing.append("entry points")
    if not has_exit:
        missing.append("exit points")
    return ValidationCheck(
        check_name="entry_exit_points",
        passed=False,
        message=f"Missing: {', '.join(missing)}",
        details={"missing": missing},
    )


def has_cycle(nodes: list[Node], edges: list[Edge], include_iteration: bool = False) -> bool:
    """Depth-first cycle search, skipping iteration edges unless asked not to.

    Uses an explicit stack so deep graphs do not hit the recursion limit.
    """
    adjacency: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        if edge.edge_type.is_cyclic and not include_iteration:
            continue
        adjacency[edge.from_node].append(edge.to_node)

    on_stack: set[str] = set()
    done: set[str] = set()

    for root in (node.node_id for node in nodes):
        if root in done:
            continue
        on_stack.add(root)
        stack = [(root, iter(adjacency[root]))]
        while stack:
            current, neighbors = stack[-1]
            advanced = False
            for nxt in neighbors:
                if nxt in on_stack:
                    return True
                if nxt not in done:
                    on_stack.add(nxt)
                    stack.append((nxt, iter(adjacency[nxt])))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                on_stack.discard(current)
                done.add(current)
    return False


def _check_dag(nodes: list[Node], edges: list[Edge]) -> ValidationCheck:
    cyclic = has_cycle(nodes, edges)
    has_iteration = any(edge.edge_type.is_cyclic for edge in edges)
    passed = not cyclic or has_iteration
    if not passed:
        message = "Graph contains cycles without iteration edges"
    elif has_iteration:
        message = "Valid graph with iteration cycles"
    else:
        message = "Graph is a valid DAG"
    return ValidationCheck(
        check_name="dag_structure",
        passed=passed,
        message=message,
        details={"has_cycles": cyclic, "has_iteration_edges": has_iteration},
    )


def entry_node_ids(graph: IntentGraph) -> list[str]:
    """Entry-typed nodes plus any declared plan entry points, in declaration order."""
    node_ids = graph.node_ids()
    entries = [node.node_id for node in graph.nodes if node.node_type == NodeType.entry]
    for node_id in graph.execution_plan.entry_points:
        if node_id in node_ids and node_id not in entries:
            entries.append(node_id)
    return entries


def find_reachable_nodes(entry_points: list[str], edges: list[Edge]) -> set[str]:
    """Forward reachability over all edges, iteration edges included."""
    adjacency: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        adjacency[edge.from_node].append(edge.to_node)

    reachable = set(entry_points)
    pending = list(entry_points)
    while pending:
        current = pending.pop()
        for nxt in adjacency[current]:
            if nxt not in reachable:
                reachable.add(nxt)
                pending.append(nxt)
    return reachable


def _check_reachability(graph: IntentGraph) -> ValidationCheck:
    reachable = find_reachable_nodes(entry_node_ids(graph), graph.edges)
    orphaned = [node.node_id for node in graph.nodes if node.node_id not in reachable]
    if not orphaned:
        return ValidationCheck(
            check_name="all_nodes_reachable",
            passed=True,
            message="All nodes are reachable from entry points",
        )
    return ValidationCheck(
        check_name="all_nodes_reachable",
        passed=False,
        message=f"{len(orphaned)} orphaned nodes detected",
        details={"orphaned_nodes": orphaned, "orphaned_count": len(orphaned)},
    )


def validate_graph(graph: IntentGraph) -> ValidationResult:
    """Run every structural check over a graph.

    Args:
        graph: the intent graph to check. It is not modified.

    Returns:
        ValidationResult whose is_valid is the AND of all checks.
    """
    checks = [
        _check_unique_node_ids(graph.nodes),
        _check_unique_edge_ids(graph.edges),
        _check_references(graph.nodes, graph.edges),
        _check_entry_exit(graph.nodes),
        _check_dag(graph.nodes, graph.edges),
        _check_reachability(graph),
    ]
    return ValidationResult(
        is_valid=all(check.passed for check in checks),
        checks_performed=checks,
        validation_timestamp=utc_timestamp(),
    )


def validate_document(document: IntentGraphDocument) -> ValidationResult:
    """Validate the graph held by a document."""
    return validate_graph(document.intent_graph)
