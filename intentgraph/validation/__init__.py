"""Structural validation for intent graphs."""

from intentgraph.validation.validator import (
    entry_node_ids,
    find_reachable_nodes,
    has_cycle,
    validate_document,
    validate_graph,
)

__all__ = [
    "entry_node_ids",
    "find_reachable_nodes",
    "has_cycle",
    "validate_document",
    "validate_graph",
]
