"""Analysis utilities for intent graphs."""

from intentgraph.analysis.complexity import (
    calculate_complexity_metrics,
    calculate_complexity_score,
    calculate_cyclomatic_complexity,
    calculate_width,
    complexity_rating,
    estimate_resources,
)
from intentgraph.analysis.metadata import refresh_document
from intentgraph.analysis.optimization import (
    OPTIMIZATION_STRATEGIES,
    Optimization,
    optimize_graph,
)
from intentgraph.analysis.paths import (
    CriticalPath,
    ParallelOpportunity,
    calculate_critical_path,
    calculate_depth,
    critical_path_with_duration,
    find_parallel_opportunities,
    longest_path,
)
from intentgraph.analysis.suggestions import (
    Bottleneck,
    identify_bottlenecks,
    suggest_improvements,
)

__all__ = [
    # complexity exports
    "calculate_complexity_metrics",
    "calculate_complexity_score",
    "calculate_cyclomatic_complexity",
    "calculate_width",
    "complexity_rating",
    "estimate_resources",
    # path exports
    "CriticalPath",
    "ParallelOpportunity",
    "calculate_critical_path",
    "calculate_depth",
    "critical_path_with_duration",
    "find_parallel_opportunities",
    "longest_path",
    # review exports
    "Bottleneck",
    "identify_bottlenecks",
    "suggest_improvements",
    # optimization exports
    "OPTIMIZATION_STRATEGIES",
    "Optimization",
    "optimize_graph",
    # document refresh
    "refresh_document",
]
