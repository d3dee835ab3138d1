"""Public operation boundary.

IntentGraphService exposes every graph operation by name. Each call
returns a ToolSuccess or a ToolError and never raises, so a host transport
can forward the result as-is. Arguments may be pydantic models or the
equivalent JSON-like dicts.
"""

import functools
from collections.abc import Callable
from dataclasses import asdict
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from intentgraph import config, mutations
from intentgraph.analysis.complexity import (
    calculate_complexity_metrics,
    complexity_rating,
    estimate_resources,
)
from intentgraph.analysis.optimization import optimize_graph
from intentgraph.analysis.paths import (
    calculate_critical_path,
    critical_path_with_duration,
    find_parallel_opportunities,
)
from intentgraph.analysis.suggestions import identify_bottlenecks, suggest_improvements
from intentgraph.errors import (
    ErrorCode,
    GraphNotFoundError,
    IntentGraphError,
    InvalidAgentsError,
    InvalidInputError,
    InvalidPurposeError,
)
from intentgraph.generation import (
    GeneratedGraph,
    accept_generated_graph,
    coerce_intent_graph,
    generate_artifacts,
)
from intentgraph.models.agent import (
    AgentDefinition,
    EdgeSpec,
    EdgeUpdate,
    GraphConfig,
    NodeSpec,
    NodeUpdate,
)
from intentgraph.models.graph import IntentGraph
from intentgraph.models.responses import ErrorDetail, ToolError, ToolResponse, ToolSuccess
from intentgraph.models.stored import StoredGraph
from intentgraph.repository import GraphRepository
from intentgraph.serializers import export_document, parse_format, render_mermaid
from intentgraph.utils.logging import get_logger
from intentgraph.validation.validator import validate_document, validate_graph

log = get_logger(__name__)

ANALYSIS_TYPES = ("complexity", "parallel_opportunities", "critical_path", "bottlenecks")
MERMAID_DIRECTIONS = ("LR", "RL", "TB", "TD", "BT")

M = TypeVar("M", bound=BaseModel)

Candidate = IntentGraph | GeneratedGraph | dict[str, Any] | str


def _parse(model: type[M], value: M | dict[str, Any]) -> M:
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": [str(part) for part in error["loc"]], "msg": error["msg"]}
        for error in exc.errors()
    ]


def _error(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> ToolError:
    return ToolError(error=ErrorDetail(code=code.value, message=message, details=details))


def _tool(method: Callable[..., Any]) -> Callable[..., ToolResponse]:
    """Run an operation and turn its outcome into a tagged result."""
    operation = method.__name__

    @functools.wraps(method)
    def wrapper(self: "IntentGraphService", *args: Any, **kwargs: Any) -> ToolResponse:
        try:
            return ToolSuccess(result=method(self, *args, **kwargs))
        except IntentGraphError as exc:
            log.info("operation_rejected", operation=operation, code=exc.code.value)
            return _error(exc.code, exc.message, exc.details)
        except ValidationError as exc:
            log.info("operation_rejected", operation=operation, code=ErrorCode.invalid_input.value)
            return _error(
                ErrorCode.invalid_input,
                f"Invalid arguments for {operation}",
                {"errors": _validation_errors(exc)},
            )
        except Exception as exc:
            log.exception("operation_failed", operation=operation)
            return _error(
                ErrorCode.internal_error,
                f"Failed to {operation.replace('_', ' ')}",
                {"operation": operation, "error": str(exc)},
            )

    return wrapper


def _candidate_graph(candidate: Candidate) -> IntentGraph:
    if isinstance(candidate, IntentGraph):
        return candidate
    if isinstance(candidate, GeneratedGraph):
        return candidate.intent_graph
    if isinstance(candidate, str):
        return coerce_intent_graph(candidate)
    if isinstance(candidate, dict) and "intent_graph" in candidate:
        return IntentGraph.model_validate(candidate["intent_graph"])
    return IntentGraph.model_validate(candidate)


class IntentGraphService:
    """Named graph operations over one repository."""

    def __init__(self, repository: GraphRepository | None = None) -> None:
        self.repository = repository or GraphRepository()

    def _create(
        self,
        purpose: Any,
        available_agents: list[AgentDefinition | dict[str, Any]] | None,
        graph_config: GraphConfig | dict[str, Any] | None,
    ) -> StoredGraph:
        if not isinstance(purpose, str):
            raise InvalidPurposeError("Purpose must be a non-empty string")
        try:
            agents = [_parse(AgentDefinition, agent) for agent in available_agents or []]
        except ValidationError as exc:
            raise InvalidAgentsError(
                "available_agents contains invalid agent definitions",
                details={"errors": _validation_errors(exc)},
            ) from exc
        parsed_config = _parse(GraphConfig, graph_config) if graph_config is not None else None
        return self.repository.create(purpose, agents, parsed_config)

    # graph lifecycle

    @_tool
    def create_graph(
        self,
        purpose: str,
        available_agents: list[AgentDefinition | dict[str, Any]],
        config: GraphConfig | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """create an empty graph for a purpose and agent catalog."""
        stored = self._create(purpose, available_agents, config)
        return {
            "graph_id": stored.graph_id,
            "status": "initialized",
            "metadata": {
                "purpose": stored.purpose,
                "created_at": stored.created_at,
                "agent_count": len(stored.available_agents),
                "config": stored.config.model_dump(mode="json"),
            },
        }

    @_tool
    def get_graph(self, graph_id: str) -> dict[str, Any]:
        """get a stored graph with its full document."""
        stored = self.repository.require(graph_id)
        return {
            "graph_id": stored.graph_id,
            "purpose": stored.purpose,
            "config": stored.config.model_dump(mode="json"),
            "document": stored.document.to_payload(),
            "created_at": stored.created_at,
            "updated_at": stored.updated_at,
        }

    @_tool
    def delete_graph(self, graph_id: str) -> dict[str, Any]:
        """delete a graph."""
        if not self.repository.delete(graph_id):
            raise GraphNotFoundError(graph_id)
        return {"graph_id": graph_id, "deleted": True, "message": "Graph successfully deleted"}

    @_tool
    def list_graphs(self) -> dict[str, Any]:
        """list summaries of all live graphs."""
        graphs = self.repository.list()
        return {"count": len(graphs), "graphs": [summary.model_dump() for summary in graphs]}

    # nodes

    @_tool
    def add_node(
        self, graph_id: str, agent_name: str, node_config: NodeSpec | dict[str, Any]
    ) -> dict[str, Any]:
        """add a node that invokes a catalog agent."""
        node = mutations.add_node(self.repository, graph_id, agent_name, _parse(NodeSpec, node_config))
        return {
            "node_id": node.node_id,
            "agent_name": node.agent_name,
            "node_type": node.node_type.value,
            "status": "added",
            "message": f"Node '{node.node_id}' successfully added to graph",
        }

    @_tool
    def update_node(
        self, graph_id: str, node_id: str, updates: NodeUpdate | dict[str, Any]
    ) -> dict[str, Any]:
        """apply a partial update to a node."""
        mutations.update_node(self.repository, graph_id, node_id, _parse(NodeUpdate, updates))
        return {
            "node_id": node_id,
            "status": "updated",
            "message": f"Node '{node_id}' successfully updated",
        }

    @_tool
    def remove_node(self, graph_id: str, node_id: str) -> dict[str, Any]:
        """remove a node and the edges touching it."""
        removed = mutations.remove_node(self.repository, graph_id, node_id)
        return {
            "node_id": node_id,
            "status": "removed",
            "removed_edges": removed,
            "message": f"Node '{node_id}' and {len(removed)} connected edges successfully removed",
        }

    @_tool
    def list_nodes(self, graph_id: str) -> dict[str, Any]:
        graph = self.repository.require(graph_id).document.intent_graph
        nodes = [
            {
                "node_id": node.node_id,
                "agent_name": node.agent_name,
                "agent_type": node.agent_type.value if node.agent_type else None,
                "node_type": node.node_type.value,
                "purpose": node.purpose,
            }
            for node in graph.nodes
        ]
        return {"graph_id": graph_id, "count": len(nodes), "nodes": nodes}

    # edges

    @_tool
    def add_edge(
        self,
        graph_id: str,
        from_node: str,
        to_node: str,
        edge_config: EdgeSpec | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """connect two existing nodes."""
        spec = _parse(EdgeSpec, edge_config) if edge_config is not None else None
        edge = mutations.add_edge(self.repository, graph_id, from_node, to_node, spec)
        return {
            "edge_id": edge.edge_id,
            "from_node": edge.from_node,
            "to_node": edge.to_node,
            "edge_type": edge.edge_type.value,
            "status": "added",
            "message": f"Edge '{edge.edge_id}' successfully added",
        }

    @_tool
    def update_edge(
        self, graph_id: str, edge_id: str, updates: EdgeUpdate | dict[str, Any]
    ) -> dict[str, Any]:
        """apply a partial update to an edge."""
        mutations.update_edge(self.repository, graph_id, edge_id, _parse(EdgeUpdate, updates))
        return {
            "edge_id": edge_id,
            "status": "updated",
            "message": f"Edge '{edge_id}' successfully updated",
        }

    @_tool
    def remove_edge(self, graph_id: str, edge_id: str) -> dict[str, Any]:
        """remove a single edge."""
        mutations.remove_edge(self.repository, graph_id, edge_id)
        return {
            "edge_id": edge_id,
            "status": "removed",
            "message": f"Edge '{edge_id}' successfully removed",
        }

    @_tool
    def list_edges(self, graph_id: str) -> dict[str, Any]:
        graph = self.repository.require(graph_id).document.intent_graph
        edges = [
            {
                "edge_id": edge.edge_id,
                "from_node": edge.from_node,
                "to_node": edge.to_node,
                "edge_type": edge.edge_type.value,
                "has_condition": edge.condition is not None,
            }
            for edge in graph.edges
        ]
        return {"graph_id": graph_id, "count": len(edges), "edges": edges}

    # validation and analysis

    @_tool
    def validate_graph(self, graph_id: str) -> dict[str, Any]:
        """run every structural check over a stored graph."""
        validation = validate_document(self.repository.require(graph_id).document)
        return {"graph_id": graph_id, **validation.model_dump(mode="json", exclude_none=True)}

    @_tool
    def analyze_complexity(self, graph_id: str) -> dict[str, Any]:
        graph = self.repository.require(graph_id).document.intent_graph
        metrics = calculate_complexity_metrics(graph.nodes, graph.edges)
        return {
            "graph_id": graph_id,
            "complexity_metrics": metrics.model_dump(),
            "resource_estimates": estimate_resources(graph.nodes).model_dump(),
            "complexity_rating": complexity_rating(metrics.complexity_score),
        }

    @_tool
    def find_parallel_opportunities(self, graph_id: str) -> dict[str, Any]:
        graph = self.repository.require(graph_id).document.intent_graph
        opportunities = find_parallel_opportunities(graph.nodes, graph.edges)
        if opportunities:
            message = f"Found {len(opportunities)} parallelization opportunities"
        else:
            message = "No parallelization opportunities found"
        return {
            "graph_id": graph_id,
            "count": len(opportunities),
            "opportunities": [asdict(o) for o in opportunities],
            "message": message,
        }

    @_tool
    def calculate_critical_path(self, graph_id: str) -> dict[str, Any]:
        graph = self.repository.require(graph_id).document.intent_graph
        path = calculate_critical_path(graph.nodes, graph.edges)
        return {
            "graph_id": graph_id,
            "critical_path": path,
            "length": len(path),
            "message": f"Critical path contains {len(path)} nodes",
        }

    @_tool
    def suggest_improvements(self, graph_id: str) -> dict[str, Any]:
        document = self.repository.require(graph_id).document
        suggestions = suggest_improvements(
            document.intent_graph, document.metadata.complexity_metrics
        )
        return {"graph_id": graph_id, "suggestions": suggestions, "count": len(suggestions)}

    @_tool
    def optimize_graph(
        self, graph_id: str, optimization_strategies: list[str] | None = None
    ) -> dict[str, Any]:
        """apply the selected optimizations to a stored graph in place."""
        with self.repository.lock(graph_id):
            graph = self.repository.require(graph_id).document.intent_graph
            optimized, applied = optimize_graph(graph, optimization_strategies)
            document = mutations.replace_graph(self.repository, graph_id, optimized)
        return {
            "graph_id": graph_id,
            "optimizations_applied": [asdict(o) for o in applied],
            "is_valid": document.validation.is_valid,
        }

    # export

    @_tool
    def export_graph(self, graph_id: str, format: str | None = None) -> dict[str, Any]:
        """render a stored document as json, yaml, dot or mermaid."""
        fmt = parse_format(format or config.DEFAULT_EXPORT_FORMAT)
        document = self.repository.require(graph_id).document
        return {"graph_id": graph_id, "format": fmt.value, "content": export_document(document, fmt)}

    @_tool
    def visualize_graph(
        self, graph_id: str, direction: str = "LR", include_metadata: bool = False
    ) -> dict[str, Any]:
        """mermaid flowchart of a stored graph."""
        if direction not in MERMAID_DIRECTIONS:
            raise InvalidInputError(
                f"Unsupported direction: {direction}",
                details={"supported_directions": list(MERMAID_DIRECTIONS)},
            )
        graph = self.repository.require(graph_id).document.intent_graph
        return {
            "graph_id": graph_id,
            "mermaid": render_mermaid(graph, direction=direction, include_metadata=include_metadata),
            "node_count": len(graph.nodes),
            "edge_count": len(graph.edges),
        }

    # candidate graphs, not stored in the repository

    @_tool
    def validate_candidate(self, graph: Candidate) -> dict[str, Any]:
        """validate a graph that is not stored in the repository."""
        return validate_graph(_candidate_graph(graph)).model_dump(mode="json", exclude_none=True)

    @_tool
    def analyze_candidate(
        self, graph: Candidate, analysis_types: list[str] | None = None
    ) -> dict[str, Any]:
        """run the selected analyses (all by default) over an unstored graph."""
        requested = list(analysis_types) if analysis_types is not None else list(ANALYSIS_TYPES)
        unknown = [name for name in requested if name not in ANALYSIS_TYPES]
        if unknown:
            raise InvalidInputError(
                f"Unknown analysis types: {', '.join(unknown)}",
                details={"supported_analysis_types": list(ANALYSIS_TYPES)},
            )

        candidate = _candidate_graph(graph)
        nodes, edges = candidate.nodes, candidate.edges
        result: dict[str, Any] = {}
        if "complexity" in requested:
            metrics = calculate_complexity_metrics(nodes, edges)
            result["complexity"] = {
                **metrics.model_dump(),
                "complexity_rating": complexity_rating(metrics.complexity_score),
            }
        if "parallel_opportunities" in requested:
            result["parallel_opportunities"] = [
                asdict(o) for o in find_parallel_opportunities(nodes, edges)
            ]
        if "critical_path" in requested:
            result["critical_path"] = asdict(critical_path_with_duration(nodes, edges))
        if "bottlenecks" in requested:
            result["bottlenecks"] = [asdict(b) for b in identify_bottlenecks(candidate)]
        return result

    @_tool
    def export_candidate(self, graph: Candidate, format: str = "json") -> dict[str, Any]:
        fmt = parse_format(format)
        return {"format": fmt.value, "content": export_document(_candidate_graph(graph), fmt)}

    @_tool
    def optimize_candidate(
        self, graph: Candidate, optimization_strategies: list[str] | None = None
    ) -> dict[str, Any]:
        """optimize an unstored graph and return the optimized copy."""
        optimized, applied = optimize_graph(_candidate_graph(graph), optimization_strategies)
        return {
            "optimized_graph": optimized.model_dump(mode="json", by_alias=True, exclude_none=True),
            "optimizations_applied": [asdict(o) for o in applied],
        }

    @_tool
    def generate_artifacts(
        self, graph: Candidate, request_description: str, artifact_types: list[str] | None = None
    ) -> dict[str, Any]:
        return generate_artifacts(_candidate_graph(graph), request_description, artifact_types)

    @_tool
    def import_generated_graph(
        self,
        generated: GeneratedGraph | dict[str, Any] | str,
        purpose: str,
        available_agents: list[AgentDefinition | dict[str, Any]],
        config: GraphConfig | dict[str, Any] | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        """store a generated candidate as a new graph.

        Raw collaborator replies are coerced first; the stored document is
        re-validated either way.
        """
        if not isinstance(generated, GeneratedGraph):
            generated = accept_generated_graph(generated, model=model)
        stored = self._create(purpose, available_agents, config)
        document = mutations.replace_graph(self.repository, stored.graph_id, generated.intent_graph)
        return {
            "graph_id": stored.graph_id,
            "status": "imported",
            "node_count": len(document.intent_graph.nodes),
            "edge_count": len(document.intent_graph.edges),
            "is_valid": document.validation.is_valid,
        }
