"""Accepting graphs proposed by a generation collaborator.

The model call itself lives outside this package. What arrives here is the
collaborator's raw reply: a JSON string, possibly wrapped in a markdown
code fence, or an already decoded mapping. It is coerced into a canonical
IntentGraph and always re-validated locally; anything the reply claims
about its own validity is ignored.

generate_artifacts() builds the explanation that travels with a graph.
"""

import json
import re
from dataclasses import asdict
from typing import Any

from pydantic import BaseModel, ValidationError

from intentgraph.analysis.optimization import optimize_graph
from intentgraph.errors import InvalidInputError
from intentgraph.models.document import ValidationResult
from intentgraph.models.graph import IntentGraph
from intentgraph.utils.identifiers import utc_timestamp
from intentgraph.utils.logging import get_logger
from intentgraph.validation.validator import validate_graph

log = get_logger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.IGNORECASE | re.DOTALL)

ARTIFACT_TYPES = ("reasoning", "alternatives", "optimizations")

# passes that only report; the graph itself is returned unchanged
REPORTED_OPTIMIZATIONS = ("parallelize", "reduce_latency", "minimize_cost")

ALTERNATIVE_APPROACHES = [
    {"approach": "sequential", "description": "Fully sequential execution (lower complexity, higher latency)"},
    {"approach": "parallel", "description": "Maximum parallelization (higher complexity, lower latency)"},
    {"approach": "hybrid", "description": "Hybrid approach with conditional branches (balanced)"},
]


class GenerationMetadata(BaseModel):
    generation_timestamp: str
    llm_model_used: str | None = None
    complexity_score: float | None = None
    estimated_execution_time_ms: float | None = None
    estimated_cost: float | None = None


class GeneratedGraph(BaseModel):
    """A candidate graph with locally recomputed validation."""

    intent_graph: IntentGraph
    metadata: GenerationMetadata
    artifacts: dict[str, Any] | None = None
    validation: ValidationResult


def extract_json_payload(text: str) -> str:
    """Strip a surrounding markdown code fence, if any."""
    text = text.strip()
    match = _FENCED.search(text)
    if match:
        return match.group(1).strip()
    return text


def _number(value: Any) -> float | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _decode(raw: str | dict[str, Any]) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    try:
        decoded = json.loads(extract_json_payload(raw))
    except json.JSONDecodeError as exc:
        log.warning("generated_graph_unparsable", error=str(exc))
        return {}
    if not isinstance(decoded, dict):
        log.warning("generated_graph_unparsable", error="top-level value is not an object")
        return {}
    return decoded


def _graph_payload(decoded: dict[str, Any]) -> dict[str, Any] | None:
    wrapped = decoded.get("intent_graph")
    if isinstance(wrapped, dict):
        return wrapped
    if all(decoded.get(key) is not None for key in ("nodes", "edges", "execution_plan")):
        return {
            "nodes": decoded["nodes"],
            "edges": decoded["edges"],
            "execution_plan": decoded["execution_plan"],
        }
    return None


def coerce_intent_graph(raw: str | dict[str, Any]) -> IntentGraph:
    """Best-effort conversion of a collaborator reply into an IntentGraph.

    Accepts ``{"intent_graph": {...}}`` or a top-level
    ``{"nodes": [...], "edges": [...], "execution_plan": {...}}``.
    Anything else degrades to an empty graph, which the validator will
    then report as missing its entry and exit points.
    """
    payload = _graph_payload(_decode(raw))
    if payload is None:
        log.warning("generated_graph_missing", reason="no intent_graph or nodes/edges/execution_plan")
        return IntentGraph()
    try:
        return IntentGraph.model_validate(payload)
    except ValidationError as exc:
        log.warning("generated_graph_malformed", error_count=exc.error_count())
        return IntentGraph()


def accept_generated_graph(raw: str | dict[str, Any], model: str | None = None) -> GeneratedGraph:
    """Coerce a collaborator reply and attach fresh validation."""
    decoded = _decode(raw)
    graph = coerce_intent_graph(decoded)

    claimed = decoded.get("metadata")
    claimed = claimed if isinstance(claimed, dict) else {}
    artifacts = decoded.get("artifacts")

    generated = GeneratedGraph(
        intent_graph=graph,
        metadata=GenerationMetadata(
            generation_timestamp=utc_timestamp(),
            llm_model_used=model,
            complexity_score=_number(claimed.get("complexity_score")),
            estimated_execution_time_ms=_number(claimed.get("estimated_execution_time_ms")),
            estimated_cost=_number(claimed.get("estimated_cost")),
        ),
        artifacts=artifacts if isinstance(artifacts, dict) else None,
        validation=validate_graph(graph),
    )
    log.info(
        "generated_graph_accepted",
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
        is_valid=generated.validation.is_valid,
    )
    return generated


def _reasoning(graph: IntentGraph, request_description: str) -> str:
    flow = "\n".join(
        f"{idx}. {node.agent_name} ({node.node_type.value}): {node.purpose}"
        for idx, node in enumerate(graph.nodes, 1)
    )
    return (
        f'Graph generated for: "{request_description}"\n\n'
        f"Agents used: {', '.join(node.agent_name for node in graph.nodes)}\n\n"
        f"Flow:\n{flow}\n\n"
        f"The graph fulfills the request with a {len(graph.nodes)}-node workflow "
        f"and {len(graph.edges)} connections."
    )


def generate_artifacts(
    graph: IntentGraph, request_description: str, artifact_types: list[str] | None = None
) -> dict[str, Any]:
    """Explanatory artifacts to ship alongside a graph.

    reasoning walks the nodes in order, alternatives lists the execution
    approaches that were available, and optimizations reports what the
    read-only optimization passes find on the graph as it stands.

    Raises:
        InvalidInputError: an unknown artifact type.
    """
    requested = list(artifact_types) if artifact_types is not None else list(ARTIFACT_TYPES)
    unknown = [name for name in requested if name not in ARTIFACT_TYPES]
    if unknown:
        raise InvalidInputError(
            f"Unknown artifact types: {', '.join(unknown)}",
            details={"supported_artifact_types": list(ARTIFACT_TYPES)},
        )

    artifacts: dict[str, Any] = {}
    if "reasoning" in requested:
        artifacts["reasoning"] = _reasoning(graph, request_description)
    if "alternatives" in requested:
        artifacts["alternatives"] = [dict(a) for a in ALTERNATIVE_APPROACHES]
    if "optimizations" in requested:
        _, found = optimize_graph(graph, list(REPORTED_OPTIMIZATIONS))
        artifacts["optimizations"] = [asdict(o) for o in found]
    return artifacts
