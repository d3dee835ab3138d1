"""Deterministic renderers for graph documents.

All renderers walk nodes and edges in stored (insertion) order, so exporting
an unchanged document twice yields identical text. Each accepts either a
full IntentGraphDocument or a bare IntentGraph.
"""

import json
import re
from enum import Enum
from typing import Any

import yaml

from intentgraph.analysis.complexity import calculate_complexity_metrics
from intentgraph.errors import InvalidFormatError
from intentgraph.models.document import IntentGraphDocument
from intentgraph.models.graph import EdgeType, IntentGraph, NodeType


class ExportFormat(str, Enum):
    json = "json"
    yaml = "yaml"
    dot = "dot"
    mermaid = "mermaid"


Exportable = IntentGraphDocument | IntentGraph


def _payload(source: Exportable) -> dict[str, Any]:
    return source.model_dump(mode="json", by_alias=True, exclude_none=True)


def _graph_of(source: Exportable) -> IntentGraph:
    if isinstance(source, IntentGraphDocument):
        return source.intent_graph
    return source


def render_json(source: Exportable) -> str:
    """Canonical structural dump; parses back into an equal model."""
    return json.dumps(_payload(source), indent=2, ensure_ascii=False)


def render_yaml(source: Exportable) -> str:
    """Key/value projection of the JSON payload, keys in model order."""
    return yaml.safe_dump(
        _payload(source),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def _dot_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_dot(source: Exportable) -> str:
    """GraphViz digraph: parallel edges dashed, every edge labeled with its type."""
    graph = _graph_of(source)
    lines = [
        "digraph IntentGraph {",
        "  rankdir=LR;",
        "  node [shape=box, style=rounded];",
        "",
    ]
    for node in graph.nodes:
        label = f"{_dot_escape(node.agent_name)}\\n({node.node_type.value})"
        lines.append(f'  "{_dot_escape(node.node_id)}" [label="{label}"];')

    lines.append("")
    for edge in graph.edges:
        style = "dashed" if edge.edge_type == EdgeType.parallel else "solid"
        lines.append(
            f'  "{_dot_escape(edge.from_node)}" -> "{_dot_escape(edge.to_node)}" '
            f'[style={style}, label="{edge.edge_type.value}"];'
        )
    lines.append("}")
    return "\n".join(lines) + "\n"


_MERMAID_SHAPES = {
    NodeType.entry: ("([", "])"),
    NodeType.exit: ("([", "])"),
    NodeType.decision: ("{", "}"),
}


def _mermaid_id(node_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", node_id)


def render_mermaid(
    source: Exportable,
    direction: str = "LR",
    include_metadata: bool = False,
) -> str:
    """Mermaid flowchart.

    Entry and exit nodes are stadiums, decisions are diamonds, everything
    else is a rectangle. Parallel edges are dotted.
    """
    graph = _graph_of(source)
    lines = [f"flowchart {direction}"]

    for node in graph.nodes:
        opening, closing = _MERMAID_SHAPES.get(node.node_type, ("[", "]"))
        label = f"{node.agent_name}<br/>{node.node_type.value}".replace('"', "#quot;")
        lines.append(f'  {_mermaid_id(node.node_id)}{opening}"{label}"{closing}')

    for edge in graph.edges:
        arrow = "-.->" if edge.edge_type == EdgeType.parallel else "-->"
        lines.append(
            f"  {_mermaid_id(edge.from_node)} {arrow}|{edge.edge_type.value}| "
            f"{_mermaid_id(edge.to_node)}"
        )

    if include_metadata:
        metrics = calculate_complexity_metrics(graph.nodes, graph.edges)
        lines.append("")
        lines.append("%% Metadata")
        lines.append(f"%% Nodes: {metrics.node_count}")
        lines.append(f"%% Edges: {metrics.edge_count}")
        lines.append(f"%% Complexity: {metrics.complexity_score}")

    return "\n".join(lines) + "\n"


_RENDERERS = {
    ExportFormat.json: render_json,
    ExportFormat.yaml: render_yaml,
    ExportFormat.dot: render_dot,
    ExportFormat.mermaid: render_mermaid,
}


def parse_format(value: ExportFormat | str) -> ExportFormat:
    """Resolve a format name, raising InvalidFormatError outside the closed set."""
    try:
        return ExportFormat(value)
    except ValueError:
        raise InvalidFormatError(
            f"Unsupported export format: {value}",
            details={"supported_formats": [f.value for f in ExportFormat]},
        ) from None


def export_document(source: Exportable, fmt: ExportFormat | str = ExportFormat.json) -> str:
    """Render a document or graph in one of the supported formats."""
    return _RENDERERS[parse_format(fmt)](source)
