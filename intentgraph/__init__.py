"""Intent graph engine - build, validate, analyze and export agent workflow graphs."""

from intentgraph.errors import ErrorCode, IntentGraphError
from intentgraph.generation import GeneratedGraph, accept_generated_graph, coerce_intent_graph
from intentgraph.models.agent import AgentDefinition, EdgeSpec, EdgeUpdate, GraphConfig, NodeSpec, NodeUpdate
from intentgraph.models.document import IntentGraphDocument, ValidationResult
from intentgraph.models.graph import Edge, IntentGraph, Node
from intentgraph.models.responses import ToolError, ToolResponse, ToolSuccess
from intentgraph.repository import GraphRepository
from intentgraph.serializers import ExportFormat, export_document
from intentgraph.service import IntentGraphService
from intentgraph.validation.validator import validate_graph

__all__ = [
    # Graph structure
    "Edge",
    "IntentGraph",
    "IntentGraphDocument",
    "Node",
    "ValidationResult",
    # Caller specs
    "AgentDefinition",
    "EdgeSpec",
    "EdgeUpdate",
    "GraphConfig",
    "NodeSpec",
    "NodeUpdate",
    # Errors and results
    "ErrorCode",
    "IntentGraphError",
    "ToolError",
    "ToolResponse",
    "ToolSuccess",
    # High-level APIs
    "ExportFormat",
    "GeneratedGraph",
    "GraphRepository",
    "IntentGraphService",
    "accept_generated_graph",
    "coerce_intent_graph",
    "export_document",
    "validate_graph",
]
