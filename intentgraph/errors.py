"""Error codes and exceptions raised by the graph engine.

Repository and mutation functions raise these; the service layer turns
them into ToolError results so nothing escapes a public operation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Codes reported to callers in ToolError.error.code."""

    graph_not_found = "GRAPH_NOT_FOUND"
    node_not_found = "NODE_NOT_FOUND"
    edge_not_found = "EDGE_NOT_FOUND"
    agent_not_found = "AGENT_NOT_FOUND"
    invalid_purpose = "INVALID_PURPOSE"
    invalid_agents = "INVALID_AGENTS"
    invalid_format = "INVALID_FORMAT"
    invalid_input = "INVALID_INPUT"
    internal_error = "INTERNAL_ERROR"


class IntentGraphError(Exception):
    """Base class for errors that map onto a caller-visible error code."""

    code: ErrorCode = ErrorCode.internal_error

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(IntentGraphError):
    """A referenced graph, node, edge or agent does not exist."""


class GraphNotFoundError(NotFoundError):
    code = ErrorCode.graph_not_found

    def __init__(self, graph_id: str) -> None:
        super().__init__(f"Graph with ID '{graph_id}' not found")
        self.graph_id = graph_id


class NodeNotFoundError(NotFoundError):
    code = ErrorCode.node_not_found


class EdgeNotFoundError(NotFoundError):
    code = ErrorCode.edge_not_found

    def __init__(self, edge_id: str) -> None:
        super().__init__(f"Edge with ID '{edge_id}' not found in graph")
        self.edge_id = edge_id


class AgentNotFoundError(NotFoundError):
    code = ErrorCode.agent_not_found


class PreconditionError(IntentGraphError):
    """The caller supplied input that must be corrected before retrying."""


class InvalidPurposeError(PreconditionError):
    code = ErrorCode.invalid_purpose


class InvalidAgentsError(PreconditionError):
    code = ErrorCode.invalid_agents


class InvalidFormatError(PreconditionError):
    code = ErrorCode.invalid_format


class InvalidInputError(PreconditionError):
    code = ErrorCode.invalid_input
