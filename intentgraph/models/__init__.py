"""Core data models for intent graphs."""

from intentgraph.models.agent import (
    AgentDefinition,
    EdgeSpec,
    EdgeUpdate,
    GraphConfig,
    NodeSpec,
    NodeUpdate,
)
from intentgraph.models.document import (
    ComplexityMetrics,
    GraphMetadata,
    GraphWarning,
    IntentGraphDocument,
    ResourceEstimates,
    ValidationCheck,
    ValidationResult,
)
from intentgraph.models.graph import (
    AgentType,
    BackoffStrategy,
    CachePolicy,
    DataMapping,
    Edge,
    EdgeCondition,
    EdgeType,
    ErrorHandling,
    ErrorStrategy,
    EvaluationContext,
    ExecutionMode,
    ExecutionPlan,
    ExecutionStrategy,
    InputMapping,
    IntentGraph,
    IterationConfig,
    Node,
    NodeConfiguration,
    NodeMetadata,
    NodeType,
    OutputDataType,
    OutputDefinition,
    ParallelGroup,
    Priority,
    RetryPolicy,
    SourceType,
)
from intentgraph.models.responses import ErrorDetail, ToolError, ToolResponse, ToolSuccess
from intentgraph.models.stored import GraphSummary, StoredGraph

__all__ = [
    # Enumerations
    "AgentType",
    "BackoffStrategy",
    "EdgeType",
    "ErrorStrategy",
    "EvaluationContext",
    "ExecutionMode",
    "ExecutionStrategy",
    "NodeType",
    "OutputDataType",
    "Priority",
    "SourceType",
    # Graph structure
    "CachePolicy",
    "DataMapping",
    "Edge",
    "EdgeCondition",
    "ErrorHandling",
    "ExecutionPlan",
    "InputMapping",
    "IntentGraph",
    "IterationConfig",
    "Node",
    "NodeConfiguration",
    "NodeMetadata",
    "OutputDefinition",
    "ParallelGroup",
    "RetryPolicy",
    # Document
    "ComplexityMetrics",
    "GraphMetadata",
    "GraphWarning",
    "IntentGraphDocument",
    "ResourceEstimates",
    "ValidationCheck",
    "ValidationResult",
    # Caller specs
    "AgentDefinition",
    "EdgeSpec",
    "EdgeUpdate",
    "GraphConfig",
    "NodeSpec",
    "NodeUpdate",
    # Repository
    "GraphSummary",
    "StoredGraph",
    # Results
    "ErrorDetail",
    "ToolError",
    "ToolResponse",
    "ToolSuccess",
]
