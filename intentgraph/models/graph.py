"""Data model for intent graph structure.

Nodes describe agent invocations, edges describe control and data flow
between them, and the execution plan is derived from both.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AgentType(str, Enum):
    """Kinds of agents a node can invoke."""

    llm = "llm"
    tool = "tool"
    api = "api"
    validator = "validator"
    transformer = "transformer"
    aggregator = "aggregator"
    router = "router"
    custom = "custom"


class NodeType(str, Enum):
    """Role of a node within the workflow."""

    entry = "entry"
    processing = "processing"
    decision = "decision"
    aggregation = "aggregation"
    exit = "exit"
    error_handler = "error_handler"


class SourceType(str, Enum):
    """Where a node input takes its value from."""

    request = "request"
    node_output = "node_output"
    context = "context"
    constant = "constant"
    environment = "environment"


class OutputDataType(str, Enum):
    """Scalar kinds a node output can declare."""

    string = "string"
    number = "number"
    boolean = "boolean"
    object = "object"
    array = "array"
    null = "null"


class ErrorStrategy(str, Enum):
    fail = "fail"
    fallback = "fallback"
    skip = "skip"
    retry = "retry"


class Priority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    critical = "critical"


class BackoffStrategy(str, Enum):
    fixed = "fixed"
    exponential = "exponential"
    linear = "linear"


class EdgeType(str, Enum):
    """How control passes along an edge."""

    sequential = "sequential"
    parallel = "parallel"
    conditional = "conditional"
    fallback = "fallback"
    retry = "retry"
    iteration = "iteration"

    @property
    def is_cyclic(self) -> bool:
        """Iteration edges declare an intentional loop back to an earlier node."""
        return self is EdgeType.iteration


class EvaluationContext(str, Enum):
    node_output = "node_output"
    global_context = "global_context"
    both = "both"


class ExecutionStrategy(str, Enum):
    sequential = "sequential"
    parallel = "parallel"
    hybrid = "hybrid"
    adaptive = "adaptive"


class ExecutionMode(str, Enum):
    all = "all"
    any = "any"
    race = "race"
    fastest_n = "fastest_n"


class InputMapping(BaseModel):
    """Describes where a node input comes from."""

    source: str
    source_type: SourceType
    source_node: str | None = None
    source_field: str | None = None
    transformation: str | None = None
    default_value: Any = None
    required: bool = True


class OutputDefinition(BaseModel):
    """A named, typed node output."""

    model_config = {"populate_by_name": True}

    name: str
    type: OutputDataType
    description: str = ""
    # "schema" would shadow a BaseModel attribute
    json_schema: dict[str, Any] | None = Field(default=None, alias="schema")


class RetryPolicy(BaseModel):
    max_attempts: int = 3
    backoff_strategy: BackoffStrategy = BackoffStrategy.exponential
    backoff_ms: int = 100


class CachePolicy(BaseModel):
    enabled: bool = False
    ttl_seconds: int = 0
    cache_key_fields: list[str] = []


class NodeConfiguration(BaseModel):
    timeout_ms: int | None = None
    retry_policy: RetryPolicy | None = None
    cache_policy: CachePolicy | None = None


class ErrorHandling(BaseModel):
    """How an executor should react when the node fails."""

    strategy: ErrorStrategy = ErrorStrategy.fail
    fallback_node: str | None = None  # must name a node in the same graph
    error_output: str | None = None


class NodeMetadata(BaseModel):
    estimated_duration_ms: float | None = None
    cost_estimate: float | None = None
    priority: Priority | None = None
    tags: list[str] | None = None


class Node(BaseModel):
    """A single agent invocation in the graph."""

    node_id: str
    agent_name: str
    agent_type: AgentType | None = None
    node_type: NodeType
    purpose: str
    inputs: dict[str, InputMapping] = {}
    outputs: list[OutputDefinition] = []
    configuration: NodeConfiguration | None = None
    error_handling: ErrorHandling | None = None
    metadata: NodeMetadata | None = None


class EdgeCondition(BaseModel):
    expression: str
    evaluation_context: EvaluationContext = EvaluationContext.node_output


class DataMapping(BaseModel):
    from_field: str
    to_field: str
    transformation: str | None = None


class Edge(BaseModel):
    """A directed edge between two nodes."""

    edge_id: str
    from_node: str
    to_node: str
    edge_type: EdgeType = EdgeType.sequential
    condition: EdgeCondition | None = None
    priority: int = 1  # tie-break when several edges leave one node
    data_mapping: dict[str, DataMapping] | None = None


class ParallelGroup(BaseModel):
    group_id: str
    nodes: list[str]
    execution_mode: ExecutionMode = ExecutionMode.all
    fastest_n: int | None = None


class IterationConfig(BaseModel):
    max_iterations: int
    convergence_criteria: str
    iteration_nodes: list[str]


class ExecutionPlan(BaseModel):
    """Derived execution summary; only execution_strategy is authored."""

    entry_points: list[str] = []
    exit_points: list[str] = []
    execution_strategy: ExecutionStrategy = ExecutionStrategy.sequential
    parallel_groups: list[ParallelGroup] = []
    critical_path: list[str] = []
    total_estimated_steps: int = 0
    max_parallel_nodes: int = 1
    iteration_config: IterationConfig | None = None


class IntentGraph(BaseModel):
    """The full graph structure: nodes, edges and the derived plan."""

    nodes: list[Node] = []
    edges: list[Edge] = []
    execution_plan: ExecutionPlan = Field(default_factory=ExecutionPlan)

    def node_ids(self) -> set[str]:
        return {node.node_id for node in self.nodes}

    def find_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None

    def find_edge(self, edge_id: str) -> Edge | None:
        for edge in self.edges:
            if edge.edge_id == edge_id:
                return edge
        return None
