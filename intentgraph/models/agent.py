"""Caller-facing models: agent catalog entries, graph config, node and edge specs."""

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field, field_validator

from intentgraph import config
from intentgraph.models.graph import (
    AgentType,
    DataMapping,
    EdgeCondition,
    EdgeType,
    ErrorHandling,
    ErrorStrategy,
    ExecutionStrategy,
    InputMapping,
    NodeConfiguration,
    NodeMetadata,
    NodeType,
    OutputDataType,
    OutputDefinition,
)
from intentgraph.utils.logging import get_logger

log = get_logger(__name__)

E = TypeVar("E", bound=Enum)


class AgentDefinition(BaseModel):
    """An agent the graph may invoke.

    output_schema maps output field names to scalar kinds. Unknown kinds
    are rejected here, when the catalog is registered, so node creation
    can always derive typed outputs.
    """

    name: str
    type: AgentType
    description: str | None = None
    capabilities: list[str] = []
    input_schema: dict[str, Any] = {}
    output_schema: dict[str, OutputDataType] = {}

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("agent name must be a non-empty string")
        return value

    def default_outputs(self) -> list[OutputDefinition]:
        """Typed outputs derived from output_schema, or a generic result."""
        if not self.output_schema:
            return [
                OutputDefinition(
                    name="result",
                    type=OutputDataType.object,
                    description="Agent execution result",
                )
            ]
        return [
            OutputDefinition(name=name, type=kind, description=f"Output field: {name}")
            for name, kind in self.output_schema.items()
        ]


def _setting(enum_cls: type[E], raw: str, fallback: E) -> E:
    """Enum value of a configured default, or fallback when it is not a member."""
    try:
        return enum_cls(raw)
    except ValueError:
        log.warning("invalid_config_default", setting=enum_cls.__name__, value=raw, fallback=fallback.value)
        return fallback


def _default_execution_mode() -> ExecutionStrategy:
    return _setting(ExecutionStrategy, config.DEFAULT_EXECUTION_STRATEGY, ExecutionStrategy.sequential)


def _default_error_handling() -> ErrorStrategy:
    return _setting(ErrorStrategy, config.DEFAULT_ERROR_STRATEGY, ErrorStrategy.fail)


class GraphConfig(BaseModel):
    # defaults are read when a config is built, not when this module is imported
    execution_mode: ExecutionStrategy = Field(default_factory=_default_execution_mode)
    error_handling: ErrorStrategy = Field(default_factory=_default_error_handling)
    iteration_count: int = 1


class NodeSpec(BaseModel):
    """request body for add_node."""

    node_type: NodeType
    purpose: str
    inputs: dict[str, InputMapping] | None = None
    outputs: list[OutputDefinition] | None = None
    configuration: NodeConfiguration | None = None
    error_handling: ErrorHandling | None = None
    metadata: NodeMetadata | None = None


class NodeUpdate(BaseModel):
    """request body for update_node. Only set fields are applied."""

    node_type: NodeType | None = None
    purpose: str | None = None
    inputs: dict[str, InputMapping] | None = None
    outputs: list[OutputDefinition] | None = None
    configuration: NodeConfiguration | None = None
    error_handling: ErrorHandling | None = None
    metadata: NodeMetadata | None = None


class EdgeSpec(BaseModel):
    """request body for add_edge."""

    edge_type: EdgeType = EdgeType.sequential
    condition: EdgeCondition | None = None
    priority: int = 1
    data_mapping: dict[str, DataMapping] | None = None


class EdgeUpdate(BaseModel):
    """request body for update_edge. Only set fields are applied."""

    edge_type: EdgeType | None = None
    condition: EdgeCondition | None = None
    priority: int | None = None
    data_mapping: dict[str, DataMapping] | None = None
