"""Graph document: the unit of storage.

A document wraps the intent graph with derived metadata and the last
validation report. Both are recomputed after every mutation.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from intentgraph.models.graph import IntentGraph


class ComplexityMetrics(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    depth: int = 0
    width: int = 0
    complexity_score: int = 0
    cyclomatic_complexity: int = 1


class ResourceEstimates(BaseModel):
    estimated_duration_ms: float = 0
    estimated_cost: float = 0
    estimated_tokens: int = 0
    estimated_api_calls: int = 0


class GraphWarning(BaseModel):
    """a non-fatal issue surfaced on the document metadata."""

    severity: Literal["low", "medium", "high"]
    message: str
    node_id: str | None = None


class GraphMetadata(BaseModel):
    graph_id: str
    version: str
    created_at: str
    agent_purpose: str | None = None
    complexity_metrics: ComplexityMetrics = Field(default_factory=ComplexityMetrics)
    resource_estimates: ResourceEstimates = Field(default_factory=ResourceEstimates)
    optimization_notes: list[str] = []
    warnings: list[GraphWarning] = []


class ValidationCheck(BaseModel):
    """Outcome of one named structural check."""

    check_name: str
    passed: bool
    message: str
    details: dict[str, Any] | None = None


class ValidationResult(BaseModel):
    is_valid: bool
    checks_performed: list[ValidationCheck] = []
    validation_timestamp: str | None = None

    def failed_checks(self) -> list[ValidationCheck]:
        return [check for check in self.checks_performed if not check.passed]


class IntentGraphDocument(BaseModel):
    """The persisted form of a graph: structure, metadata and validation."""

    intent_graph: IntentGraph = Field(default_factory=IntentGraph)
    metadata: GraphMetadata
    validation: ValidationResult = Field(
        default_factory=lambda: ValidationResult(is_valid=True)
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-compatible dict in wire format, unset optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
