"""Tests for model validation and serialization."""

import json

import pytest
from pydantic import ValidationError

from intentgraph import config
from intentgraph.models import (
    AgentDefinition,
    AgentType,
    Edge,
    EdgeType,
    ErrorStrategy,
    ExecutionStrategy,
    GraphConfig,
    GraphMetadata,
    IntentGraph,
    IntentGraphDocument,
    Node,
    NodeType,
    OutputDataType,
    OutputDefinition,
    ToolError,
    ToolSuccess,
)


class TestAgentDefinition:
    """Test agent catalog entries."""

    def test_default_outputs_from_schema(self):
        """Declared output fields should become typed outputs in order."""
        agent = AgentDefinition(
            name="Summarizer",
            type=AgentType.llm,
            output_schema={"summary": "string", "score": "number"},
        )
        outputs = agent.default_outputs()

        assert [o.name for o in outputs] == ["summary", "score"]
        assert outputs[0].type == OutputDataType.string
        assert outputs[1].type == OutputDataType.number
        assert outputs[0].description == "Output field: summary"

    def test_default_outputs_without_schema(self):
        """An empty schema should yield a single generic result output."""
        agent = AgentDefinition(name="Fetcher", type=AgentType.api)
        outputs = agent.default_outputs()

        assert len(outputs) == 1
        assert outputs[0].name == "result"
        assert outputs[0].type == OutputDataType.object
        assert outputs[0].description == "Agent execution result"

    def test_unknown_scalar_kind_rejected(self):
        """Unknown output kinds are rejected when the agent is declared."""
        with pytest.raises(ValidationError) as exc_info:
            AgentDefinition(name="Odd", type=AgentType.tool, output_schema={"x": "decimal"})
        assert "output_schema" in str(exc_info.value)

    def test_blank_name_rejected(self):
        """Agent names must not be blank."""
        with pytest.raises(ValidationError):
            AgentDefinition(name="   ", type=AgentType.tool)

    def test_unknown_agent_type_rejected(self):
        with pytest.raises(ValidationError):
            AgentDefinition(name="Agent", type="robot")


class TestEdgeType:
    """Test the edge type enumeration."""

    def test_only_iteration_is_cyclic(self):
        """Only iteration edges declare an intentional loop."""
        cyclic = [edge_type for edge_type in EdgeType if edge_type.is_cyclic]
        assert cyclic == [EdgeType.iteration]

    def test_edge_defaults(self):
        """Edges default to sequential with priority 1."""
        edge = Edge(edge_id="e1", from_node="a", to_node="b")
        assert edge.edge_type == EdgeType.sequential
        assert edge.priority == 1


class TestOutputDefinition:
    """Test the schema alias on node outputs."""

    def test_schema_alias_round_trip(self):
        """The wire name 'schema' should map onto json_schema and back."""
        output = OutputDefinition.model_validate(
            {"name": "rows", "type": "array", "schema": {"items": {"type": "object"}}}
        )
        assert output.json_schema == {"items": {"type": "object"}}

        dumped = output.model_dump(by_alias=True, exclude_none=True)
        assert dumped["schema"] == {"items": {"type": "object"}}
        assert "json_schema" not in dumped


class TestDocumentRoundTrip:
    """Test IntentGraphDocument serialization."""

    def test_document_round_trip(self):
        """A document should survive a JSON dump and reparse unchanged."""
        document = IntentGraphDocument(
            intent_graph=IntentGraph(
                nodes=[
                    Node(node_id="a", agent_name="A", node_type=NodeType.entry, purpose="start"),
                    Node(node_id="b", agent_name="B", node_type=NodeType.exit, purpose="end"),
                ],
                edges=[Edge(edge_id="e1", from_node="a", to_node="b")],
            ),
            metadata=GraphMetadata(graph_id="g1", version="1.0.0", created_at="2024-01-01T00:00:00+00:00"),
        )
        restored = IntentGraphDocument.model_validate_json(json.dumps(document.to_payload()))
        assert restored == document

    def test_payload_omits_unset_optionals(self):
        """Unset optional fields should not appear in the payload."""
        document = IntentGraphDocument(
            intent_graph=IntentGraph(
                nodes=[Node(node_id="a", agent_name="A", node_type=NodeType.entry, purpose="p")]
            ),
            metadata=GraphMetadata(graph_id="g1", version="1.0.0", created_at="now"),
        )
        node_payload = document.to_payload()["intent_graph"]["nodes"][0]
        assert "configuration" not in node_payload
        assert "error_handling" not in node_payload


class TestToolResponses:
    """Test tagged result values."""

    def test_success_is_tagged(self):
        assert ToolSuccess(result={"x": 1}).model_dump() == {"success": True, "result": {"x": 1}}

    def test_error_is_tagged(self):
        error = ToolError.model_validate(
            {"error": {"code": "GRAPH_NOT_FOUND", "message": "missing"}}
        )
        assert error.success is False
        assert error.error.code == "GRAPH_NOT_FOUND"
        assert error.error.details is None


class TestGraphConfig:
    """Test environment-driven GraphConfig defaults."""

    def test_defaults_follow_settings(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_EXECUTION_STRATEGY", "parallel")
        monkeypatch.setattr(config, "DEFAULT_ERROR_STRATEGY", "retry")

        graph_config = GraphConfig()

        assert graph_config.execution_mode == ExecutionStrategy.parallel
        assert graph_config.error_handling == ErrorStrategy.retry

    def test_unknown_setting_falls_back(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_EXECUTION_STRATEGY", "sideways")
        monkeypatch.setattr(config, "DEFAULT_ERROR_STRATEGY", "explode")

        graph_config = GraphConfig()

        assert graph_config.execution_mode == ExecutionStrategy.sequential
        assert graph_config.error_handling == ErrorStrategy.fail

    def test_explicit_values_still_validated(self):
        with pytest.raises(ValidationError):
            GraphConfig(execution_mode="sideways")
