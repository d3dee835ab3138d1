"""Tests for the in-memory graph repository."""

import threading

import pytest

from intentgraph import config
from intentgraph.errors import GraphNotFoundError, InvalidAgentsError, InvalidPurposeError
from intentgraph.models import AgentDefinition, AgentType, ExecutionStrategy, GraphConfig
from intentgraph.repository import GraphRepository

AGENTS = [AgentDefinition(name="Planner", type=AgentType.llm)]


class TestCreate:
    """Test graph creation."""

    def test_create_initializes_empty_document(self):
        """A new graph starts empty with metadata already computed."""
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)

        document = stored.document
        assert document.intent_graph.nodes == []
        assert document.intent_graph.edges == []
        assert document.metadata.graph_id == stored.graph_id
        assert document.metadata.version == config.SCHEMA_VERSION
        assert document.metadata.agent_purpose == "Plan a trip"
        assert document.metadata.complexity_metrics.node_count == 0
        assert document.metadata.complexity_metrics.complexity_score == 10

    def test_empty_graph_reports_missing_entry_and_exit(self):
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)

        validation = stored.document.validation
        assert validation.is_valid is False
        failed = [check.check_name for check in validation.failed_checks()]
        assert failed == ["entry_exit_points"]
        assert stored.document.metadata.warnings[0].severity == "high"

    def test_create_uses_config_execution_mode(self):
        repo = GraphRepository()
        stored = repo.create(
            "Plan a trip", AGENTS, GraphConfig(execution_mode=ExecutionStrategy.hybrid)
        )
        assert stored.document.intent_graph.execution_plan.execution_strategy == ExecutionStrategy.hybrid

    @pytest.mark.parametrize("purpose", ["", "   "])
    def test_blank_purpose_rejected(self, purpose):
        repo = GraphRepository()
        with pytest.raises(InvalidPurposeError):
            repo.create(purpose, AGENTS)
        assert repo.count() == 0

    def test_empty_agents_rejected(self):
        repo = GraphRepository()
        with pytest.raises(InvalidAgentsError):
            repo.create("Plan a trip", [])
        assert repo.count() == 0


class TestLookupAndLifecycle:
    """Test get/require/update/delete/list/clear."""

    def test_get_unknown_returns_none(self):
        assert GraphRepository().get("graph_missing") is None

    def test_require_unknown_raises(self):
        with pytest.raises(GraphNotFoundError) as exc_info:
            GraphRepository().require("graph_missing")
        assert exc_info.value.code.value == "GRAPH_NOT_FOUND"

    def test_update_stamps_updated_at(self):
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)
        document = stored.document.model_copy(deep=True)
        stored.updated_at = "2000-01-01T00:00:00+00:00"

        assert repo.update(stored.graph_id, document) is True
        assert repo.get(stored.graph_id).updated_at != "2000-01-01T00:00:00+00:00"
        assert repo.update("graph_missing", document) is False

    def test_delete(self):
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)

        assert repo.delete(stored.graph_id) is True
        assert repo.delete(stored.graph_id) is False
        assert repo.get(stored.graph_id) is None

    def test_list_in_creation_order(self):
        repo = GraphRepository()
        first = repo.create("First", AGENTS)
        second = repo.create("Second", AGENTS)

        summaries = repo.list()
        assert [s.graph_id for s in summaries] == [first.graph_id, second.graph_id]
        assert summaries[0].purpose == "First"
        assert summaries[0].node_count == 0
        assert repo.count() == 2

    def test_clear_does_not_reuse_ids(self):
        """Graph ids keep counting after clear()."""
        repo = GraphRepository()
        before = repo.create("First", AGENTS).graph_id
        repo.clear()
        after = repo.create("Second", AGENTS).graph_id

        assert repo.count() == 1
        assert before != after
        assert after.endswith("_002")

    def test_repositories_are_independent(self):
        first, second = GraphRepository(), GraphRepository()
        stored = first.create("Only here", AGENTS)
        assert second.get(stored.graph_id) is None


class TestLocking:
    """Test the per-graph write lock."""

    def test_lock_is_reentrant(self):
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)
        with repo.lock(stored.graph_id):
            with repo.lock(stored.graph_id):
                assert repo.require(stored.graph_id) is stored

    def test_lock_blocks_other_threads(self):
        """A second thread waits while the lock is held."""
        repo = GraphRepository()
        stored = repo.create("Plan a trip", AGENTS)
        acquired = threading.Event()

        def contender():
            with repo.lock(stored.graph_id):
                acquired.set()

        with repo.lock(stored.graph_id):
            worker = threading.Thread(target=contender)
            worker.start()
            assert not acquired.wait(timeout=0.1)
        worker.join(timeout=2)
        assert acquired.is_set()
