"""Tests for incremental node and edge mutations."""

import threading

import pytest

from intentgraph import mutations
from intentgraph.errors import AgentNotFoundError, EdgeNotFoundError, GraphNotFoundError, NodeNotFoundError
from intentgraph.models import (
    AgentDefinition,
    AgentType,
    DataMapping,
    EdgeCondition,
    EdgeSpec,
    EdgeType,
    EdgeUpdate,
    ErrorHandling,
    ErrorStrategy,
    InputMapping,
    IntentGraph,
    NodeConfiguration,
    NodeSpec,
    NodeType,
    NodeUpdate,
    RetryPolicy,
    SourceType,
)
from intentgraph.repository import GraphRepository

AGENTS = [
    AgentDefinition(name="Intake", type=AgentType.tool),
    AgentDefinition(
        name="Analyst",
        type=AgentType.llm,
        output_schema={"summary": "string", "confidence": "number"},
    ),
    AgentDefinition(name="Reporter", type=AgentType.api),
]


class TestNodes:
    """Test add/update/remove node."""

    def setup_method(self):
        self.repo = GraphRepository()
        self.graph_id = self.repo.create("Analyze reports", AGENTS).graph_id

    def _graph(self) -> IntentGraph:
        return self.repo.require(self.graph_id).document.intent_graph

    def test_add_node_defaults_outputs_from_agent(self):
        node = mutations.add_node(
            self.repo, self.graph_id, "Analyst", NodeSpec(node_type=NodeType.processing, purpose="analyze")
        )

        assert node.node_id.startswith("node_analyst_")
        assert node.agent_type == AgentType.llm
        assert [o.name for o in node.outputs] == ["summary", "confidence"]
        assert self._graph().nodes == [node]

    def test_add_node_refreshes_metadata(self):
        mutations.add_node(self.repo, self.graph_id, "Intake", NodeSpec(node_type=NodeType.entry, purpose="in"))
        document = self.repo.require(self.graph_id).document

        assert document.metadata.complexity_metrics.node_count == 1
        assert document.metadata.resource_estimates.estimated_api_calls == 0
        assert document.intent_graph.execution_plan.entry_points == [document.intent_graph.nodes[0].node_id]
        assert document.intent_graph.execution_plan.total_estimated_steps == 1

    def test_add_node_unknown_agent(self):
        """Unknown agents are rejected and the graph stays unchanged."""
        with pytest.raises(AgentNotFoundError) as exc_info:
            mutations.add_node(
                self.repo, self.graph_id, "Ghost", NodeSpec(node_type=NodeType.processing, purpose="x")
            )
        assert exc_info.value.details == {"available_agents": ["Intake", "Analyst", "Reporter"]}
        assert self._graph().nodes == []

    def test_add_node_unknown_graph(self):
        with pytest.raises(GraphNotFoundError):
            mutations.add_node(
                self.repo, "graph_missing", "Intake", NodeSpec(node_type=NodeType.entry, purpose="x")
            )

    def test_node_ids_are_distinct(self):
        spec = NodeSpec(node_type=NodeType.processing, purpose="same")
        ids = {mutations.add_node(self.repo, self.graph_id, "Analyst", spec).node_id for _ in range(20)}
        assert len(ids) == 20

    def test_update_node_merges(self):
        """Scalars replace, inputs merge by key, sub-records merge by field."""
        node = mutations.add_node(
            self.repo,
            self.graph_id,
            "Analyst",
            NodeSpec(
                node_type=NodeType.processing,
                purpose="analyze",
                inputs={"doc": InputMapping(source="request.doc", source_type=SourceType.request)},
                configuration=NodeConfiguration(timeout_ms=1000, retry_policy=RetryPolicy()),
            ),
        )

        updated = mutations.update_node(
            self.repo,
            self.graph_id,
            node.node_id,
            NodeUpdate(
                purpose="analyze deeply",
                inputs={"lang": InputMapping(source="en", source_type=SourceType.constant)},
                configuration=NodeConfiguration(timeout_ms=5000),
                error_handling=ErrorHandling(strategy=ErrorStrategy.retry),
            ),
        )

        assert updated.purpose == "analyze deeply"
        assert updated.node_type == NodeType.processing
        assert set(updated.inputs) == {"doc", "lang"}
        assert updated.configuration.timeout_ms == 5000
        assert updated.configuration.retry_policy == RetryPolicy()
        assert updated.error_handling.strategy == ErrorStrategy.retry
        assert self._graph().find_node(node.node_id) == updated

    def test_update_unknown_node(self):
        with pytest.raises(NodeNotFoundError):
            mutations.update_node(self.repo, self.graph_id, "node_missing", NodeUpdate(purpose="x"))

    def test_remove_node_cascades_edges(self):
        """Removing a node removes exactly the edges touching it."""
        spec = NodeSpec(node_type=NodeType.processing, purpose="p")
        a = mutations.add_node(self.repo, self.graph_id, "Intake", spec)
        b = mutations.add_node(self.repo, self.graph_id, "Analyst", spec)
        c = mutations.add_node(self.repo, self.graph_id, "Reporter", spec)
        ab = mutations.add_edge(self.repo, self.graph_id, a.node_id, b.node_id)
        bc = mutations.add_edge(self.repo, self.graph_id, b.node_id, c.node_id)
        ac = mutations.add_edge(self.repo, self.graph_id, a.node_id, c.node_id)

        removed = mutations.remove_node(self.repo, self.graph_id, b.node_id)

        assert removed == [ab.edge_id, bc.edge_id]
        graph = self._graph()
        assert [n.node_id for n in graph.nodes] == [a.node_id, c.node_id]
        assert [e.edge_id for e in graph.edges] == [ac.edge_id]

    def test_remove_unknown_node(self):
        with pytest.raises(NodeNotFoundError):
            mutations.remove_node(self.repo, self.graph_id, "node_missing")


class TestEdges:
    """Test add/update/remove edge."""

    def setup_method(self):
        self.repo = GraphRepository()
        self.graph_id = self.repo.create("Analyze reports", AGENTS).graph_id
        self.entry = mutations.add_node(
            self.repo, self.graph_id, "Intake", NodeSpec(node_type=NodeType.entry, purpose="in")
        )
        self.exit = mutations.add_node(
            self.repo, self.graph_id, "Reporter", NodeSpec(node_type=NodeType.exit, purpose="out")
        )

    def _graph(self) -> IntentGraph:
        return self.repo.require(self.graph_id).document.intent_graph

    def test_add_edge_defaults(self):
        edge = mutations.add_edge(self.repo, self.graph_id, self.entry.node_id, self.exit.node_id)

        assert edge.edge_type == EdgeType.sequential
        assert edge.priority == 1
        assert edge.edge_id.startswith(f"edge_{self.entry.node_id}_to_{self.exit.node_id}_")
        document = self.repo.require(self.graph_id).document
        assert document.validation.is_valid is True
        assert document.metadata.warnings == []

    def test_add_edge_missing_source(self):
        """An edge from a missing node is rejected and the edge set is unchanged."""
        mutations.add_edge(self.repo, self.graph_id, self.entry.node_id, self.exit.node_id)
        before = list(self._graph().edges)

        with pytest.raises(NodeNotFoundError) as exc_info:
            mutations.add_edge(self.repo, self.graph_id, "node_missing", self.exit.node_id)

        assert exc_info.value.details == {"from_node_exists": False, "to_node_exists": True}
        assert self._graph().edges == before

    def test_add_edge_allows_cycles(self):
        """Cycles are accepted here; the validator reports them."""
        mutations.add_edge(self.repo, self.graph_id, self.entry.node_id, self.exit.node_id)
        mutations.add_edge(self.repo, self.graph_id, self.exit.node_id, self.entry.node_id)

        document = self.repo.require(self.graph_id).document
        assert len(document.intent_graph.edges) == 2
        dag = next(c for c in document.validation.checks_performed if c.check_name == "dag_structure")
        assert dag.passed is False

    def test_update_edge_merges_data_mapping(self):
        edge = mutations.add_edge(
            self.repo,
            self.graph_id,
            self.entry.node_id,
            self.exit.node_id,
            EdgeSpec(data_mapping={"a": DataMapping(from_field="x", to_field="y")}),
        )
        updated = mutations.update_edge(
            self.repo,
            self.graph_id,
            edge.edge_id,
            EdgeUpdate(
                edge_type=EdgeType.conditional,
                condition=EdgeCondition(expression="ok == true"),
                data_mapping={"b": DataMapping(from_field="p", to_field="q")},
            ),
        )

        assert updated.edge_type == EdgeType.conditional
        assert updated.condition.expression == "ok == true"
        assert set(updated.data_mapping) == {"a", "b"}
        assert updated.priority == 1

    def test_update_unknown_edge(self):
        with pytest.raises(EdgeNotFoundError) as exc_info:
            mutations.update_edge(self.repo, self.graph_id, "edge_missing", EdgeUpdate(priority=2))
        assert exc_info.value.code.value == "EDGE_NOT_FOUND"

    def test_remove_edge(self):
        edge = mutations.add_edge(self.repo, self.graph_id, self.entry.node_id, self.exit.node_id)
        removed = mutations.remove_edge(self.repo, self.graph_id, edge.edge_id)

        assert removed == edge
        assert self._graph().edges == []
        with pytest.raises(EdgeNotFoundError):
            mutations.remove_edge(self.repo, self.graph_id, edge.edge_id)


class TestReplaceGraph:
    """Test swapping in a whole graph."""

    def test_replace_graph_recomputes_plan(self):
        repo = GraphRepository()
        graph_id = repo.create("Imported", AGENTS).graph_id
        graph = IntentGraph.model_validate({
            "nodes": [
                {"node_id": "a", "agent_name": "Intake", "node_type": "entry", "purpose": "in",
                 "metadata": {"estimated_duration_ms": 10}},
                {"node_id": "b", "agent_name": "Reporter", "node_type": "exit", "purpose": "out"},
            ],
            "edges": [{"edge_id": "e1", "from_node": "a", "to_node": "b"}],
            "execution_plan": {"entry_points": ["wrong"], "execution_strategy": "parallel"},
        })

        document = mutations.replace_graph(repo, graph_id, graph)

        plan = document.intent_graph.execution_plan
        assert plan.entry_points == ["a"]
        assert plan.exit_points == ["b"]
        assert plan.critical_path == ["a", "b"]
        assert plan.execution_strategy.value == "parallel"
        assert document.metadata.resource_estimates.estimated_duration_ms == 10
        assert document.validation.is_valid is True
        assert repo.require(graph_id).document == document


class TestConcurrentMutations:
    """Test that concurrent writers to one graph do not lose updates."""

    def test_parallel_add_node(self):
        repo = GraphRepository()
        graph_id = repo.create("Busy", AGENTS).graph_id
        spec = NodeSpec(node_type=NodeType.processing, purpose="p")

        def worker():
            for _ in range(10):
                mutations.add_node(repo, graph_id, "Analyst", spec)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        nodes = repo.require(graph_id).document.intent_graph.nodes
        assert len(nodes) == 40
        assert len({n.node_id for n in nodes}) == 40

    def test_delete_waits_for_in_flight_add_node(self, monkeypatch):
        repo = GraphRepository()
        graph_id = repo.create("Busy", AGENTS).graph_id
        started, release = threading.Event(), threading.Event()
        generate = repo.ids.generate_node_id

        def slow_generate(agent_name):
            started.set()
            release.wait(5)
            return generate(agent_name)

        monkeypatch.setattr(repo.ids, "generate_node_id", slow_generate)
        outcome = {}

        def add():
            outcome["node"] = mutations.add_node(
                repo, graph_id, "Analyst", NodeSpec(node_type=NodeType.processing, purpose="p")
            )

        def delete():
            outcome["deleted"] = repo.delete(graph_id)

        adder = threading.Thread(target=add)
        adder.start()
        assert started.wait(5)
        deleter = threading.Thread(target=delete)
        deleter.start()
        deleter.join(0.1)
        assert deleter.is_alive()

        release.set()
        adder.join(5)
        deleter.join(5)

        assert outcome["node"].agent_name == "Analyst"
        assert outcome["deleted"] is True
        assert repo.get(graph_id) is None

    def test_lost_write_raises(self, monkeypatch):
        repo = GraphRepository()
        graph_id = repo.create("Busy", AGENTS).graph_id
        monkeypatch.setattr(repo, "update", lambda *args, **kwargs: False)

        with pytest.raises(GraphNotFoundError):
            mutations.add_node(
                repo, graph_id, "Analyst", NodeSpec(node_type=NodeType.processing, purpose="p")
            )


class TestLongChains:
    """Test graphs deeper than the interpreter's recursion limit."""

    def test_add_edge_extends_long_chain(self):
        repo = GraphRepository()
        graph_id = repo.create("Deep pipeline", AGENTS).graph_id
        ids = [f"step_{i}" for i in range(1200)]
        graph = IntentGraph.model_validate({
            "nodes": [
                {"node_id": node_id, "agent_name": "Analyst", "node_type": "processing", "purpose": "p"}
                for node_id in ids
            ],
            "edges": [
                {"edge_id": f"e{i}", "from_node": a, "to_node": b}
                for i, (a, b) in enumerate(zip(ids[:-1], ids[1:-1]))
            ],
        })
        mutations.replace_graph(repo, graph_id, graph)

        mutations.add_edge(repo, graph_id, ids[-2], ids[-1])

        document = repo.require(graph_id).document
        assert document.intent_graph.execution_plan.critical_path == ids
        assert document.metadata.complexity_metrics.depth == 1200

    def test_add_edge_closes_long_loop(self):
        repo = GraphRepository()
        graph_id = repo.create("Deep loop", AGENTS).graph_id
        ids = [f"step_{i}" for i in range(1200)]
        graph = IntentGraph.model_validate({
            "nodes": [
                {"node_id": node_id, "agent_name": "Analyst", "node_type": "processing", "purpose": "p"}
                for node_id in ids
            ],
            "edges": [
                {"edge_id": f"e{i}", "from_node": a, "to_node": b}
                for i, (a, b) in enumerate(zip(ids, ids[1:]))
            ],
        })
        mutations.replace_graph(repo, graph_id, graph)

        mutations.add_edge(repo, graph_id, ids[-1], ids[0], EdgeSpec(edge_type=EdgeType.iteration))

        assert repo.require(graph_id).document.intent_graph.execution_plan.critical_path == ids
