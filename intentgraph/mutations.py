"""Incremental node and edge mutations.

Every mutation edits a deep copy of the stored document under the graph's
write lock, refreshes derived metadata and validation, and only then
writes the copy back. A mutation that raises leaves the stored graph as
it was.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import BaseModel

from intentgraph.analysis.metadata import refresh_document
from intentgraph.errors import (
    AgentNotFoundError,
    EdgeNotFoundError,
    GraphNotFoundError,
    NodeNotFoundError,
)
from intentgraph.models.agent import EdgeSpec, EdgeUpdate, NodeSpec, NodeUpdate
from intentgraph.models.document import IntentGraphDocument
from intentgraph.models.graph import Edge, IntentGraph, Node
from intentgraph.models.stored import StoredGraph
from intentgraph.repository import GraphRepository
from intentgraph.utils.logging import get_logger

log = get_logger(__name__)


@contextmanager
def _editing(
    repository: GraphRepository, graph_id: str
) -> Iterator[tuple[StoredGraph, IntentGraphDocument]]:
    with repository.lock(graph_id):
        stored = repository.require(graph_id)
        document = stored.document.model_copy(deep=True)
        yield stored, document
        refresh_document(document)
        if not repository.update(graph_id, document):
            raise GraphNotFoundError(graph_id)


def _merge(base: BaseModel | None, patch: BaseModel | None) -> BaseModel | None:
    """Field-wise merge: fields explicitly set on patch override base."""
    if patch is None:
        return base
    if base is None:
        return patch
    return base.model_copy(update={name: getattr(patch, name) for name in patch.model_fields_set})


def _node_index(document: IntentGraphDocument, node_id: str) -> int:
    for idx, node in enumerate(document.intent_graph.nodes):
        if node.node_id == node_id:
            return idx
    raise NodeNotFoundError(f"Node with ID '{node_id}' not found in graph")


def _edge_index(document: IntentGraphDocument, edge_id: str) -> int:
    for idx, edge in enumerate(document.intent_graph.edges):
        if edge.edge_id == edge_id:
            return idx
    raise EdgeNotFoundError(edge_id)


def add_node(repository: GraphRepository, graph_id: str, agent_name: str, spec: NodeSpec) -> Node:
    """Add a node invoking a catalog agent.

    Outputs default to the agent's declared output schema when none are
    given.

    Raises:
        GraphNotFoundError: unknown graph id.
        AgentNotFoundError: agent_name is not in the graph's catalog.
    """
    with _editing(repository, graph_id) as (stored, document):
        agent = stored.find_agent(agent_name)
        if agent is None:
            raise AgentNotFoundError(
                f"Agent '{agent_name}' not found in available_agents",
                details={"available_agents": [a.name for a in stored.available_agents]},
            )

        node = Node(
            node_id=repository.ids.generate_node_id(agent_name),
            agent_name=agent_name,
            agent_type=agent.type,
            node_type=spec.node_type,
            purpose=spec.purpose,
            inputs=spec.inputs or {},
            outputs=spec.outputs or agent.default_outputs(),
            configuration=spec.configuration,
            error_handling=spec.error_handling,
            metadata=spec.metadata,
        )
        document.intent_graph.nodes.append(node)

    log.info("node_added", graph_id=graph_id, node_id=node.node_id, agent_name=agent_name)
    return node


def update_node(
    repository: GraphRepository, graph_id: str, node_id: str, updates: NodeUpdate
) -> Node:
    """Apply a partial update to a node.

    purpose, node_type and outputs are replaced; inputs merge by key;
    configuration, error_handling and metadata merge field by field.
    """
    with _editing(repository, graph_id) as (_, document):
        idx = _node_index(document, node_id)
        node = document.intent_graph.nodes[idx]

        changes: dict = {}
        if updates.purpose is not None:
            changes["purpose"] = updates.purpose
        if updates.node_type is not None:
            changes["node_type"] = updates.node_type
        if updates.outputs is not None:
            changes["outputs"] = updates.outputs
        if updates.inputs is not None:
            changes["inputs"] = {**node.inputs, **updates.inputs}
        for name in ("configuration", "error_handling", "metadata"):
            patch = getattr(updates, name)
            if patch is not None:
                changes[name] = _merge(getattr(node, name), patch)

        node = node.model_copy(update=changes)
        document.intent_graph.nodes[idx] = node

    log.info("node_updated", graph_id=graph_id, node_id=node_id, fields=sorted(changes))
    return node


def remove_node(repository: GraphRepository, graph_id: str, node_id: str) -> list[str]:
    """Remove a node and every edge that starts or ends at it.

    Returns:
        ids of the removed edges, in their stored order.
    """
    with _editing(repository, graph_id) as (_, document):
        graph = document.intent_graph
        del graph.nodes[_node_index(document, node_id)]

        removed = [e.edge_id for e in graph.edges if node_id in (e.from_node, e.to_node)]
        graph.edges = [e for e in graph.edges if node_id not in (e.from_node, e.to_node)]

    log.info("node_removed", graph_id=graph_id, node_id=node_id, removed_edges=len(removed))
    return removed


def add_edge(
    repository: GraphRepository,
    graph_id: str,
    from_node: str,
    to_node: str,
    spec: EdgeSpec | None = None,
) -> Edge:
    """Connect two existing nodes.

    Cycles are allowed here: iteration edges loop on purpose, and cycle
    reporting belongs to the validator.

    Raises:
        GraphNotFoundError: unknown graph id.
        NodeNotFoundError: either endpoint is missing.
    """
    spec = spec or EdgeSpec()
    with _editing(repository, graph_id) as (_, document):
        node_ids = document.intent_graph.node_ids()
        if from_node not in node_ids or to_node not in node_ids:
            raise NodeNotFoundError(
                f"One or both nodes not found: from='{from_node}', to='{to_node}'",
                details={
                    "from_node_exists": from_node in node_ids,
                    "to_node_exists": to_node in node_ids,
                },
            )

        edge = Edge(
            edge_id=repository.ids.generate_edge_id(from_node, to_node),
            from_node=from_node,
            to_node=to_node,
            edge_type=spec.edge_type,
            condition=spec.condition,
            priority=spec.priority,
            data_mapping=spec.data_mapping,
        )
        document.intent_graph.edges.append(edge)

    log.info("edge_added", graph_id=graph_id, edge_id=edge.edge_id, edge_type=edge.edge_type.value)
    return edge


def update_edge(
    repository: GraphRepository, graph_id: str, edge_id: str, updates: EdgeUpdate
) -> Edge:
    """Apply a partial update to an edge; data_mapping merges by key."""
    with _editing(repository, graph_id) as (_, document):
        idx = _edge_index(document, edge_id)
        edge = document.intent_graph.edges[idx]

        changes: dict = {}
        if updates.edge_type is not None:
            changes["edge_type"] = updates.edge_type
        if updates.condition is not None:
            changes["condition"] = updates.condition
        if updates.priority is not None:
            changes["priority"] = updates.priority
        if updates.data_mapping is not None:
            changes["data_mapping"] = {**(edge.data_mapping or {}), **updates.data_mapping}

        edge = edge.model_copy(update=changes)
        document.intent_graph.edges[idx] = edge

    log.info("edge_updated", graph_id=graph_id, edge_id=edge_id, fields=sorted(changes))
    return edge


def remove_edge(repository: GraphRepository, graph_id: str, edge_id: str) -> Edge:
    """Remove a single edge and return it."""
    with _editing(repository, graph_id) as (_, document):
        edge = document.intent_graph.edges.pop(_edge_index(document, edge_id))

    log.info("edge_removed", graph_id=graph_id, edge_id=edge_id)
    return edge


def replace_graph(repository: GraphRepository, graph_id: str, graph: IntentGraph) -> IntentGraphDocument:
    """Swap in a whole graph structure, e.g. an accepted generated candidate.

    The derived parts of the execution plan are recomputed; only the
    authored execution_strategy and iteration_config are taken from graph.
    """
    with _editing(repository, graph_id) as (_, document):
        document.intent_graph = graph.model_copy(deep=True)

    log.info(
        "graph_replaced",
        graph_id=graph_id,
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
    )
    return document
