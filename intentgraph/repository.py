"""In-memory storage for live graph documents.

A GraphRepository is an explicit value: create one per host (or per test)
and pass it to every operation. Documents live only as long as the process.
Writers to the same graph id are serialized through lock(graph_id).
"""

import threading
from contextlib import contextmanager
from collections.abc import Iterator

from intentgraph import config
from intentgraph.analysis.metadata import refresh_document
from intentgraph.errors import GraphNotFoundError, InvalidAgentsError, InvalidPurposeError
from intentgraph.models.agent import AgentDefinition, GraphConfig
from intentgraph.models.document import GraphMetadata, IntentGraphDocument
from intentgraph.models.graph import ExecutionPlan, IntentGraph
from intentgraph.models.stored import GraphSummary, StoredGraph
from intentgraph.utils.identifiers import IdentifierGenerator, utc_timestamp
from intentgraph.utils.logging import get_logger

log = get_logger(__name__)


class GraphRepository:
    """Owns the set of live graph documents keyed by graph id."""

    def __init__(self, ids: IdentifierGenerator | None = None) -> None:
        self.ids = ids or IdentifierGenerator()
        self._graphs: dict[str, StoredGraph] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def lock(self, graph_id: str) -> Iterator[None]:
        """Hold the per-graph write lock for a read-modify-write cycle."""
        with self._registry_lock:
            graph_lock = self._locks.setdefault(graph_id, threading.RLock())
        with graph_lock:
            yield

    def create(
        self,
        purpose: str,
        agents: list[AgentDefinition],
        graph_config: GraphConfig | None = None,
    ) -> StoredGraph:
        """Create an empty graph for a purpose and agent catalog.

        Raises:
            InvalidPurposeError: if purpose is empty or blank.
            InvalidAgentsError: if the agent catalog is empty.
        """
        if not purpose or not purpose.strip():
            raise InvalidPurposeError("Purpose must be a non-empty string")
        if not agents:
            raise InvalidAgentsError("available_agents must be a non-empty array")

        graph_config = graph_config or GraphConfig()
        graph_id = self.ids.generate_graph_id()
        now = utc_timestamp()

        document = IntentGraphDocument(
            intent_graph=IntentGraph(
                execution_plan=ExecutionPlan(execution_strategy=graph_config.execution_mode),
            ),
            metadata=GraphMetadata(
                graph_id=graph_id,
                version=config.SCHEMA_VERSION,
                created_at=now,
                agent_purpose=purpose,
            ),
        )
        refresh_document(document)

        stored = StoredGraph(
            graph_id=graph_id,
            purpose=purpose,
            available_agents=list(agents),
            config=graph_config,
            document=document,
            created_at=now,
            updated_at=now,
        )
        with self._registry_lock:
            self._graphs[graph_id] = stored
        log.info("graph_created", graph_id=graph_id, agent_count=len(agents))
        return stored

    def get(self, graph_id: str) -> StoredGraph | None:
        return self._graphs.get(graph_id)

    def require(self, graph_id: str) -> StoredGraph:
        """Like get(), but raises GraphNotFoundError for an unknown id."""
        stored = self._graphs.get(graph_id)
        if stored is None:
            raise GraphNotFoundError(graph_id)
        return stored

    def update(self, graph_id: str, document: IntentGraphDocument) -> bool:
        """Replace a graph's document. Returns False if the graph is unknown."""
        stored = self._graphs.get(graph_id)
        if stored is None:
            return False
        stored.document = document
        stored.updated_at = utc_timestamp()
        log.debug("graph_updated", graph_id=graph_id)
        return True

    def delete(self, graph_id: str) -> bool:
        """Remove a graph once any in-flight mutation on it has finished."""
        with self.lock(graph_id), self._registry_lock:
            deleted = self._graphs.pop(graph_id, None) is not None
            self._locks.pop(graph_id, None)
        if deleted:
            log.info("graph_deleted", graph_id=graph_id)
        return deleted

    def list(self) -> list[GraphSummary]:
        """Summaries of all live graphs in creation order."""
        return [
            GraphSummary(
                graph_id=stored.graph_id,
                purpose=stored.purpose,
                created_at=stored.created_at,
                node_count=stored.document.metadata.complexity_metrics.node_count,
                edge_count=stored.document.metadata.complexity_metrics.edge_count,
            )
            for stored in list(self._graphs.values())
        ]

    def count(self) -> int:
        return len(self._graphs)

    def clear(self) -> None:
        """Drop every graph. Id generation carries on, so ids are never reused."""
        with self._registry_lock:
            self._graphs.clear()
            self._locks.clear()
        log.info("repository_cleared")
