"""Repository entry for a live graph document."""

from pydantic import BaseModel

from intentgraph.models.agent import AgentDefinition, GraphConfig
from intentgraph.models.document import IntentGraphDocument


class StoredGraph(BaseModel):
    """A graph document together with the catalog and config it was created with."""

    graph_id: str
    purpose: str
    available_agents: list[AgentDefinition]
    config: GraphConfig
    document: IntentGraphDocument
    created_at: str
    updated_at: str

    def find_agent(self, agent_name: str) -> AgentDefinition | None:
        for agent in self.available_agents:
            if agent.name == agent_name:
                return agent
        return None


class GraphSummary(BaseModel):
    """listing entry returned by GraphRepository.list()."""

    graph_id: str
    purpose: str
    created_at: str
    node_count: int
    edge_count: int
