"""
Agent Registry - Manages available agents

Provides registration and discovery of agent adapters, independent of which
agents currently take part in the conversation
"""

import logging
from typing import Dict, List, Optional

from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.errors import UnknownTargetError
from patchbay.models.agent import Capability

logger = logging.getLogger(__name__)


class AgentRegistry:
    """
    Registry for managing available agents

    Keeps registration order, which is the order agents are listed in
    """

    def __init__(self):
        """Initialize agent registry"""
        self.agents: Dict[str, AgentAdapter] = {}

    def register(self, adapter: AgentAdapter) -> None:
        """
        Register an agent

        Args:
            adapter: Adapter for the agent; replaces any adapter with the same id
        """
        if adapter.id in self.agents:
            logger.warning(f"Replacing registered agent: {adapter.id}")
        self.agents[adapter.id] = adapter
        logger.info(f"Registered agent: {adapter.id} ({adapter.capability.value})")

    def get_agent(self, agent_id: str) -> Optional[AgentAdapter]:
        """
        Get an agent adapter

        Args:
            agent_id: Id of the agent

        Returns:
            AgentAdapter if found, None otherwise
        """
        return self.agents.get(agent_id)

    def require(self, agent_id: str) -> AgentAdapter:
        """
        Get an agent adapter that must exist

        Raises:
            UnknownTargetError: If the id is not registered
        """
        adapter = self.agents.get(agent_id)
        if adapter is None:
            raise UnknownTargetError(agent_id)
        return adapter

    def list_agents(self, capability: Optional[Capability] = None) -> List[AgentAdapter]:
        """
        List all registered agents

        Args:
            capability: Optional filter by capability

        Returns:
            Adapters in registration order
        """
        if capability:
            return [a for a in self.agents.values() if a.capability == capability]
        return list(self.agents.values())

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self.agents

    def __len__(self) -> int:
        return len(self.agents)
