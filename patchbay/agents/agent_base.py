"""
Agent Adapter Base Class - Interface for all agents

Defines the common interface every vendor/transport adapter implements.
The conversation core only talks to agents through this interface.
"""

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from patchbay.models.agent import AgentInfo, AgentStatus, Capability, make_handle
from patchbay.models.message import ViewedMessage

logger = logging.getLogger(__name__)


PERSONA_TEMPLATE = (
    "You are {handle} ({name}). You are participating in a group chat with a user "
    "and other AI agents. When responding, speak directly to the group. "
    "Keep your responses concise."
)


class AgentAdapter(ABC):
    """
    Base class for all agent adapters

    Subclasses set ``capability`` and implement status checks and prompting
    """

    capability: Capability = Capability.API

    def __init__(self, agent_id: str, display_name: str, model: str = ""):
        """
        Initialize adapter

        Args:
            agent_id: Unique identifier (e.g. "openai-gpt-5-mini")
            display_name: Human-readable name (e.g. "GPT-5 Mini")
            model: Vendor model name, if any
        """
        self.id = agent_id
        self.display_name = display_name
        self.handle = make_handle(display_name)
        self.model = model

    @property
    def dispatchable(self) -> bool:
        """Whether the dispatch coordinator may invoke this agent"""
        return self.capability != Capability.MANUAL

    def persona_prompt(self) -> str:
        """System instruction telling the model who it is in the group chat"""
        return PERSONA_TEMPLATE.format(handle=self.handle, name=self.display_name)

    def info(self, status: AgentStatus = AgentStatus.READY, is_participant: bool = False) -> AgentInfo:
        return AgentInfo(
            id=self.id,
            display_name=self.display_name,
            handle=self.handle,
            capability=self.capability,
            status=status,
            is_participant=is_participant,
            model=self.model,
        )

    @abstractmethod
    async def check_status(self) -> AgentStatus:
        """
        Report whether the agent can currently be reached

        Must not have side effects.

        Returns:
            READY, AUTH_MISSING or UNREACHABLE
        """
        pass

    @abstractmethod
    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        """
        Send a prompt with this agent's view of the history

        Args:
            body: Mention-stripped user text of the current round
            view: Attribution view of the history (already contains the current user turn)

        Returns:
            The agent's reply text

        Raises:
            AdapterError: On any transport, auth or protocol failure
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, capability={self.capability.value})"
