"""
Agents module for the shared conversation

Provides the conversation core used by every agent:
- Conversation Orchestrator: routing, concurrent dispatch and the single history writer
- Shared Infrastructure: AgentAdapter, AgentRegistry, ParticipantSet, HistoryStore, MessageBus
"""

from patchbay.agents.orchestrator.orchestrator import ConversationOrchestrator
from patchbay.agents.message_bus import MessageBus, DispatchEvent, EventType
from patchbay.agents.agent_registry import AgentRegistry
from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.external_adapter import ExternalAdapter
from patchbay.agents.participants import ParticipantSet
from patchbay.agents.history import HistoryStore
from patchbay.agents.mention_router import MentionRouter
from patchbay.agents.attribution import format_history_for_agent
from patchbay.agents.errors import (
    PatchbayError,
    AdapterError,
    DispatchContractError,
    UnknownTargetError,
    NonDispatchableTargetError,
)

__all__ = [
    "ConversationOrchestrator",
    "MessageBus",
    "DispatchEvent",
    "EventType",
    "AgentRegistry",
    "AgentAdapter",
    "ExternalAdapter",
    "ParticipantSet",
    "HistoryStore",
    "MentionRouter",
    "format_history_for_agent",
    "PatchbayError",
    "AdapterError",
    "DispatchContractError",
    "UnknownTargetError",
    "NonDispatchableTargetError",
]
