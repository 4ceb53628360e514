"""
Orchestrator module - Dispatch coordinator for the shared conversation

Routes, fans out and commits agent replies for one session
"""

from patchbay.agents.orchestrator.orchestrator import ConversationOrchestrator, DispatchObserver
from patchbay.agents.message_bus import MessageBus, DispatchEvent, EventType
from patchbay.agents.agent_registry import AgentRegistry

__all__ = [
    "ConversationOrchestrator",
    "DispatchObserver",
    "MessageBus",
    "DispatchEvent",
    "EventType",
    "AgentRegistry",
]
