"""
Data models
"""

from patchbay.models.message import Message, Role, ViewedMessage
from patchbay.models.agent import AgentInfo, AgentStatus, Capability, make_handle
from patchbay.models.dispatch import DispatchRound, RoutingResult, TargetOutcome
from patchbay.models.analytics import AgentUsage, AnalyticsSnapshot

__all__ = [
    "Message",
    "Role",
    "ViewedMessage",
    "AgentInfo",
    "AgentStatus",
    "Capability",
    "make_handle",
    "DispatchRound",
    "RoutingResult",
    "TargetOutcome",
    "AgentUsage",
    "AnalyticsSnapshot",
]
