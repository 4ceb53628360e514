"""
Agent data models

Static identity and capability of an agent, plus the status values adapters report
"""

import re
from enum import Enum

from pydantic import BaseModel, Field


class Capability(str, Enum):
    """How an agent is reached"""
    API = "API"                      # Vendor HTTP API, dispatched automatically
    REMOTE_BRIDGE = "REMOTE_BRIDGE"  # Relayed through the browser-extension bridge
    MANUAL = "MANUAL"                # Human copy/paste relay, never dispatched


class AgentStatus(str, Enum):
    """Result of an adapter status check"""
    READY = "READY"
    AUTH_MISSING = "AUTH_MISSING"
    UNREACHABLE = "UNREACHABLE"


def make_handle(display_name: str) -> str:
    """
    Derive an agent handle from its display name

    Args:
        display_name: Human-readable agent name ("Gemini 3 Flash")

    Returns:
        Whitespace-free handle prefixed with "@" ("@Gemini3Flash")
    """
    return "@" + re.sub(r"\s+", "", display_name)


class AgentInfo(BaseModel):
    """Public information about a registered agent"""

    id: str
    display_name: str
    handle: str
    capability: Capability
    status: AgentStatus = AgentStatus.READY
    is_participant: bool = False
    model: str = Field(default="", description="Vendor model name, empty for manual agents")
