"""
Analytics data models

Per-agent usage counters and the session-wide analytics document
"""

from typing import Dict

from pydantic import BaseModel, Field


class AgentUsage(BaseModel):
    """Usage counters for one agent"""

    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    total_latency_ms: float = 0.0
    average_latency_ms: float = 0.0
    estimated_cost: float = Field(default=0.0, description="Estimated cost in USD")


class AnalyticsSnapshot(BaseModel):
    """Session-wide analytics document"""

    total_cost: float = 0.0
    requests: int = 0
    agents: Dict[str, AgentUsage] = Field(default_factory=dict)
