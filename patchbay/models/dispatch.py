"""
Dispatch data models

Routing result of the mention router and the per-target outcomes of a dispatch round
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from patchbay.models.message import Message


class RoutingResult(BaseModel):
    """Targets resolved from a raw user message and the mention-stripped body"""

    model_config = ConfigDict(frozen=True)

    targets: Tuple[str, ...] = ()
    body: str = ""
    broadcast: bool = Field(default=False, description="True when @all/@everyone was used")


class TargetOutcome(BaseModel):
    """Result of invoking one target: exactly one of content / error is set"""

    model_config = ConfigDict(frozen=True)

    agent_id: str
    content: Optional[str] = None
    error: Optional[str] = None
    latency_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


class DispatchRound(BaseModel):
    """Everything a dispatch round produced"""

    user_message: Message
    body: str
    targets: Tuple[str, ...] = ()
    outcomes: List[TargetOutcome] = Field(default_factory=list)

    @property
    def passive(self) -> bool:
        return not self.targets

    @property
    def succeeded(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if not o.succeeded]
