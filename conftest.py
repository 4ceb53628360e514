"""
Shared pytest fixtures: scripted fake agents and a wired orchestrator
"""

import asyncio
from typing import List, Optional, Sequence

import pytest

from patchbay.agents import (
    AdapterError,
    AgentAdapter,
    AgentRegistry,
    ConversationOrchestrator,
    ExternalAdapter,
    MessageBus,
    ParticipantSet,
)
from patchbay.models import AgentStatus, Capability, ViewedMessage


class FakeAdapter(AgentAdapter):
    """
    Scripted agent

    Replies with ``reply`` (or raises AdapterError when ``error`` is set).
    When ``gate`` is given, the reply waits until the event is set, which lets
    a test decide the completion order of a round.
    """

    def __init__(
        self,
        agent_id: str,
        display_name: str,
        reply: str = "ok",
        error: Optional[str] = None,
        gate: Optional[asyncio.Event] = None,
        on_done: Optional[asyncio.Event] = None,
        capability: Capability = Capability.API,
    ):
        super().__init__(agent_id, display_name, model="fake")
        self.capability = capability
        self.reply = reply
        self.error = error
        self.gate = gate
        self.on_done = on_done
        self.calls: List[tuple] = []

    async def check_status(self) -> AgentStatus:
        return AgentStatus.READY

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        self.calls.append((body, list(view)))
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise AdapterError(self.error, agent_id=self.id)
            return self.reply
        finally:
            if self.on_done is not None:
                self.on_done.set()


class RecordingStore:
    """In-memory participant store that remembers every save"""

    def __init__(self, saved: Optional[List[str]] = None, fail: bool = False):
        self.saved = list(saved or [])
        self.fail = fail
        self.saves: List[List[str]] = []

    def save(self, agent_ids):
        if self.fail:
            raise RuntimeError("store unavailable")
        self.saves.append(list(agent_ids))
        self.saved = list(agent_ids)

    def load(self):
        if self.fail:
            raise RuntimeError("store unavailable")
        return list(self.saved)


@pytest.fixture
def registry():
    registry = AgentRegistry()
    registry.register(FakeAdapter("agent-a", "Alpha", reply="alpha reply"))
    registry.register(FakeAdapter("agent-b", "Beta", reply="beta reply"))
    registry.register(ExternalAdapter("manual-x", "External AI"))
    return registry


@pytest.fixture
def orchestrator(registry):
    participants = ParticipantSet(registry)
    participants.replace_all(["agent-a", "agent-b", "manual-x"])
    return ConversationOrchestrator(registry, participants=participants, message_bus=MessageBus())
