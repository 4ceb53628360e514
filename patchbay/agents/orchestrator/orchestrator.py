"""
Conversation Orchestrator - Dispatch coordinator for the shared thread

Routes user messages to participating agents, fans each prompt out
concurrently and commits replies into the one shared history
"""

import asyncio
import logging
import time
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.agent_registry import AgentRegistry
from patchbay.agents.attribution import format_history_for_agent
from patchbay.agents.errors import AdapterError, NonDispatchableTargetError
from patchbay.agents.external_adapter import ExternalAdapter
from patchbay.agents.history import HistoryStore
from patchbay.agents.mention_router import MentionRouter
from patchbay.agents.message_bus import DispatchEvent, EventType, MessageBus
from patchbay.agents.participants import ParticipantSet
from patchbay.models.dispatch import DispatchRound, RoutingResult, TargetOutcome
from patchbay.models.message import Message

logger = logging.getLogger(__name__)


ProgressCallback = Callable[[TargetOutcome], None]
CompleteCallback = Callable[[DispatchRound], None]

# Error reported for replies that arrive after the history was cleared
HISTORY_CLEARED_ERROR = "History was cleared before the reply arrived"


class DispatchObserver(Protocol):
    """Analytics collaborator notified after every successful outcome"""

    def record_dispatch(self, agent_id: str, latency_ms: float) -> None:
        ...


class ConversationOrchestrator:
    """
    Top-level coordinator for one conversation session

    Owns the single writer path into the history. Every dispatch round hands
    all of its targets one snapshot taken right after the user message is
    committed, so no target sees another target's reply from the same round.
    """

    def __init__(
        self,
        agent_registry: AgentRegistry,
        participants: Optional[ParticipantSet] = None,
        history: Optional[HistoryStore] = None,
        observer: Optional[DispatchObserver] = None,
        message_bus: Optional[MessageBus] = None,
    ):
        """
        Initialize orchestrator

        Args:
            agent_registry: All known agents
            participants: Agents eligible for mention/broadcast traffic
            history: Shared history (a fresh one is created if omitted)
            observer: Optional analytics collaborator
            message_bus: Optional bus that receives progress events
        """
        self.agent_registry = agent_registry
        self.participants = participants or ParticipantSet(agent_registry)
        self.history = history or HistoryStore()
        self.observer = observer
        self.message_bus = message_bus

    def get_active_agents(self) -> List[AgentAdapter]:
        """
        Get participating agents

        Returns:
            Adapters in membership order
        """
        return self.participants.members()

    def get_history(self) -> Tuple[Message, ...]:
        return self.history.snapshot()

    def route(self, text: str) -> RoutingResult:
        """
        Resolve which participants a raw user message addresses

        Args:
            text: Raw user text

        Returns:
            Targets and mention-stripped body
        """
        return MentionRouter.route(text, self.participants.members())

    async def send(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> DispatchRound:
        """
        Route a raw user message and dispatch it

        Args:
            text: Raw user text, possibly containing mentions
            on_progress: Called with each target's outcome as it resolves
            on_complete: Called once with the finished round

        Returns:
            The completed dispatch round
        """
        routing = self.route(text)
        logger.info(
            f"Routed message to {len(routing.targets)} target(s): "
            f"{', '.join(routing.targets) or 'none (passive)'}"
        )
        return await self.dispatch(
            text,
            routing.targets,
            body=routing.body,
            on_progress=on_progress,
            on_complete=on_complete,
        )

    async def dispatch(
        self,
        text: str,
        targets: Iterable[str],
        body: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> DispatchRound:
        """
        Commit a user message and fan it out to the given targets

        Args:
            text: Raw user message, committed to the history as-is
            targets: Agent ids to invoke (duplicates collapse)
            body: Prompt body handed to the adapters (defaults to text)
            on_progress: Called with each target's outcome as it resolves
            on_complete: Called once with the finished round

        Returns:
            The completed dispatch round with one outcome per target

        Raises:
            UnknownTargetError: If a target is not registered
            NonDispatchableTargetError: If a target is a manual agent
        """
        adapters = self._resolve_targets(targets)
        if body is None:
            body = text

        user_message = Message.from_user(text)
        self.history.append(user_message)

        dispatch_round = DispatchRound(
            user_message=user_message,
            body=body,
            targets=tuple(adapter.id for adapter in adapters),
        )

        if adapters:
            snapshot = self.history.snapshot()
            generation = self.history.generation
            outcomes = await asyncio.gather(*[
                self._invoke_target(adapter, body, snapshot, generation, on_progress)
                for adapter in adapters
            ])
            dispatch_round.outcomes.extend(outcomes)
            logger.info(
                f"Round complete: {len(dispatch_round.succeeded)} succeeded, "
                f"{len(dispatch_round.failed)} failed"
            )
        else:
            logger.info("No targets - message saved passively")

        self._publish(DispatchEvent(
            type=EventType.ROUND_COMPLETE,
            payload={
                "targets": list(dispatch_round.targets),
                "succeeded": [o.agent_id for o in dispatch_round.succeeded],
                "failed": [o.agent_id for o in dispatch_round.failed],
            },
        ))
        if on_complete:
            self._safe_callback(on_complete, dispatch_round)

        return dispatch_round

    def _resolve_targets(self, targets: Iterable[str]) -> List[AgentAdapter]:
        adapters: List[AgentAdapter] = []
        for agent_id in targets:
            adapter = self.agent_registry.require(agent_id)
            if not adapter.dispatchable:
                raise NonDispatchableTargetError(agent_id)
            if adapter not in adapters:
                adapters.append(adapter)
        return adapters

    async def _invoke_target(
        self,
        adapter: AgentAdapter,
        body: str,
        snapshot: Sequence[Message],
        generation: int,
        on_progress: Optional[ProgressCallback],
    ) -> TargetOutcome:
        """Run one branch of a round; never raises for adapter failures"""
        view = format_history_for_agent(snapshot, adapter.id)
        logger.info(f"Dispatching to {adapter.id} ({len(view)} messages of context)...")

        started = time.perf_counter()
        try:
            content = await adapter.send_prompt(body, view)
        except AdapterError as e:
            logger.warning(f"{adapter.id} failed: {e.message}")
            outcome = TargetOutcome(agent_id=adapter.id, error=e.message)
        except Exception as e:
            logger.error(f"Unexpected error from {adapter.id}: {e}", exc_info=True)
            outcome = TargetOutcome(agent_id=adapter.id, error=f"{type(e).__name__}: {e}")
        else:
            latency_ms = (time.perf_counter() - started) * 1000
            if self.history.generation != generation:
                logger.warning(f"Discarding reply from {adapter.id}: history was cleared mid-round")
                outcome = TargetOutcome(agent_id=adapter.id, error=HISTORY_CLEARED_ERROR, latency_ms=latency_ms)
            else:
                self.history.append(Message.from_agent(content, adapter.id, adapter.handle))
                outcome = TargetOutcome(agent_id=adapter.id, content=content, latency_ms=latency_ms)
                self._record(adapter.id, latency_ms)

        self._publish(DispatchEvent(
            type=EventType.TARGET_SUCCEEDED if outcome.succeeded else EventType.TARGET_FAILED,
            agent_id=adapter.id,
            payload={"content": outcome.content} if outcome.succeeded else {"error": outcome.error},
        ))
        if on_progress:
            self._safe_callback(on_progress, outcome)
        return outcome

    def sync_manual_context(self, agent_id: str) -> str:
        """
        Build the context a human relays to a manual agent

        Args:
            agent_id: Id of a manual agent

        Returns:
            Everything the agent has not seen yet, formatted for pasting
        """
        return self._require_manual(agent_id).get_delta_context(self.history.snapshot())

    def paste_manual_reply(self, agent_id: str, text: str) -> Message:
        """
        Commit a reply a human relayed back from a manual agent

        Args:
            agent_id: Id of a manual agent
            text: The agent's reply

        Returns:
            The committed message
        """
        adapter = self._require_manual(agent_id)
        message = Message.from_agent(text, adapter.id, adapter.handle)
        self.history.append(message)
        logger.info(f"Pasted reply from {adapter.id} ({len(text)} chars)")
        self._publish(DispatchEvent(
            type=EventType.TARGET_SUCCEEDED,
            agent_id=adapter.id,
            payload={"content": text, "manual": True},
        ))
        return message

    def clear_history(self) -> None:
        """Clear the whole history and reset manual sync cursors"""
        self.history.clear()
        for adapter in self.agent_registry.list_agents():
            if isinstance(adapter, ExternalAdapter):
                adapter.reset_sync()
        self._publish(DispatchEvent(type=EventType.HISTORY_CLEARED))

    def _require_manual(self, agent_id: str) -> ExternalAdapter:
        adapter = self.agent_registry.require(agent_id)
        if not isinstance(adapter, ExternalAdapter):
            raise ValueError(f"Agent '{agent_id}' is not a manual agent")
        return adapter

    def _record(self, agent_id: str, latency_ms: float) -> None:
        if self.observer is None:
            return
        try:
            self.observer.record_dispatch(agent_id, latency_ms)
        except Exception as e:
            logger.error(f"Failed to record analytics for {agent_id}: {e}", exc_info=True)

    def _publish(self, event: DispatchEvent) -> None:
        if self.message_bus is not None:
            self.message_bus.publish(event)

    @staticmethod
    def _safe_callback(callback: Callable, arg) -> None:
        try:
            callback(arg)
        except Exception as e:
            logger.error(f"Progress callback failed: {e}", exc_info=True)
