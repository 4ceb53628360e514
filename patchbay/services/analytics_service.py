"""
Analytics Service - Per-agent latency, token and cost tracking

Observes successful dispatch outcomes and vendor token usage, prices them
and keeps a session-wide analytics document.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol

from patchbay.models.analytics import AgentUsage, AnalyticsSnapshot

logger = logging.getLogger(__name__)


# Pricing in USD per token, keyed by agent id
DEFAULT_PRICING: Dict[str, Dict[str, float]] = {
    "openai-gpt-5.2-pro": {"input": 5.00 / 1_000_000, "output": 15.00 / 1_000_000},
    "openai-gpt-5-mini": {"input": 0.50 / 1_000_000, "output": 1.50 / 1_000_000},
    "google-gemini-3-pro": {"input": 4.00 / 1_000_000, "output": 12.00 / 1_000_000},
    "google-gemini-3-flash": {"input": 0.40 / 1_000_000, "output": 1.20 / 1_000_000},
    "google-gemini-2.5-flash": {"input": 0.35 / 1_000_000, "output": 1.05 / 1_000_000},
    "google-gemma-3-27b": {"input": 0.30 / 1_000_000, "output": 0.90 / 1_000_000},
    "anthropic-claude-4.5-sonnet": {"input": 3.00 / 1_000_000, "output": 15.00 / 1_000_000},
    "anthropic-claude-4.5-haiku": {"input": 1.00 / 1_000_000, "output": 5.00 / 1_000_000},
    "anthropic-claude-4.5-opus": {"input": 5.00 / 1_000_000, "output": 25.00 / 1_000_000},
}


class AnalyticsStore(Protocol):
    """Persistence collaborator for the analytics document"""

    def save(self, snapshot: AnalyticsSnapshot) -> None:
        ...

    def load(self) -> Optional[AnalyticsSnapshot]:
        ...


class AgentAnalytics:
    """
    Analytics service for agent usage

    Examples:
        analytics = AgentAnalytics()

        # Called by the orchestrator after a successful outcome
        analytics.record_dispatch("openai-gpt-5-mini", latency_ms=812.5)

        # Called by adapters that learn token counts from the vendor
        analytics.record_usage("openai-gpt-5-mini", input_tokens=1200, output_tokens=300)

        report = analytics.get_analytics()
    """

    def __init__(
        self,
        pricing: Optional[Dict[str, Dict[str, float]]] = None,
        store: Optional[AnalyticsStore] = None,
    ):
        """
        Initialize analytics

        Args:
            pricing: Per-agent prices in USD per token (defaults to DEFAULT_PRICING)
            store: Optional persistence collaborator
        """
        self.pricing = pricing if pricing is not None else DEFAULT_PRICING
        self.store = store
        self._dirty = False
        self._writer: Optional[asyncio.Task] = None
        self._analytics = self._load()

    def _load(self) -> AnalyticsSnapshot:
        if self.store is None:
            return AnalyticsSnapshot()
        try:
            return self.store.load() or AnalyticsSnapshot()
        except Exception as e:
            logger.error(f"Failed to load analytics: {e}", exc_info=True)
            return AnalyticsSnapshot()

    def _save(self) -> None:
        if self.store is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(self._analytics.model_copy(deep=True))
            return

        # One writer task at a time, always saving the latest state
        self._dirty = True
        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._dirty:
            self._dirty = False
            await asyncio.to_thread(self._write, self._analytics.model_copy(deep=True))

    def _write(self, snapshot: AnalyticsSnapshot) -> None:
        try:
            self.store.save(snapshot)
        except Exception as e:
            logger.error(f"Failed to save analytics: {e}", exc_info=True)

    async def flush(self) -> None:
        """Wait until pending background writes reach the store"""
        if self._writer is not None and not self._writer.done():
            await self._writer

    def _agent(self, agent_id: str) -> AgentUsage:
        if agent_id not in self._analytics.agents:
            self._analytics.agents[agent_id] = AgentUsage()
        return self._analytics.agents[agent_id]

    def record_dispatch(self, agent_id: str, latency_ms: float) -> None:
        """
        Record one successful agent reply

        Args:
            agent_id: Agent that replied
            latency_ms: Time from invocation to reply
        """
        agent = self._agent(agent_id)
        agent.requests += 1
        agent.total_latency_ms += latency_ms
        agent.average_latency_ms = agent.total_latency_ms / agent.requests

        self._analytics.requests += 1
        logger.debug(f"Recorded dispatch for {agent_id}: {latency_ms:.0f} ms")
        self._save()

    def record_usage(self, agent_id: str, input_tokens: int, output_tokens: int) -> None:
        """
        Record token usage and its estimated cost

        Args:
            agent_id: Agent the tokens were spent on
            input_tokens: Prompt tokens
            output_tokens: Completion tokens
        """
        agent = self._agent(agent_id)
        agent.input_tokens += input_tokens
        agent.output_tokens += output_tokens
        agent.total_tokens += input_tokens + output_tokens

        cost = self.calculate_cost(agent_id, input_tokens, output_tokens)
        agent.estimated_cost += cost
        self._analytics.total_cost += cost
        self._save()

    def calculate_cost(self, agent_id: str, input_tokens: int, output_tokens: int) -> float:
        """
        Estimate the cost of a request

        Returns:
            Cost in USD, 0 for agents without a price
        """
        model_pricing = self.pricing.get(agent_id)
        if not model_pricing:
            return 0.0
        return input_tokens * model_pricing["input"] + output_tokens * model_pricing["output"]

    def get_analytics(self) -> AnalyticsSnapshot:
        """Copy of the current analytics document"""
        return self._analytics.model_copy(deep=True)

    def clear(self) -> None:
        """Reset all counters"""
        self._analytics = AnalyticsSnapshot()
        logger.info("Cleared analytics")
        self._save()
