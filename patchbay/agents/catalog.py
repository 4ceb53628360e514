"""
Agent Catalog - Default agent line-up and session bootstrap

Builds the registry from settings and wires the orchestrator with its
participant set, analytics and event bus
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.agent_registry import AgentRegistry
from patchbay.agents.external_adapter import ExternalAdapter
from patchbay.agents.message_bus import MessageBus
from patchbay.agents.orchestrator.orchestrator import ConversationOrchestrator
from patchbay.agents.participants import ParticipantSet
from patchbay.config.settings import Settings
from patchbay.services.analytics_service import AgentAnalytics
from patchbay.workers.api_worker import AnthropicAdapter, GeminiAdapter, OpenAIAdapter, UsageObserver
from patchbay.workers.bridge_worker import BridgeAdapter
from patchbay.workers.db_worker import AnalyticsRepository, MongoDBClient, ParticipantRepository

logger = logging.getLogger(__name__)


# Browser-side calls made by the bridge go straight to the vendor
GOOGLE_API_BASE = "https://generativelanguage.googleapis.com"


class AgentDefinition(BaseModel):
    """One entry of the agent line-up"""
    id: str
    display_name: str
    vendor: str  # openai | google | anthropic | bridge | manual
    model: str = ""


DEFAULT_AGENTS: List[AgentDefinition] = [
    AgentDefinition(id="openai-gpt-5.2-pro", display_name="GPT-5.2 Pro", vendor="openai", model="gpt-5.2-pro"),
    AgentDefinition(id="openai-gpt-5-mini", display_name="GPT-5 Mini", vendor="openai", model="gpt-5-mini"),
    AgentDefinition(id="google-gemini-3-pro", display_name="Gemini 3 Pro", vendor="google", model="gemini-3-pro-preview"),
    AgentDefinition(id="google-gemini-3-flash", display_name="Gemini 3 Flash", vendor="google", model="gemini-3-flash-preview"),
    AgentDefinition(id="google-gemini-2.5-flash", display_name="Gemini 2.5 Flash", vendor="google", model="gemini-2.5-flash"),
    AgentDefinition(id="google-gemma-3-27b", display_name="Gemma 3 27B", vendor="google", model="gemma-3-27b-it"),
    AgentDefinition(id="anthropic-claude-4.5-sonnet", display_name="Claude 4.5 Sonnet", vendor="anthropic", model="claude-sonnet-4-5"),
    AgentDefinition(id="anthropic-claude-4.5-haiku", display_name="Claude 4.5 Haiku", vendor="anthropic", model="claude-haiku-4-5"),
    AgentDefinition(id="anthropic-claude-4.5-opus", display_name="Claude 4.5 Opus", vendor="anthropic", model="claude-opus-4-5"),
    AgentDefinition(id="bridge-gemini-2.5-flash", display_name="Gemini Bridge", vendor="bridge", model="gemini-2.5-flash"),
    AgentDefinition(id="claude-web", display_name="External AI", vendor="manual"),
]


def build_agent(
    definition: AgentDefinition,
    settings: Settings,
    usage_observer: Optional[UsageObserver] = None,
) -> AgentAdapter:
    """
    Create the adapter for one catalog entry

    Args:
        definition: Catalog entry
        settings: Credentials and endpoints
        usage_observer: Receiver of vendor token usage

    Returns:
        Configured adapter

    Raises:
        ValueError: If the vendor is unknown
    """
    proxy = settings.proxy_base_url.rstrip("/")
    common = {
        "timeout": settings.adapter_timeout_seconds,
        "usage_observer": usage_observer,
    }

    if definition.vendor == "openai":
        return OpenAIAdapter(
            definition.id, definition.display_name, definition.model,
            endpoint=f"{proxy}/api/openai", api_key=settings.openai_api_key, **common,
        )
    if definition.vendor == "google":
        return GeminiAdapter(
            definition.id, definition.display_name, definition.model,
            endpoint=f"{proxy}/api/google", api_key=settings.google_api_key, **common,
        )
    if definition.vendor == "anthropic":
        return AnthropicAdapter(
            definition.id, definition.display_name, definition.model,
            endpoint=f"{proxy}/api/anthropic", api_key=settings.anthropic_api_key, **common,
        )
    if definition.vendor == "bridge":
        return BridgeAdapter(
            definition.id, definition.display_name, definition.model,
            endpoint=GOOGLE_API_BASE, api_key=settings.google_api_key,
            provider_type="gemini", bridge_url=settings.bridge_url, **common,
        )
    if definition.vendor == "manual":
        return ExternalAdapter(definition.id, definition.display_name)

    raise ValueError(f"Unknown vendor '{definition.vendor}' for agent {definition.id}")


def build_registry(
    settings: Settings,
    usage_observer: Optional[UsageObserver] = None,
    definitions: Optional[List[AgentDefinition]] = None,
) -> AgentRegistry:
    """
    Register the agent line-up

    Bridge agents are only registered when a bridge URL is configured.

    Args:
        settings: Credentials and endpoints
        usage_observer: Receiver of vendor token usage
        definitions: Line-up to build (defaults to DEFAULT_AGENTS)

    Returns:
        Populated registry
    """
    registry = AgentRegistry()
    for definition in definitions if definitions is not None else DEFAULT_AGENTS:
        if definition.vendor == "bridge" and not settings.bridge_url:
            logger.info(f"Skipping {definition.id}: BRIDGE_URL is not set")
            continue
        registry.register(build_agent(definition, settings, usage_observer))
    logger.info(f"Registered {len(registry)} agent(s)")
    return registry


def seed_participants(participants: ParticipantSet) -> None:
    """Put the first dispatchable agent in an empty participant set"""
    if len(participants) > 0:
        return
    for adapter in participants.registry.list_agents():
        if adapter.dispatchable:
            participants.join(adapter.id)
            return


def build_orchestrator(settings: Settings) -> ConversationOrchestrator:
    """
    Wire a conversation session from settings

    Participants and analytics are persisted in MongoDB when MONGODB_URI is
    set and kept in memory otherwise.

    Args:
        settings: Application settings

    Returns:
        Ready orchestrator with a message bus attached
    """
    participant_store = None
    analytics_store = None
    if settings.mongodb_uri:
        if not MongoDBClient.health_check():
            logger.warning("MongoDB is unreachable - persistence failures will be logged")
        participant_store = ParticipantRepository(settings.session_key)
        analytics_store = AnalyticsRepository(settings.session_key)
        logger.info(f"Persisting session '{settings.session_key}' to MongoDB")
    else:
        logger.info("MONGODB_URI not set - participants and analytics kept in memory")

    analytics = AgentAnalytics(store=analytics_store)
    registry = build_registry(settings, usage_observer=analytics)

    participants = ParticipantSet(registry, store=participant_store)
    participants.restore()
    seed_participants(participants)

    return ConversationOrchestrator(
        registry,
        participants=participants,
        observer=analytics,
        message_bus=MessageBus(),
    )
