"""
FastAPI server for the Patchbay API

Exposes the shared conversation: agents, participants, messages, history,
manual relay, analytics and a server-sent event stream
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from patchbay import __version__
from patchbay.agents import ConversationOrchestrator
from patchbay.agents.errors import DispatchContractError, UnknownTargetError
from patchbay.api.auth import (
    JWTBearer,
    TokenPayload,
    ClientCredentials,
    TokenResponse,
    create_access_token,
    verify_client_credentials,
)
from patchbay.api.middleware.audit_logger import audit_log_middleware
from patchbay.config.settings import get_settings
from patchbay.models import AgentInfo, AnalyticsSnapshot, Message, TargetOutcome
from patchbay.services.analytics_service import AgentAnalytics

logger = logging.getLogger(__name__)

# Seconds between keep-alive comments on an idle event stream
SSE_KEEPALIVE_SECONDS = 15.0


# Request/Response Models
class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    version: str
    agents_registered: int
    participants: int


class MessageRequest(BaseModel):
    """User message to route and dispatch"""
    text: str = Field(..., min_length=1)
    targets: Optional[List[str]] = Field(
        default=None,
        description="Explicit targets; when omitted the message is routed by its mentions",
    )


class DispatchResponse(BaseModel):
    """Outcome of one dispatch round"""
    user_message: Message
    body: str
    targets: List[str]
    passive: bool
    outcomes: List[TargetOutcome]


class ParticipantsUpdate(BaseModel):
    """Full replacement of the participant set"""
    agent_ids: List[str]


class ParticipantsResponse(BaseModel):
    agent_ids: List[str]


class PasteRequest(BaseModel):
    """Reply relayed back from a manual agent"""
    text: str = Field(..., min_length=1)


class SyncResponse(BaseModel):
    agent_id: str
    context: str


# Global orchestrator instance (set on startup)
_orchestrator: Optional[ConversationOrchestrator] = None


def set_orchestrator(orchestrator: Optional[ConversationOrchestrator]):
    """Set the global orchestrator instance"""
    global _orchestrator
    _orchestrator = orchestrator


def get_orchestrator() -> ConversationOrchestrator:
    """Get the global orchestrator instance"""
    if _orchestrator is None:
        raise HTTPException(status_code=503, detail="Orchestrator not initialized")
    return _orchestrator


def get_analytics() -> AgentAnalytics:
    observer = get_orchestrator().observer
    if not isinstance(observer, AgentAnalytics):
        raise HTTPException(status_code=503, detail="Analytics not enabled")
    return observer


async def authenticated(
    request: Request,
    response: Response,
    token_payload: TokenPayload = Depends(JWTBearer()),
) -> TokenPayload:
    """JWT dependency that also adds the renewal hint header"""
    if getattr(request.state, "should_renew_token", False):
        response.headers["X-Token-Renewal-Suggested"] = "true"
    return token_payload


def _require_agent(orchestrator: ConversationOrchestrator, agent_id: str):
    try:
        return orchestrator.agent_registry.require(agent_id)
    except UnknownTargetError as e:
        raise HTTPException(status_code=404, detail=str(e))


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="Patchbay API",
        description="Shared multi-agent conversation with mention routing and concurrent dispatch",
        version=__version__,
    )

    # Startup event: build the session from settings
    @app.on_event("startup")
    async def startup_event():
        """Initialize orchestrator on application startup"""
        from patchbay.agents.catalog import build_orchestrator

        if _orchestrator is not None:
            return

        logger.info("🎭 Initializing orchestrator...")
        orchestrator = build_orchestrator(settings)
        set_orchestrator(orchestrator)
        logger.info(
            f"✅ Orchestrator ready: {len(orchestrator.agent_registry)} agent(s), "
            f"{len(orchestrator.participants)} participant(s)"
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        """Flush pending analytics writes and release the database connection"""
        from patchbay.workers.db_worker import MongoDBClient

        if _orchestrator is not None and isinstance(_orchestrator.observer, AgentAnalytics):
            await _orchestrator.observer.flush()
        MongoDBClient.close()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Audit logging middleware (logs all authenticated requests)
    app.middleware("http")(audit_log_middleware)

    # Health check endpoint (no auth required)
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Service status and basic info"""
        orchestrator = _orchestrator
        registered = len(orchestrator.agent_registry) if orchestrator else 0
        participants = len(orchestrator.participants) if orchestrator else 0

        return HealthResponse(
            status="healthy" if participants > 0 else "degraded",
            timestamp=datetime.utcnow(),
            version=__version__,
            agents_registered=registered,
            participants=participants,
        )

    # Authentication endpoints
    @app.post("/auth/token", response_model=TokenResponse, tags=["Authentication"])
    async def get_token(credentials: ClientCredentials):
        """
        Obtain JWT access token

        Requires valid client_id and client_secret. Token expires in 24 hours.
        """
        verify_client_credentials(credentials.client_id, credentials.client_secret)
        return TokenResponse(**create_access_token(credentials.client_id))

    @app.post("/auth/refresh", response_model=TokenResponse, tags=["Authentication"])
    async def refresh_token(token_payload: TokenPayload = Depends(authenticated)):
        """Exchange a valid token for a new one with a fresh expiry"""
        return TokenResponse(**create_access_token(token_payload.client_id))

    # Agents
    @app.get("/agents", response_model=List[AgentInfo], tags=["Agents"])
    async def list_agents(_: TokenPayload = Depends(authenticated)):
        """All registered agents with their current status and membership"""
        orchestrator = get_orchestrator()
        adapters = orchestrator.agent_registry.list_agents()
        statuses = await asyncio.gather(*[adapter.check_status() for adapter in adapters])
        return [
            adapter.info(status=status, is_participant=adapter.id in orchestrator.participants)
            for adapter, status in zip(adapters, statuses)
        ]

    @app.get("/agents/{agent_id}/sync", response_model=SyncResponse, tags=["Agents"])
    async def sync_manual_agent(agent_id: str, _: TokenPayload = Depends(authenticated)):
        """Context a manual agent has not seen yet; advances its sync cursor"""
        orchestrator = get_orchestrator()
        _require_agent(orchestrator, agent_id)
        try:
            context = orchestrator.sync_manual_context(agent_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return SyncResponse(agent_id=agent_id, context=context)

    @app.post("/agents/{agent_id}/paste", response_model=Message, tags=["Agents"])
    async def paste_manual_reply(
        agent_id: str,
        paste: PasteRequest,
        _: TokenPayload = Depends(authenticated),
    ):
        """Commit a reply relayed back from a manual agent"""
        orchestrator = get_orchestrator()
        _require_agent(orchestrator, agent_id)
        try:
            return orchestrator.paste_manual_reply(agent_id, paste.text)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    # Participants
    @app.get("/participants", response_model=ParticipantsResponse, tags=["Participants"])
    async def get_participants(_: TokenPayload = Depends(authenticated)):
        return ParticipantsResponse(agent_ids=list(get_orchestrator().participants.ids))

    @app.put("/participants", response_model=ParticipantsResponse, tags=["Participants"])
    async def replace_participants(
        update: ParticipantsUpdate,
        _: TokenPayload = Depends(authenticated),
    ):
        """Replace the participant set; unregistered ids are dropped"""
        participants = get_orchestrator().participants
        participants.replace_all(update.agent_ids)
        return ParticipantsResponse(agent_ids=list(participants.ids))

    @app.post("/participants/{agent_id}", response_model=ParticipantsResponse, tags=["Participants"])
    async def join_participant(agent_id: str, _: TokenPayload = Depends(authenticated)):
        orchestrator = get_orchestrator()
        _require_agent(orchestrator, agent_id)
        orchestrator.participants.join(agent_id)
        return ParticipantsResponse(agent_ids=list(orchestrator.participants.ids))

    @app.delete("/participants/{agent_id}", response_model=ParticipantsResponse, tags=["Participants"])
    async def leave_participant(agent_id: str, _: TokenPayload = Depends(authenticated)):
        orchestrator = get_orchestrator()
        _require_agent(orchestrator, agent_id)
        orchestrator.participants.leave(agent_id)
        return ParticipantsResponse(agent_ids=list(orchestrator.participants.ids))

    # Conversation
    @app.post("/messages", response_model=DispatchResponse, tags=["Conversation"])
    async def send_message(request: MessageRequest, _: TokenPayload = Depends(authenticated)):
        """
        Send a user message

        Without explicit targets the message is routed by its mentions. A
        message that addresses nobody is saved passively.
        """
        orchestrator = get_orchestrator()
        try:
            if request.targets is None:
                dispatch_round = await orchestrator.send(request.text)
            else:
                dispatch_round = await orchestrator.dispatch(request.text, request.targets)
        except DispatchContractError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return DispatchResponse(
            user_message=dispatch_round.user_message,
            body=dispatch_round.body,
            targets=list(dispatch_round.targets),
            passive=dispatch_round.passive,
            outcomes=dispatch_round.outcomes,
        )

    @app.get("/history", response_model=List[Message], tags=["Conversation"])
    async def get_history(_: TokenPayload = Depends(authenticated)):
        return list(get_orchestrator().get_history())

    @app.delete("/history", status_code=204, tags=["Conversation"])
    async def clear_history(_: TokenPayload = Depends(authenticated)):
        """Clear the whole history and reset manual sync cursors"""
        get_orchestrator().clear_history()
        return Response(status_code=204)

    # Analytics
    @app.get("/analytics", response_model=AnalyticsSnapshot, tags=["Analytics"])
    async def read_analytics(_: TokenPayload = Depends(authenticated)):
        return get_analytics().get_analytics()

    @app.delete("/analytics", status_code=204, tags=["Analytics"])
    async def clear_analytics(_: TokenPayload = Depends(authenticated)):
        get_analytics().clear()
        return Response(status_code=204)

    # Server-sent events
    @app.get("/events", tags=["Events"])
    async def stream_events(request: Request, _: TokenPayload = Depends(authenticated)):
        """Stream dispatch progress events as they are published"""
        message_bus = get_orchestrator().message_bus
        if message_bus is None:
            raise HTTPException(status_code=503, detail="Event bus not enabled")

        subscriber = f"sse-{uuid4().hex}"
        message_bus.subscribe(subscriber)
        logger.info(f"Event stream opened: {subscriber}")

        async def event_stream():
            try:
                while not await request.is_disconnected():
                    event = await message_bus.receive(subscriber, timeout=SSE_KEEPALIVE_SECONDS)
                    if event is None:
                        yield ": keep-alive\n\n"
                        continue
                    yield f"event: {event.type.value}\ndata: {event.model_dump_json()}\n\n"
            finally:
                message_bus.unsubscribe(subscriber)
                logger.info(f"Event stream closed: {subscriber}")

        return StreamingResponse(event_stream(), media_type="text/event-stream")

    return app
