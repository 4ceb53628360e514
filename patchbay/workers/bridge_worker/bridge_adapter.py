"""
Bridge Adapter - Vendor calls relayed through the browser-extension bridge

The bridge receives an API_REQUEST envelope, performs the HTTP call from the
browser and answers with ``{success, data: {ok, status, body}}`` or
``{success: false, error: {message}}``
"""

import json
import logging
from typing import Any, Dict, Optional, Sequence

from patchbay.agents.errors import AdapterError
from patchbay.models.agent import AgentStatus, Capability
from patchbay.models.message import ViewedMessage
from patchbay.workers.api_worker.base import HttpAgentAdapter
from patchbay.workers.api_worker.payloads import (
    build_gemini_contents,
    build_openai_messages,
    parse_gemini_response,
    parse_openai_response,
)

logger = logging.getLogger(__name__)


class BridgeAdapter(HttpAgentAdapter):
    """Agent reached through the remote bridge instead of a direct API call"""

    capability = Capability.REMOTE_BRIDGE
    vendor = "Bridge"

    SUPPORTED_TYPES = ("openai", "gemini")

    def __init__(self, *args, provider_type: str, bridge_url: Optional[str] = None, **kwargs):
        """
        Initialize adapter

        Args:
            provider_type: Wire format of the relayed call ("openai" or "gemini")
            bridge_url: Relay endpoint of the bridge
        """
        super().__init__(*args, **kwargs)
        if provider_type not in self.SUPPORTED_TYPES:
            raise ValueError(f"Unknown provider type: {provider_type}")
        self.provider_type = provider_type
        self.bridge_url = bridge_url

    async def check_status(self) -> AgentStatus:
        if not self.api_key:
            return AgentStatus.AUTH_MISSING
        if not self.bridge_url:
            return AgentStatus.UNREACHABLE
        return AgentStatus.READY

    def _build_request(self, api_key: str, view: Sequence[ViewedMessage]) -> Dict[str, Any]:
        persona = self.persona_prompt()
        if self.provider_type == "openai":
            url = f"{self.endpoint}/v1/chat/completions"
            headers = {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            }
            body = {"model": self.model, "messages": build_openai_messages(persona, view)}
        else:
            url = f"{self.endpoint}/v1beta/models/{self.model}:generateContent?key={api_key}"
            headers = {"Content-Type": "application/json"}
            body = {"contents": build_gemini_contents(persona, view)}

        return {
            "type": "API_REQUEST",
            "payload": {
                "url": url,
                "options": {
                    "method": "POST",
                    "headers": headers,
                    "body": json.dumps(body),
                },
            },
        }

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        api_key = self._require_key()
        if not self.bridge_url:
            raise AdapterError("Bridge is not configured. Is the extension installed?", agent_id=self.id)

        envelope = self._build_request(api_key, view)
        logger.info(f"Relaying {self.provider_type} request for {self.id} through the bridge")
        reply = await self._post_json(self.bridge_url, envelope, {"Content-Type": "application/json"})

        if not reply.get("success"):
            error = reply.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else None
            raise AdapterError(message or "Unknown error in extension.", agent_id=self.id)

        data = reply.get("data") or {}
        if not data.get("ok"):
            raise AdapterError(
                f"{self.provider_type} Error: {data.get('status')} - {json.dumps(data.get('body'))}",
                agent_id=self.id,
            )

        response_body = data.get("body") or {}
        if self.provider_type == "openai":
            return parse_openai_response(response_body)
        return parse_gemini_response(response_body)
