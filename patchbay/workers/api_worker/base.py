"""
HTTP agent adapter base - shared plumbing for vendor API adapters

Handles credentials, status checks, token usage reporting and blocking
HTTP calls run off the event loop
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import requests
from requests.exceptions import HTTPError, RequestException

from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.errors import AdapterError
from patchbay.models.agent import AgentStatus

logger = logging.getLogger(__name__)


class UsageObserver(Protocol):
    """Receives token counts reported by vendors"""

    def record_usage(self, agent_id: str, input_tokens: int, output_tokens: int) -> None:
        ...


class HttpAgentAdapter(AgentAdapter):
    """
    Base for adapters that call a vendor over HTTP

    ``requests`` is blocking, so every call runs in a worker thread and the
    other branches of a dispatch round keep progressing
    """

    vendor = "http"

    def __init__(
        self,
        agent_id: str,
        display_name: str,
        model: str,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        usage_observer: Optional[UsageObserver] = None,
    ):
        """
        Initialize adapter

        Args:
            agent_id: Unique identifier
            display_name: Human-readable name
            model: Vendor model name
            endpoint: Base URL (usually the local proxy's vendor prefix)
            api_key: Vendor API key
            timeout: Request timeout in seconds
            usage_observer: Optional receiver of token usage
        """
        super().__init__(agent_id, display_name, model)
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.usage_observer = usage_observer

    async def check_status(self) -> AgentStatus:
        if not self.api_key:
            return AgentStatus.AUTH_MISSING
        return AgentStatus.READY

    def _require_key(self) -> str:
        if not self.api_key:
            raise AdapterError(f"Missing API Key for {self.display_name}", agent_id=self.id)
        return self.api_key

    async def _post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        """
        POST a JSON body and decode the JSON reply

        Raises:
            AdapterError: On transport errors, non-2xx status or a non-JSON body
        """
        def _do_post() -> Dict[str, Any]:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        try:
            return await asyncio.to_thread(_do_post)
        except HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            detail = e.response.text[:500] if e.response is not None else str(e)
            raise AdapterError(f"{self.vendor} Error: {status} - {detail}", agent_id=self.id)
        except RequestException as e:
            raise AdapterError(f"{self.vendor} request failed: {e}", agent_id=self.id)
        except ValueError as e:
            raise AdapterError(f"{self.vendor} returned invalid JSON: {e}", agent_id=self.id)

    def _report_usage(self, input_tokens: Optional[int], output_tokens: Optional[int]) -> None:
        if self.usage_observer is None or (input_tokens is None and output_tokens is None):
            return
        logger.info(f"Token usage for {self.id}: input={input_tokens}, output={output_tokens}")
        try:
            self.usage_observer.record_usage(self.id, input_tokens or 0, output_tokens or 0)
        except Exception as e:
            logger.error(f"Failed to record token usage for {self.id}: {e}", exc_info=True)
