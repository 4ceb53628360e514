"""
Anthropic Adapter - Messages API through the local proxy
"""

import logging
from typing import Sequence

from patchbay.workers.api_worker.base import HttpAgentAdapter
from patchbay.workers.api_worker.payloads import build_anthropic_messages, parse_anthropic_response
from patchbay.models.message import ViewedMessage

logger = logging.getLogger(__name__)


class AnthropicAdapter(HttpAgentAdapter):
    """Agent backed by an Anthropic Claude model"""

    vendor = "Anthropic"
    API_VERSION = "2023-06-01"
    MAX_TOKENS = 4096

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        api_key = self._require_key()

        payload = {
            "model": self.model,
            "max_tokens": self.MAX_TOKENS,
            "system": self.persona_prompt(),
            "messages": build_anthropic_messages(view),
        }
        headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self.API_VERSION,
        }

        logger.info(f"Calling Anthropic with model={self.model}, turns={len(view)}")
        data = await self._post_json(f"{self.endpoint}/v1/messages", payload, headers)

        usage = data.get("usage") or {}
        self._report_usage(usage.get("input_tokens"), usage.get("output_tokens"))

        return parse_anthropic_response(data)
