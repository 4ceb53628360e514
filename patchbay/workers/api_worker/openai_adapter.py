"""
OpenAI Adapter - Chat Completions API through the local proxy
"""

import logging
from typing import Sequence

from patchbay.workers.api_worker.base import HttpAgentAdapter
from patchbay.workers.api_worker.payloads import build_openai_messages, parse_openai_response
from patchbay.models.message import ViewedMessage

logger = logging.getLogger(__name__)


class OpenAIAdapter(HttpAgentAdapter):
    """Agent backed by an OpenAI chat model"""

    vendor = "OpenAI"

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        api_key = self._require_key()

        payload = {
            "model": self.model,
            "messages": build_openai_messages(self.persona_prompt(), view),
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        logger.info(f"Calling OpenAI with model={self.model}, turns={len(view)}")
        data = await self._post_json(f"{self.endpoint}/v1/chat/completions", payload, headers)

        usage = data.get("usage") or {}
        self._report_usage(usage.get("prompt_tokens"), usage.get("completion_tokens"))

        return parse_openai_response(data)
