"""
Gemini Adapter - Google Gemini models via the google-genai SDK

Uses the SDK's async client pointed at the local proxy
"""

import logging
from typing import Optional, Sequence

from google import genai
from google.genai import errors, types

from patchbay.agents.errors import AdapterError
from patchbay.workers.api_worker.base import HttpAgentAdapter
from patchbay.workers.api_worker.payloads import NO_GEMINI_RESPONSE, build_gemini_contents
from patchbay.models.message import ViewedMessage

logger = logging.getLogger(__name__)


class GeminiAdapter(HttpAgentAdapter):
    """Agent backed by a Google Gemini (or Gemma) model"""

    vendor = "Gemini"

    def __init__(self, *args, temperature: float = 0.7, **kwargs):
        super().__init__(*args, **kwargs)
        self.temperature = temperature
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._require_key(),
                http_options=types.HttpOptions(
                    base_url=self.endpoint,
                    timeout=int(self.timeout * 1000),
                ),
            )
        return self._client

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        client = self._get_client()
        contents = build_gemini_contents(self.persona_prompt(), view)

        logger.info(f"Calling Gemini with model={self.model}, turns={len(contents)}")

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config={
                    'temperature': self.temperature,
                },
            )
        except errors.APIError as e:
            raise AdapterError(f"Gemini Error: {e.code} - {e.message}", agent_id=self.id)
        except Exception as e:
            raise AdapterError(f"Gemini request failed: {e}", agent_id=self.id)

        # Check finish_reason for debugging
        if response.candidates:
            finish_reason = getattr(response.candidates[0], 'finish_reason', None)
            if finish_reason and finish_reason != 'STOP':
                logger.warning(f"Gemini finished with reason: {finish_reason} (not STOP)")

        usage = getattr(response, 'usage_metadata', None)
        if usage is not None:
            self._report_usage(
                getattr(usage, 'prompt_token_count', None),
                getattr(usage, 'candidates_token_count', None),
            )

        return response.text or NO_GEMINI_RESPONSE
