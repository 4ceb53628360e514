"""
API Worker module - direct vendor API adapters

Each adapter reaches one vendor through the local reverse proxy
"""

from .base import HttpAgentAdapter, UsageObserver
from .openai_adapter import OpenAIAdapter
from .gemini_adapter import GeminiAdapter
from .anthropic_adapter import AnthropicAdapter

__all__ = [
    "HttpAgentAdapter",
    "UsageObserver",
    "OpenAIAdapter",
    "GeminiAdapter",
    "AnthropicAdapter",
]
