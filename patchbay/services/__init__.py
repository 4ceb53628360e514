"""
Services module - collaborators observing the conversation core
"""

from patchbay.services.analytics_service import AgentAnalytics, DEFAULT_PRICING

__all__ = [
    "AgentAnalytics",
    "DEFAULT_PRICING",
]
