"""
External Adapter - An agent relayed by hand from an outside chat UI

The user copies the delta context into the other UI and pastes the reply
back; the orchestrator never dispatches to this agent
"""

import logging
from typing import Sequence

from patchbay.agents.agent_base import AgentAdapter
from patchbay.models.agent import AgentStatus, Capability
from patchbay.models.message import Message, ViewedMessage

logger = logging.getLogger(__name__)


class ExternalAdapter(AgentAdapter):
    """Manual copy/paste relay with a sync cursor into the history"""

    capability = Capability.MANUAL

    def __init__(self, agent_id: str, display_name: str):
        super().__init__(agent_id, display_name)
        self.last_synced_index = 0

    async def check_status(self) -> AgentStatus:
        return AgentStatus.READY

    async def send_prompt(self, body: str, view: Sequence[ViewedMessage]) -> str:
        logger.warning(f"send_prompt called on manual agent {self.id}, which is a no-op")
        return "This is an external agent. Use the 'Sync' button to copy the context."

    def get_delta_context(self, history: Sequence[Message]) -> str:
        """
        Format the history since the last sync and advance the cursor

        Args:
            history: Snapshot of the entire history

        Returns:
            Paste-ready context, or a notice when nothing is new
        """
        new_messages = history[self.last_synced_index:]
        if not new_messages:
            return "No new messages to sync."

        blocks = []
        for message in new_messages:
            if message.is_user:
                handle = "@User"
            else:
                handle = message.author_handle or f"[@{message.author_id}]"
            blocks.append(f"{handle}:\n{message.content}")

        self.last_synced_index = len(history)
        logger.info(f"Synced {self.id}. New index: {self.last_synced_index}")

        formatted = "\n\n---\n\n".join(blocks)
        return (
            f"You are {self.handle}. Continue the conversation based on the following history:"
            f"\n\n---\n\n{formatted}"
        )

    def reset_sync(self) -> None:
        self.last_synced_index = 0
