"""
History Store - The shared, append-only conversation thread

One writer appends; readers only ever receive immutable snapshots.
"""

import logging
from typing import List, Tuple

from patchbay.models.message import Message

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Append-only ordered sequence of messages for one session

    Entries are never reordered, edited or removed individually;
    only the whole history can be cleared.
    """

    def __init__(self):
        self._messages: List[Message] = []
        # Bumped on every clear
        self.generation = 0

    def append(self, message: Message) -> int:
        """
        Commit a message

        Args:
            message: Message to append

        Returns:
            Position of the committed message
        """
        self._messages.append(message)
        return len(self._messages) - 1

    def snapshot(self) -> Tuple[Message, ...]:
        """Immutable copy of the history as it stands now"""
        return tuple(self._messages)

    def clear(self) -> None:
        count = len(self._messages)
        self._messages = []
        self.generation += 1
        logger.info(f"Cleared history ({count} messages)")

    def __len__(self) -> int:
        return len(self._messages)
