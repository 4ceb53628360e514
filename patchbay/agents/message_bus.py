"""
Message Bus - Dispatch progress events for UI subscribers

Provides non-blocking fan-out of dispatch events using async queues
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event types published by the orchestrator"""
    TARGET_SUCCEEDED = "target_succeeded"   # One target replied and was committed
    TARGET_FAILED = "target_failed"         # One target failed, nothing committed
    ROUND_COMPLETE = "round_complete"       # Every target of a round resolved
    HISTORY_CLEARED = "history_cleared"     # The whole history was cleared


class DispatchEvent(BaseModel):
    """Event published on the bus"""

    type: EventType
    agent_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)


class MessageBus:
    """
    Event bus for UI subscribers

    Every subscriber gets its own unbounded queue, so publishing never waits
    on a slow consumer
    """

    def __init__(self):
        """Initialize message bus"""
        self.queues: Dict[str, asyncio.Queue] = {}

    def subscribe(self, subscriber: str) -> asyncio.Queue:
        """
        Register a subscriber to receive events

        Args:
            subscriber: Unique name of the subscriber

        Returns:
            The subscriber's queue
        """
        if subscriber not in self.queues:
            self.queues[subscriber] = asyncio.Queue()
        return self.queues[subscriber]

    def unsubscribe(self, subscriber: str) -> None:
        """
        Unregister a subscriber

        Args:
            subscriber: Name of the subscriber to unregister
        """
        if subscriber in self.queues:
            del self.queues[subscriber]

    def publish(self, event: DispatchEvent) -> None:
        """
        Publish an event to every subscriber without blocking

        Args:
            event: Event to publish
        """
        for queue in self.queues.values():
            queue.put_nowait(event)

    async def receive(self, subscriber: str, timeout: Optional[float] = None) -> Optional[DispatchEvent]:
        """
        Receive the next event for a subscriber

        Args:
            subscriber: Name of the subscriber
            timeout: Optional timeout in seconds

        Returns:
            Event if available, None if timeout
        """
        if subscriber not in self.queues:
            raise ValueError(f"Subscriber '{subscriber}' not registered")

        try:
            if timeout:
                return await asyncio.wait_for(self.queues[subscriber].get(), timeout=timeout)
            return await self.queues[subscriber].get()
        except asyncio.TimeoutError:
            return None

    def has_events(self, subscriber: str) -> bool:
        """
        Check if subscriber has pending events

        Args:
            subscriber: Name of the subscriber

        Returns:
            True if events are pending
        """
        if subscriber not in self.queues:
            return False
        return not self.queues[subscriber].empty()
