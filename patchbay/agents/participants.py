"""
Participant Set - Agents currently "in the hangar"

Tracks which registered agents receive mention and broadcast traffic.
Membership is persisted through an injected store after every change.
"""

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from patchbay.agents.agent_base import AgentAdapter
from patchbay.agents.agent_registry import AgentRegistry

logger = logging.getLogger(__name__)


class ParticipantStore(Protocol):
    """Persistence collaborator for participant membership"""

    def save(self, agent_ids: Sequence[str]) -> None:
        ...

    def load(self) -> List[str]:
        ...


class ParticipantSet:
    """
    Ordered set of participating agent ids

    Never contains an id absent from the registry. All operations are
    synchronous; persistence failures are logged and never undo the
    in-memory change.
    """

    def __init__(self, registry: AgentRegistry, store: Optional[ParticipantStore] = None):
        """
        Initialize participant set

        Args:
            registry: Registry the members must belong to
            store: Optional persistence collaborator
        """
        self.registry = registry
        self.store = store
        self._ids: List[str] = []

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._ids)

    def members(self) -> List[AgentAdapter]:
        """Participating adapters in membership order"""
        return [self.registry.agents[agent_id] for agent_id in self._ids if agent_id in self.registry]

    def join(self, agent_id: str) -> None:
        """
        Add an agent to the conversation

        No-op if already a member or not registered.
        """
        if agent_id in self._ids:
            return
        if agent_id not in self.registry:
            logger.warning(f"Ignoring join for unregistered agent: {agent_id}")
            return
        self._ids.append(agent_id)
        logger.info(f"{agent_id} joined the conversation")
        self._persist()

    def leave(self, agent_id: str) -> None:
        """Remove an agent from the conversation. No-op if absent."""
        if agent_id not in self._ids:
            return
        self._ids.remove(agent_id)
        logger.info(f"{agent_id} left the conversation")
        self._persist()

    def replace_all(self, agent_ids: Iterable[str]) -> None:
        """
        Replace membership, dropping ids unknown to the registry

        Args:
            agent_ids: New members in the desired order (duplicates collapse)
        """
        self._ids = self._filter(agent_ids)
        logger.info(f"Participants set to: {', '.join(self._ids) or '(none)'}")
        self._persist()

    def restore(self) -> None:
        """Load membership from the store, if any"""
        if self.store is None:
            return
        try:
            saved = self.store.load()
        except Exception as e:
            logger.error(f"Failed to load participants: {e}", exc_info=True)
            return
        self._ids = self._filter(saved)
        logger.info(f"Restored {len(self._ids)} participant(s)")

    def _filter(self, agent_ids: Iterable[str]) -> List[str]:
        filtered: List[str] = []
        for agent_id in agent_ids:
            if agent_id in self.registry and agent_id not in filtered:
                filtered.append(agent_id)
            elif agent_id not in self.registry:
                logger.warning(f"Dropping unregistered participant: {agent_id}")
        return filtered

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(list(self._ids))
        except Exception as e:
            logger.error(f"Failed to persist participants: {e}", exc_info=True)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(tuple(self._ids))
