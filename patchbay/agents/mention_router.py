"""
Mention Router - Resolve @mentions in user text to target agents

Parses raw user text into the agents it addresses plus the message body with
the recognized mentions removed
"""

import logging
import re
from typing import List, Sequence

from patchbay.agents.agent_base import AgentAdapter
from patchbay.models.dispatch import RoutingResult

logger = logging.getLogger(__name__)


class MentionRouter:
    """
    Regex-based mention resolution

    A mention is ``@`` followed by a name made of letters, digits, ``.``, ``-``,
    ``_`` and parentheses, or by a double-quoted phrase. It must start the text
    or follow whitespace, so e-mail addresses are not mentions.

    A mention addresses every participant whose normalized display name starts
    with the normalized mention. A trailing ``.`` and any ``)`` left unbalanced
    at the end of a bare name, as in ``(cc @Gemini)``, are not part of it.
    ``@all`` and ``@everyone`` address the whole participant set and override
    all other mentions.
    """

    MENTION_PATTERN = re.compile(r'(?<!\S)@(?:"([^"]+)"|([\w.\-()]+))')

    BROADCAST_TOKENS = frozenset({"all", "everyone"})

    @staticmethod
    def normalize(value: str) -> str:
        """Lower-case and drop all whitespace"""
        return re.sub(r"\s+", "", value).lower()

    @classmethod
    def extract_mentions(cls, text: str) -> List[str]:
        """
        Extract raw mention names from text

        Args:
            text: Raw user text

        Returns:
            Mention names without the ``@`` and quotes, in order of appearance
        """
        if not text:
            return []
        return [
            quoted or cls._strip_closing_parens(bare)
            for quoted, bare in cls.MENTION_PATTERN.findall(text)
        ]

    @staticmethod
    def _strip_closing_parens(name: str) -> str:
        stem = name.rstrip(".")
        trimmed = stem
        while trimmed.endswith(")") and trimmed.count(")") > trimmed.count("("):
            trimmed = trimmed[:-1]
        return name if trimmed == stem else trimmed

    @classmethod
    def match_participants(cls, mention: str, participants: Sequence[AgentAdapter]) -> List[str]:
        """
        Ids of the participants a single mention addresses

        Args:
            mention: Mention name without ``@``
            participants: Candidate agents in membership order

        Returns:
            Matching agent ids in membership order
        """
        token = cls.normalize(mention).rstrip(".")
        if not token:
            return []
        return [
            agent.id for agent in participants
            if cls.normalize(agent.display_name).startswith(token)
        ]

    @classmethod
    def route(cls, text: str, participants: Sequence[AgentAdapter]) -> RoutingResult:
        """
        Resolve the targets and body of a raw user message

        Args:
            text: Raw user text
            participants: Current participants in membership order. Manual
                agents are ignored since they are never dispatched to.

        Returns:
            RoutingResult with ordered, duplicate-free targets and the stripped body
        """
        text = text or ""
        candidates = [agent for agent in participants if agent.dispatchable]

        targets: List[str] = []
        broadcast = False
        pieces: List[str] = []
        cursor = 0

        for match in cls.MENTION_PATTERN.finditer(text):
            quoted, bare = match.group(1), match.group(2)
            mention = quoted or cls._strip_closing_parens(bare)
            # Stripped parens stay in the body
            end = match.end() if quoted or mention == bare else match.start(2) + len(mention)
            normalized = cls.normalize(mention)

            if normalized in cls.BROADCAST_TOKENS:
                broadcast = True
                recognized = True
            else:
                matched = cls.match_participants(mention, candidates)
                for agent_id in matched:
                    if agent_id not in targets:
                        targets.append(agent_id)
                recognized = bool(matched)
                if not recognized:
                    logger.debug(f"Mention @{mention} matches no participant, leaving it as text")

            if recognized:
                pieces.append(text[cursor:match.start()])
                cursor = end
                # swallow one separating space so "@A hi @B there" -> "hi there"
                if text[cursor:cursor + 1] == " ":
                    cursor += 1

        pieces.append(text[cursor:])
        body = "".join(pieces).strip()

        if broadcast:
            targets = [agent.id for agent in candidates]

        return RoutingResult(targets=tuple(targets), body=body, broadcast=broadcast)
