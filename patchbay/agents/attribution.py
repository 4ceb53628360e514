"""
Attribution Formatter - Agent-relative views of the shared history

Another agent's reply is shown to a model as an attributed user turn, so a
model only ever sees its own replies as assistant turns.
"""

from typing import List, Sequence

from patchbay.models.message import Message, Role, ViewedMessage


def attribution_header(message: Message) -> str:
    """Header naming the author of a foreign agent message"""
    if message.author_handle:
        return f"{message.author_handle} wrote:"
    return f"[{message.author_id}] wrote:"


def format_history_for_agent(history: Sequence[Message], agent_id: str) -> List[ViewedMessage]:
    """
    Project the shared history into the view of one agent

    Args:
        history: History snapshot (not modified)
        agent_id: Agent the view is built for

    Returns:
        New list with one ViewedMessage per history entry, in order
    """
    view = []
    for message in history:
        if message.role == Role.USER or message.author_id is None:
            view.append(ViewedMessage(role=Role.USER, content=message.content))
        elif message.author_id == agent_id:
            view.append(ViewedMessage(role=Role.ASSISTANT, content=message.content))
        else:
            view.append(ViewedMessage(
                role=Role.USER,
                content=f"{attribution_header(message)}\n{message.content}",
            ))
    return view
