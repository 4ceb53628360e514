"""
Message data models for the shared conversation thread

A Message is one committed entry of the shared history. A ViewedMessage is the
role/content pair an agent receives after attribution.
"""

from datetime import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker role of a message"""
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Committed history entry (immutable)"""

    model_config = ConfigDict(
        frozen=True,
        json_encoders={dt: lambda v: v.isoformat()}
    )

    role: Role = Field(..., description="user or assistant")
    content: str = Field(..., description="Message text")
    author_id: Optional[str] = Field(None, description="Authoring agent id (None for the user)")
    author_handle: Optional[str] = Field(None, description="Authoring agent handle, e.g. @GPT-5Mini")
    created_at: dt = Field(default_factory=dt.utcnow, description="Commit timestamp (UTC)")

    @classmethod
    def from_user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def from_agent(cls, content: str, author_id: str, author_handle: Optional[str]) -> "Message":
        return cls(
            role=Role.ASSISTANT,
            content=content,
            author_id=author_id,
            author_handle=author_handle,
        )

    @property
    def is_user(self) -> bool:
        return self.author_id is None


class ViewedMessage(BaseModel):
    """One turn of an agent-relative view of the history"""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
