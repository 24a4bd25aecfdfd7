"""
Session Models - Defines structures for chat sessions and their messages.
"""

from datetime import datetime, timezone
from typing import Optional, List, Literal
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """One entry of a conversation."""
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class Session(BaseModel):
    """Full session document as persisted."""
    id: str
    owner: str
    title: str
    messages: List[ChatMessage] = Field(default_factory=list)
    share_token: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    last_updated: datetime = Field(default_factory=_utcnow)


class SessionSummary(BaseModel):
    """Session entry as shown in the owner's session list."""
    id: str
    title: str
    message_count: int
    shared: bool
    created_at: datetime
    last_updated: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            id=session.id,
            title=session.title,
            message_count=len(session.messages),
            shared=session.share_token is not None,
            created_at=session.created_at,
            last_updated=session.last_updated,
        )


class SharedSession(BaseModel):
    """Read-only view exposed through a share link (no owner, no token)."""
    title: str
    messages: List[ChatMessage]
    last_updated: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SharedSession":
        return cls(
            title=session.title,
            messages=session.messages,
            last_updated=session.last_updated,
        )


class SessionCreate(BaseModel):
    """Request body for creating a session."""
    title: Optional[str] = Field(None, max_length=200)


class MessageRequest(BaseModel):
    """Request body for sending a message."""
    input: Optional[str] = None


class MessageReply(BaseModel):
    reply: str


class ShareLink(BaseModel):
    share_token: str
    share_url: str
