"""Models module."""

from .user import UserCredentials, User, AuthResponse, TokenData
from .session import (
    ChatMessage, Session, SessionSummary, SharedSession,
    SessionCreate, MessageRequest, MessageReply, ShareLink,
)

__all__ = [
    'UserCredentials', 'User', 'AuthResponse', 'TokenData',
    'ChatMessage', 'Session', 'SessionSummary', 'SharedSession',
    'SessionCreate', 'MessageRequest', 'MessageReply', 'ShareLink',
]
