"""
Dependency providers for route handlers.
Services are built once in the application lifespan and kept on app.state.
"""

from fastapi import Request

from ..core.message_relay import MessageRelay
from ..core.session_manager import SessionManager
from ..storage import UserStorage


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_message_relay(request: Request) -> MessageRelay:
    return request.app.state.message_relay


def get_user_storage(request: Request) -> UserStorage:
    return request.app.state.user_storage
