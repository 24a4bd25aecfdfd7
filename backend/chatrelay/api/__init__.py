"""API module."""

from .auth import router as auth_router
from .sessions import router as sessions_router
from .share import router as share_router

__all__ = ['auth_router', 'sessions_router', 'share_router']
