"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .session_repository import SessionRepository
from .user_storage import UserStorage

__all__ = ['StorageInterface', 'StorageError', 'LocalStorage', 'SessionRepository', 'UserStorage']
