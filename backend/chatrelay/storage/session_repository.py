"""
Session Repository - Persistent storage of chat sessions using StorageInterface.

Layout under the storage root:
    sessions/<session_id>.json       full session document
    share_tokens/<token>.json        {"session_id": ...} reverse index

Every read-modify-write of a session document runs under that session's
lock, which makes ``append_messages`` atomic for concurrent callers.
"""

import asyncio
import functools
import json
import logging
import re
import uuid
import weakref
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from ..core.errors import StorageUnavailable
from ..models import ChatMessage, Session
from .interface import StorageInterface, StorageError

logger = logging.getLogger(__name__)

SHARE_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{32}$")
FIRST_EXCHANGE_LENGTH = 2


def _translate_storage_errors(method):
    """Re-raise backend failures as StorageUnavailable."""

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except StorageError as e:
            raise StorageUnavailable(str(e)) from e

    return wrapper


def _is_valid_session_id(session_id: str) -> bool:
    try:
        return str(uuid.UUID(session_id)) == session_id
    except (ValueError, TypeError, AttributeError):
        return False


class SessionRepository:
    """
    Stores Session documents as JSON files.
    Malformed ids and tokens are treated as unknown rather than as errors.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.sessions_dir = "sessions"
        self.share_dir = "share_tokens"
        # Entries vanish once no coroutine holds or waits on the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def _session_path(self, session_id: str) -> str:
        return f"{self.sessions_dir}/{session_id}.json"

    def _share_path(self, token: str) -> str:
        return f"{self.share_dir}/{token}.json"

    async def _read(self, session_id: str) -> Optional[Session]:
        if not _is_valid_session_id(session_id):
            return None
        content = await self.storage.load(self._session_path(session_id))
        if content is None:
            return None
        try:
            return Session.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"Corrupt session document {session_id}: {e}")
            raise StorageError(f"Corrupt session document {session_id}") from e

    async def _write(self, session: Session) -> None:
        await self.storage.save(self._session_path(session.id), session.model_dump_json(indent=2))

    @_translate_storage_errors
    async def create(self, session: Session) -> Session:
        async with self._lock(session.id):
            await self._write(session)
        return session

    @_translate_storage_errors
    async def get(self, session_id: str) -> Optional[Session]:
        return await self._read(session_id)

    @_translate_storage_errors
    async def get_by_share_token(self, token: str) -> Optional[Session]:
        if not token or not SHARE_TOKEN_PATTERN.match(token):
            return None

        content = await self.storage.load(self._share_path(token))
        if content is None:
            return None
        try:
            session_id = json.loads(content.decode('utf-8'))["session_id"]
        except (ValueError, KeyError, TypeError):
            logger.warning(f"Ignoring unreadable share index entry {token[:6]}...")
            return None

        session = await self._read(session_id)
        # The index may briefly point at a replaced token
        if session is None or session.share_token != token:
            return None
        return session

    @_translate_storage_errors
    async def list_by_owner(self, owner: str) -> List[Session]:
        """Sessions owned by ``owner``, most recently updated first."""
        files = await self.storage.list(self.sessions_dir, pattern="*.json")

        sessions = []
        for file_path in files:
            content = await self.storage.load(file_path)
            if content is None:
                # Deleted while listing
                continue
            try:
                session = Session.model_validate_json(content)
            except ValidationError:
                logger.warning(f"Skipping corrupt session document {file_path}")
                continue
            if session.owner == owner:
                sessions.append(session)

        sessions.sort(key=lambda s: s.last_updated, reverse=True)
        return sessions

    @_translate_storage_errors
    async def delete(self, session_id: str) -> bool:
        async with self._lock(session_id):
            session = await self._read(session_id)
            if session is None:
                return False
            await self.storage.delete(self._session_path(session_id))
            if session.share_token:
                await self.storage.delete(self._share_path(session.share_token))
        self._locks.pop(session_id, None)
        return True

    @_translate_storage_errors
    async def append_messages(
        self,
        session_id: str,
        messages: List[ChatMessage],
        first_title: Optional[str] = None,
    ) -> Optional[int]:
        """
        Atomically append messages and refresh ``last_updated``.

        When the append takes the session from empty to exactly one exchange,
        ``first_title`` (if given) is stored in the same write.

        Returns:
            Optional[int]: Message count right after this append, or None if the
            session does not exist
        """
        async with self._lock(session_id):
            session = await self._read(session_id)
            if session is None:
                return None
            session.messages.extend(messages)
            if first_title is not None and len(session.messages) == FIRST_EXCHANGE_LENGTH:
                session.title = first_title
            session.last_updated = datetime.now(timezone.utc)
            await self._write(session)
            return len(session.messages)

    @_translate_storage_errors
    async def set_share_token(self, session_id: str, token: str) -> bool:
        """Store ``token`` on the session and index it, retiring any previous token."""
        async with self._lock(session_id):
            session = await self._read(session_id)
            if session is None:
                return False

            previous = session.share_token
            await self.storage.save(self._share_path(token), json.dumps({"session_id": session_id}))
            session.share_token = token
            await self._write(session)
            if previous and previous != token:
                await self.storage.delete(self._share_path(previous))
            return True
