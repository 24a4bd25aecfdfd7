"""
Session Manager - session lifecycle, ownership checks, title derivation and
share-token issuance.
"""

import logging
import secrets
import uuid
from typing import List, Optional, Tuple

from ..models import ChatMessage, Session, SessionSummary
from ..storage.session_repository import SessionRepository
from .errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
SHARE_TOKEN_BYTES = 16


def derive_title(utterance: str) -> str:
    """First 50 characters of the utterance, marked with '...' when cut."""
    if len(utterance) > TITLE_MAX_LENGTH:
        return utterance[:TITLE_MAX_LENGTH] + "..."
    return utterance


def new_share_token() -> str:
    """32 hex characters from 128 random bits."""
    return secrets.token_hex(SHARE_TOKEN_BYTES)


class SessionManager:
    """
    Owns session lifecycle on top of a SessionRepository.
    Every operation except share-token lookup requires the caller to own
    the session.
    """

    def __init__(
        self,
        repository: SessionRepository,
        default_title: str = "New Chat",
        public_base_url: Optional[str] = None,
    ):
        """
        Args:
            repository: Session storage
            default_title: Title given to sessions created without a hint
            public_base_url: Base address for share links; when None the
                caller-supplied fallback (the request's base URL) is used
        """
        self.repository = repository
        self.default_title = default_title
        self.public_base_url = public_base_url

    async def create_session(self, owner_id: str, title_hint: Optional[str] = None) -> Session:
        session = Session(
            id=str(uuid.uuid4()),
            owner=owner_id,
            title=title_hint or self.default_title,
        )
        await self.repository.create(session)
        logger.info(
            f"Created session {session.id}",
            extra={"extra_fields": {"session_id": session.id, "user_id": owner_id}}
        )
        return session

    async def list_sessions(self, owner_id: str) -> List[SessionSummary]:
        sessions = await self.repository.list_by_owner(owner_id)
        return [SessionSummary.from_session(s) for s in sessions]

    async def get_session(self, session_id: str, caller_id: str) -> Session:
        """
        Raises:
            NotFound: No session has this id
            Forbidden: The caller does not own the session
        """
        session = await self.repository.get(session_id)
        if session is None:
            raise NotFound("Chat session not found")
        if session.owner != caller_id:
            logger.warning(
                f"Denied access to session {session_id}",
                extra={"extra_fields": {"session_id": session_id, "user_id": caller_id}}
            )
            raise Forbidden()
        return session

    async def delete_session(self, session_id: str, caller_id: str) -> None:
        await self.get_session(session_id, caller_id)
        # A concurrent delete may have won since the ownership check
        if not await self.repository.delete(session_id):
            raise NotFound("Chat session not found")
        logger.info(
            f"Deleted session {session_id}",
            extra={"extra_fields": {"session_id": session_id, "user_id": caller_id}}
        )

    async def issue_share_token(
        self,
        session_id: str,
        caller_id: str,
        fallback_base_url: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        Generate and persist a fresh share token, replacing any previous one.

        Returns:
            (token, share_url)
        """
        await self.get_session(session_id, caller_id)

        token = new_share_token()
        if not await self.repository.set_share_token(session_id, token):
            raise NotFound("Chat session not found")

        base = (self.public_base_url or fallback_base_url or "").rstrip("/")
        share_url = f"{base}/share/{token}"
        logger.info(
            f"Issued share token for session {session_id}",
            extra={"extra_fields": {"session_id": session_id, "user_id": caller_id}}
        )
        return token, share_url

    async def get_by_share_token(self, token: str) -> Session:
        session = await self.repository.get_by_share_token(token)
        if session is None:
            raise NotFound("Shared chat not found")
        return session

    async def record_exchange(self, session_id: str, utterance: str, reply: str) -> Optional[int]:
        """
        Append one user/assistant pair in a single write.

        The title derived from ``utterance`` is stored with the pair when this is
        the session's first exchange, so a failed write leaves neither behind.

        Returns:
            Optional[int]: Message count after the append, None if the session is gone
        """
        return await self.repository.append_messages(
            session_id,
            [
                ChatMessage(role="user", content=utterance),
                ChatMessage(role="assistant", content=reply),
            ],
            first_title=derive_title(utterance),
        )
