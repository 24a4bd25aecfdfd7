"""
Message Relay - the per-message pipeline.

validate -> authorize -> generate -> append pair -> first-exchange title.
Provider failures append nothing, so the same utterance can be retried
without duplicating history.
"""

import logging
from typing import Optional

from ..llm import GenerationClient, Reply, Blocked, UpstreamError, MalformedResponse
from ..storage.session_repository import FIRST_EXCHANGE_LENGTH
from .errors import (
    InvalidInput, NotFound, UpstreamRequestError, MalformedProviderResponse,
)
from .session_manager import SessionManager

logger = logging.getLogger(__name__)


def blocked_notice(reason: str) -> str:
    return f"Your prompt was blocked due to: {reason}."


class MessageRelay:
    """Relays one utterance to the provider and persists the exchange."""

    def __init__(
        self,
        session_manager: SessionManager,
        generation_client: GenerationClient,
    ):
        self.session_manager = session_manager
        self.generation_client = generation_client

    async def relay(self, session_id: Optional[str], caller_id: str, utterance: Optional[str]) -> str:
        """
        Send ``utterance`` in the caller's session and return the assistant text.

        Raises:
            InvalidInput: Empty utterance or missing session id
            NotFound / Forbidden: From the ownership check
            UpstreamRequestError: Provider error status or unreachable provider
            MalformedProviderResponse: Provider gave nothing usable
            StorageUnavailable: The exchange could not be persisted
        """
        if not session_id:
            raise InvalidInput("Missing session ID")
        if not utterance or not utterance.strip():
            raise InvalidInput("Missing input")

        await self.session_manager.get_session(session_id, caller_id)

        log_fields = {"session_id": session_id, "user_id": caller_id}
        outcome = await self.generation_client.generate(utterance)

        if isinstance(outcome, Reply):
            reply = outcome.text
        elif isinstance(outcome, Blocked):
            logger.info(f"Prompt blocked by provider: {outcome.reason}",
                        extra={"extra_fields": log_fields})
            reply = blocked_notice(outcome.reason)
        elif isinstance(outcome, UpstreamError):
            logger.warning(
                f"Upstream error for session {session_id}: status={outcome.status_code}",
                extra={"extra_fields": {**log_fields, "upstream_status": outcome.status_code,
                                        "hint": outcome.hint}}
            )
            raise UpstreamRequestError(outcome.status_code, outcome.raw_body, outcome.hint)
        elif isinstance(outcome, MalformedResponse):
            logger.warning(f"Unexpected provider response structure for session {session_id}",
                           extra={"extra_fields": log_fields})
            raise MalformedProviderResponse(outcome.raw_body)
        else:
            raise TypeError(f"Unknown generation outcome: {outcome!r}")

        count = await self.session_manager.record_exchange(session_id, utterance, reply)
        if count is None:
            # Deleted while the provider was answering
            raise NotFound("Chat session not found")

        if count == FIRST_EXCHANGE_LENGTH:
            logger.debug(f"Session {session_id} titled from its first exchange")

        logger.info(f"Relayed message in session {session_id}",
                    extra={"extra_fields": {**log_fields, "message_count": count}})
        return reply
