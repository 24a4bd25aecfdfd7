"""
Chat session API endpoints - session lifecycle, sharing and messaging.
All routes require a bearer token; ownership is enforced by SessionManager.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from ..core.message_relay import MessageRelay
from ..core.session_manager import SessionManager
from ..models import (
    Session, SessionSummary, SessionCreate, MessageRequest, MessageReply, ShareLink,
)
from ..utils.auth import get_current_user_id
from .deps import get_session_manager, get_message_relay

router = APIRouter(prefix="/api/chat/sessions", tags=["sessions"])


@router.get("", response_model=List[SessionSummary])
async def list_sessions(
    user_id: str = Depends(get_current_user_id),
    manager: SessionManager = Depends(get_session_manager),
):
    """Sessions of the current user, most recently active first."""
    return await manager.list_sessions(user_id)


@router.post("", response_model=Session)
async def create_session(
    body: Optional[SessionCreate] = None,
    user_id: str = Depends(get_current_user_id),
    manager: SessionManager = Depends(get_session_manager),
):
    title = body.title if body else None
    return await manager.create_session(user_id, title)


@router.get("/{session_id}", response_model=Session)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SessionManager = Depends(get_session_manager),
):
    return await manager.get_session(session_id, user_id)


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SessionManager = Depends(get_session_manager),
):
    await manager.delete_session(session_id, user_id)
    return {"message": "Chat session deleted successfully"}


@router.post("/{session_id}/share", response_model=ShareLink)
async def share_session(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Issue a new public share link for the session.
    Any previously issued link stops working.
    """
    token, share_url = await manager.issue_share_token(
        session_id, user_id, fallback_base_url=str(request.base_url)
    )
    return ShareLink(share_token=token, share_url=share_url)


@router.post("/{session_id}/messages", response_model=MessageReply)
async def send_message(
    session_id: str,
    body: MessageRequest,
    user_id: str = Depends(get_current_user_id),
    relay: MessageRelay = Depends(get_message_relay),
):
    """
    Send a message to the provider within the session.

    Returns:
        MessageReply: The assistant text that was stored with the exchange
    """
    reply = await relay.relay(session_id, user_id, body.input)
    return MessageReply(reply=reply)
