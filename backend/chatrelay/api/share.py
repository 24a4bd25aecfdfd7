"""
Public share endpoint - read-only access to a session by share token.
No authentication.
"""

from fastapi import APIRouter, Depends

from ..core.session_manager import SessionManager
from ..models import SharedSession
from .deps import get_session_manager

router = APIRouter(prefix="/api/chat/share", tags=["share"])


@router.get("/{token}", response_model=SharedSession)
async def get_shared_session(
    token: str,
    manager: SessionManager = Depends(get_session_manager),
):
    session = await manager.get_by_share_token(token)
    return SharedSession.from_session(session)
