"""
Authentication API endpoints.
"""

import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends

from ..config import settings
from ..core.errors import Conflict, InvalidInput, NotFound, Unauthenticated
from ..models import UserCredentials, User, AuthResponse
from ..storage import UserStorage
from ..utils.auth import (
    BCRYPT_MAX_BYTES,
    authenticate_user,
    create_access_token,
    get_password_hash,
    get_current_user_id,
)
from .deps import get_user_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6


def _issue_token(user: dict) -> AuthResponse:
    access_token = create_access_token(
        data={"sub": user["user_id"], "username": user["username"]},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return AuthResponse(token=access_token, user=User(**user))


@router.post("/signup", response_model=AuthResponse)
async def signup(
    credentials: UserCredentials,
    user_storage: UserStorage = Depends(get_user_storage),
):
    """
    Register a new user and log them in.

    Raises:
        InvalidInput: Missing username/password or out-of-range lengths
        Conflict: Username already taken
    """
    if not credentials.username or not credentials.password:
        raise InvalidInput("Missing username or password")
    if not USERNAME_MIN_LENGTH <= len(credentials.username) <= USERNAME_MAX_LENGTH:
        raise InvalidInput(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if len(credentials.password) < PASSWORD_MIN_LENGTH:
        raise InvalidInput(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(credentials.password.encode('utf-8')) > BCRYPT_MAX_BYTES:
        raise InvalidInput(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

    user = await user_storage.create_user(
        user_id=str(uuid.uuid4()),
        username=credentials.username,
        hashed_password=get_password_hash(credentials.password),
    )
    if user is None:
        raise Conflict("Username already taken")

    logger.info(f"Registered user {user['user_id']}")
    return _issue_token(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserCredentials,
    user_storage: UserStorage = Depends(get_user_storage),
):
    if not credentials.username or not credentials.password:
        raise InvalidInput("Missing username or password")

    user = await authenticate_user(user_storage, credentials.username, credentials.password)
    if not user:
        raise Unauthenticated("Invalid credentials")
    return _issue_token(user)


@router.get("/me")
async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    user_storage: UserStorage = Depends(get_user_storage),
):
    """Current user for the bearer token."""
    user = await user_storage.get_user(user_id)
    if not user:
        raise NotFound("User not found")
    return {"user": User(**user)}
