"""
Authentication utilities - JWT token handling and password hashing.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from ..config import settings
from ..core.errors import Unauthenticated
from ..models import TokenData
from ..storage import UserStorage

# Missing credentials are reported as 401 by verify_bearer, not by FastAPI
security = HTTPBearer(auto_error=False)

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    if len(plain_password.encode('utf-8')) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode; ``sub`` must carry the user id
        expires_delta: Optional expiration time delta

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and verify a JWT access token.

    Returns:
        Optional[TokenData]: Token data if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None
    return TokenData(user_id=str(user_id), username=payload.get("username"))


def verify_bearer(token: Optional[str]) -> str:
    """
    Map a bearer credential to the user id it was issued for.

    Raises:
        Unauthenticated: If the credential is missing, expired or forged
    """
    if not token:
        raise Unauthenticated("Missing or invalid Authorization header")

    token_data = decode_access_token(token)
    if token_data is None or token_data.user_id is None:
        raise Unauthenticated("Invalid token")
    return token_data.user_id


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Dependency to get the current user ID from the bearer token."""
    return verify_bearer(credentials.credentials if credentials else None)


async def authenticate_user(user_storage: UserStorage, username: str, password: str) -> Optional[dict]:
    """
    Authenticate a user by username and password.

    Returns:
        Optional[dict]: User data if authenticated, None otherwise
    """
    user = await user_storage.get_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user["hashed_password"]):
        return None
    return user
