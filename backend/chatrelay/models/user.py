"""
User Model - Defines the user data structure.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserCredentials(BaseModel):
    """Signup / login request body."""
    username: Optional[str] = None
    password: Optional[str] = None


class User(BaseModel):
    """Public user fields."""
    user_id: str
    username: str
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Token issued on signup or login."""
    token: str
    token_type: str = "bearer"
    user: User


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    username: Optional[str] = None
