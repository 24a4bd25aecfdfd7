"""
User Storage - Persistent storage for user accounts using StorageInterface.
"""

import asyncio
import json
import logging
from typing import Optional, Dict
from datetime import datetime, timezone

from .interface import StorageInterface

logger = logging.getLogger(__name__)


class UserStorage:
    """
    Manages persistent storage of user data.
    One JSON file per user under users/, plus a username -> user_id index.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize user storage.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.users_dir = "users"
        self._username_index_path = f"{self.users_dir}/username_index.json"
        self._index_lock = asyncio.Lock()

    def _user_path(self, user_id: str) -> str:
        return f"{self.users_dir}/{user_id}.json"

    async def _load_username_index(self) -> Dict[str, str]:
        content = await self.storage.load(self._username_index_path)
        if content is None:
            return {}
        try:
            return json.loads(content.decode('utf-8'))
        except ValueError:
            logger.error("Username index is unreadable, treating it as empty")
            return {}

    async def get_user(self, user_id: str) -> Optional[Dict]:
        """
        Get user by user_id.

        Returns:
            Optional[Dict]: User data or None if not found
        """
        if not user_id or '/' in user_id or '\\' in user_id:
            return None

        content = await self.storage.load(self._user_path(user_id))
        if content is None:
            return None

        try:
            user_data = json.loads(content.decode('utf-8'))
        except ValueError as e:
            logger.error(f"Error loading user {user_id}: {e}")
            return None

        for key in ('created_at', 'updated_at'):
            if key in user_data:
                user_data[key] = datetime.fromisoformat(user_data[key])
        return user_data

    async def get_user_by_username(self, username: str) -> Optional[Dict]:
        index = await self._load_username_index()
        user_id = index.get(username)
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def create_user(self, user_id: str, username: str, hashed_password: str) -> Optional[Dict]:
        """
        Create a new user.

        Args:
            user_id: User ID (UUID)
            username: Username, must be unused
            hashed_password: bcrypt hash

        Returns:
            Optional[Dict]: Created user data, or None if the username is taken
        """
        now = datetime.now(timezone.utc)
        user_data = {
            "user_id": user_id,
            "username": username,
            "hashed_password": hashed_password,
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
        }

        async with self._index_lock:
            index = await self._load_username_index()
            if username in index:
                return None

            await self.storage.save(
                self._user_path(user_id),
                json.dumps(user_data, indent=2, ensure_ascii=False)
            )
            index[username] = user_id
            await self.storage.save(self._username_index_path, json.dumps(index, indent=2))

        user_data['created_at'] = now
        user_data['updated_at'] = now
        return user_data
