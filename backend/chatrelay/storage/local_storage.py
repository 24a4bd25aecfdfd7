"""
Local Filesystem Storage Implementation.
Stores every document as a file below a base directory on the server.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, List

import aiofiles
import aiofiles.os

from .interface import StorageInterface, StorageError

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage implementation.
    Writes go through a temporary file and an atomic rename, so readers never
    observe a half-written document.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored files
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        if not full_path.is_relative_to(self.base_dir):
            raise ValueError(f"Invalid path: {path} - path traversal detected")

        return full_path

    async def save(self, path: str, content: bytes | str) -> bool:
        full_path = self._get_full_path(path)
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")
        data = content.encode('utf-8') if isinstance(content, str) else content
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, full_path)
            return True
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}")
            raise StorageError(f"Could not save {path}") from e

    async def load(self, path: str) -> Optional[bytes]:
        full_path = self._get_full_path(path)
        try:
            async with aiofiles.open(full_path, 'rb') as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Error loading file {path}: {e}")
            raise StorageError(f"Could not load {path}") from e

    async def exists(self, path: str) -> bool:
        return self._get_full_path(path).is_file()

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)
        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}")
            raise StorageError(f"Could not delete {path}") from e

    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        full_path = self._get_full_path(path)
        if not full_path.is_dir():
            return []

        try:
            files = [p for p in full_path.glob(pattern or "*") if p.is_file()]
        except OSError as e:
            logger.error(f"Error listing files in {path}: {e}")
            raise StorageError(f"Could not list {path}") from e

        # Skip in-flight temporary files
        return sorted(
            p.relative_to(self.base_dir).as_posix()
            for p in files
            if not p.name.startswith('.')
        )
