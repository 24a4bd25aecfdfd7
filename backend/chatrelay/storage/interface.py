"""
Storage Interface - Abstract base class for all storage implementations.
This interface enables switching between the local filesystem and other backends.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class StorageInterface(ABC):
    """
    Abstract storage interface that defines the contract for all storage implementations.

    Missing paths are reported through return values (``None`` / ``False``);
    an unreachable or failing backend raises ``StorageError``.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, replacing any previous content.

        Args:
            path: Relative path (e.g., "sessions/<id>.json")
            content: Content to save (bytes or str)

        Returns:
            bool: True once the content is durably written
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: File content, or None if the path does not exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at the specified path.

        Returns:
            bool: True if a file was removed, False if there was nothing to delete
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """
        List files directly under a directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths
        """
        pass
