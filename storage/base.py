"""Base classes for storage drivers.

This module defines the abstract interface that all storage backends must implement.
Files and folders are addressed by backend identifiers (Drive IDs, absolute
local paths) rather than by paths relative to a root.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


@dataclass
class FileInfo:
    """Information about a file in storage.

    Attributes:
        id: Backend-specific identifier (Drive file ID or absolute path)
        name: Filename only (no directory)
        parent_id: Identifier of the folder holding the file
        size: File size in bytes (optional)
    """
    id: str
    name: str
    parent_id: Optional[str] = None
    size: Optional[int] = None


@dataclass
class FolderInfo:
    """Information about a folder in storage.

    Attributes:
        id: Backend-specific identifier
        name: Folder name only (no parent path)
    """
    id: str
    name: str


class StorageDriver(ABC):
    """Abstract base class for storage backends.

    All mutating operations keep the file's extension untouched; renames pass
    the full new name including extension.
    """

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for this storage (e.g., 'Google Drive')."""
        pass

    # =========================================================================
    # Read Operations
    # =========================================================================

    @abstractmethod
    def get_folder(self, folder_id: str) -> FolderInfo:
        """Look up a folder by identifier.

        Raises:
            StorageError: If the folder doesn't exist or can't be accessed
        """
        pass

    @abstractmethod
    def list_files(self, folder_id: str) -> List[FileInfo]:
        """List files directly inside a folder (no recursion).

        Raises:
            StorageError: If the folder doesn't exist or can't be accessed
        """
        pass

    @abstractmethod
    def list_folders(self, folder_id: str) -> List[FolderInfo]:
        """List immediate subfolders of a folder.

        Raises:
            StorageError: If the folder doesn't exist or can't be accessed
        """
        pass

    @abstractmethod
    def file_exists(self, folder_id: str, name: str) -> bool:
        """Check if a file with exactly this name exists in the folder."""
        pass

    @abstractmethod
    def download_to_temp(self, file: FileInfo) -> str:
        """Download a file to a local temporary location.

        For local storage, this may return the original path without copying.

        Returns:
            Local filesystem path. Caller deletes it when ``is_temp_copy``
            is True.
        """
        pass

    @property
    def is_temp_copy(self) -> bool:
        """Whether download_to_temp() returns a copy the caller must delete."""
        return True

    # =========================================================================
    # Write Operations
    # =========================================================================

    @abstractmethod
    def rename(self, file: FileInfo, new_name: str) -> FileInfo:
        """Rename a file in place.

        Returns:
            Updated FileInfo (the identifier may change for local storage)

        Raises:
            StorageError: If rename fails
        """
        pass

    @abstractmethod
    def move(self, file: FileInfo, dest_folder_id: str) -> FileInfo:
        """Move a file into a folder, keeping its name.

        Afterwards the file has exactly one parent: ``dest_folder_id``.

        Returns:
            Updated FileInfo

        Raises:
            StorageError: If move fails
        """
        pass

    @abstractmethod
    def ensure_folder(self, parent_id: str, name: str) -> FolderInfo:
        """Return the child folder called ``name``, creating it if absent.

        Raises:
            StorageError: If lookup or creation fails
        """
        pass

    @abstractmethod
    def append_text(self, folder_id: str, name: str, text: str) -> None:
        """Append text to a file in the folder, creating it if needed.

        Raises:
            StorageError: If the write fails
        """
        pass
