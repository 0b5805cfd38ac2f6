"""Storage driver abstraction for starsort.

Provides a uniform, identifier-based interface for file operations:
- LocalDriver: Local filesystem (identifiers are absolute paths)
- GDriveDriver: Google Drive (identifiers are Drive IDs)

Folder locations are written as storage URIs:
    local:/path/to/folder
    gdrive:folder_id
"""

from typing import Dict

from .base import StorageDriver, StorageError, FileInfo, FolderInfo
from .local import LocalDriver
from .gdrive import GDriveDriver
from .tables import read_table


def parse_storage_uri(uri: str) -> tuple:
    """Parse a storage URI into (type, value) tuple.

    Raises:
        ValueError: If URI format is invalid
    """
    if uri.startswith("gdrive:"):
        return ("gdrive", uri[7:])
    elif uri.startswith("local:"):
        return ("local", uri[6:])
    else:
        raise ValueError(
            f"Invalid storage URI: {uri}. "
            "Must start with 'gdrive:' or 'local:'"
        )


_drivers: Dict[str, StorageDriver] = {}


def create_storage(storage_type: str) -> StorageDriver:
    """Return the driver for a storage type ('local' or 'gdrive').

    Drivers are created once per process.

    Raises:
        ValueError: If the storage type is unknown
    """
    if storage_type not in _drivers:
        if storage_type == "local":
            _drivers[storage_type] = LocalDriver()
        elif storage_type == "gdrive":
            _drivers[storage_type] = GDriveDriver()
        else:
            raise ValueError(f"Unknown storage type: {storage_type}")
    return _drivers[storage_type]


__all__ = [
    'StorageDriver',
    'StorageError',
    'FileInfo',
    'FolderInfo',
    'LocalDriver',
    'GDriveDriver',
    'create_storage',
    'parse_storage_uri',
    'read_table',
]
