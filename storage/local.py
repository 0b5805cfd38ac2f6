"""Local filesystem storage driver."""

import os
import shutil
from typing import List

from .base import StorageDriver, StorageError, FileInfo, FolderInfo


class LocalDriver(StorageDriver):
    """Storage driver for local filesystem.

    Identifiers are absolute paths.
    """

    @property
    def display_name(self) -> str:
        return "Local filesystem"

    @property
    def is_temp_copy(self) -> bool:
        return False

    def _require_dir(self, folder_id: str) -> str:
        path = os.path.abspath(folder_id)
        if not os.path.exists(path):
            raise StorageError(f"Directory does not exist: {path}")
        if not os.path.isdir(path):
            raise StorageError(f"Not a directory: {path}")
        return path

    def _file_info(self, path: str) -> FileInfo:
        try:
            size = os.path.getsize(path)
        except OSError:
            size = None
        return FileInfo(
            id=path,
            name=os.path.basename(path),
            parent_id=os.path.dirname(path),
            size=size,
        )

    def get_folder(self, folder_id: str) -> FolderInfo:
        path = self._require_dir(folder_id)
        return FolderInfo(id=path, name=os.path.basename(path))

    def list_files(self, folder_id: str) -> List[FileInfo]:
        """List files in a directory, sorted by name."""
        path = self._require_dir(folder_id)
        results = []
        for name in sorted(os.listdir(path)):
            abs_path = os.path.join(path, name)
            if os.path.isfile(abs_path):
                results.append(self._file_info(abs_path))
        return results

    def list_folders(self, folder_id: str) -> List[FolderInfo]:
        """List immediate subdirectories, sorted by name."""
        path = self._require_dir(folder_id)
        results = []
        for name in sorted(os.listdir(path)):
            abs_path = os.path.join(path, name)
            if os.path.isdir(abs_path):
                results.append(FolderInfo(id=abs_path, name=name))
        return results

    def file_exists(self, folder_id: str, name: str) -> bool:
        return os.path.isfile(os.path.join(os.path.abspath(folder_id), name))

    def download_to_temp(self, file: FileInfo) -> str:
        """Return the local path directly (no temp copy needed)."""
        if not os.path.isfile(file.id):
            raise StorageError(f"File does not exist: {file.id}")
        return file.id

    def rename(self, file: FileInfo, new_name: str) -> FileInfo:
        if os.sep in new_name or (os.altsep and os.altsep in new_name):
            raise StorageError(f"Invalid file name: {new_name}")
        parent = os.path.dirname(file.id)
        target = os.path.join(parent, new_name)
        if target != file.id and os.path.exists(target):
            raise StorageError(f"Rename target already exists: {target}")
        try:
            os.rename(file.id, target)
        except OSError as e:
            raise StorageError(f"Failed to rename {file.id} to {new_name}: {e}")
        return self._file_info(target)

    def move(self, file: FileInfo, dest_folder_id: str) -> FileInfo:
        dest_dir = self._require_dir(dest_folder_id)
        if not os.path.exists(file.id):
            raise StorageError(f"Source file does not exist: {file.id}")
        target = os.path.join(dest_dir, os.path.basename(file.id))
        if os.path.exists(target) and target != file.id:
            raise StorageError(f"Destination already has {os.path.basename(file.id)}")
        try:
            shutil.move(file.id, target)
        except (OSError, shutil.Error) as e:
            raise StorageError(f"Failed to move {file.id} to {dest_dir}: {e}")
        return self._file_info(target)

    def ensure_folder(self, parent_id: str, name: str) -> FolderInfo:
        parent = self._require_dir(parent_id)
        path = os.path.join(parent, name)
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create folder {path}: {e}")
        return FolderInfo(id=path, name=name)

    def append_text(self, folder_id: str, name: str, text: str) -> None:
        parent = self._require_dir(folder_id)
        try:
            with open(os.path.join(parent, name), 'a', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise StorageError(f"Failed to write {name}: {e}")
