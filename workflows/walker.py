"""Depth-bounded folder traversal yielding files with their folder context."""

from dataclasses import dataclass
from typing import Callable, Collection, Iterator, List, Optional, Tuple, TYPE_CHECKING

from storage import FileInfo, StorageError

if TYPE_CHECKING:
    from storage import StorageDriver

# Folder names kept per file, nearest first.
CONTEXT_DEPTH = 3
MAX_DEPTH = 12


@dataclass(frozen=True)
class WalkEntry:
    """A file plus the names of its enclosing folders, nearest first."""
    file: FileInfo
    ancestors: Tuple[str, ...]


def _is_system_folder(name: str) -> bool:
    """Folders starting with '--' hold run logs and are never scanned."""
    return name.startswith('--')


def walk_files(driver: "StorageDriver", root_id: str,
               include_subfolders: bool = True,
               skip_folder_ids: Collection[str] = (),
               context_depth: int = CONTEXT_DEPTH,
               max_depth: int = MAX_DEPTH,
               on_error: Optional[Callable[[str, StorageError], None]] = None) -> Iterator[WalkEntry]:
    """Yield every file under ``root_id`` as a WalkEntry.

    Traversal is depth-first, files of a folder before its subfolders.
    Folders in ``skip_folder_ids`` (destination folders nested inside the
    source) are not entered. Single pass; not restartable.

    A folder whose listing fails is passed to ``on_error`` with its display
    path; its unlisted contents are skipped and the walk continues. Without
    ``on_error`` the StorageError propagates.
    """
    root = driver.get_folder(root_id)
    stack: List[Tuple[str, Tuple[str, ...], str, int]] = [
        (root.id, (root.name,), root.name, 0)
    ]

    while stack:
        folder_id, ancestors, path, depth = stack.pop()

        try:
            files = driver.list_files(folder_id)
        except StorageError as e:
            if on_error is None:
                raise
            on_error(path, e)
            continue

        for file in files:
            yield WalkEntry(file=file, ancestors=ancestors)

        if not include_subfolders or depth >= max_depth:
            continue

        try:
            children = [
                f for f in driver.list_folders(folder_id)
                if f.id not in skip_folder_ids and not _is_system_folder(f.name)
            ]
        except StorageError as e:
            if on_error is None:
                raise
            on_error(path, e)
            continue

        # Reversed so the first child is processed first
        for child in reversed(children):
            chain = ((child.name,) + ancestors)[:context_depth]
            stack.append((child.id, chain, f"{path}/{child.name}", depth + 1))
