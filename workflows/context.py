"""Per-run setup: settings, storage driver, property directory, folder cache."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from resolver import IdentityResolver, PropertyDirectoryIndex, load_property_records
from starsort import RunConfig, StarSort
from starsort.errors import ConfigurationError
from storage import (
    StorageDriver,
    StorageError,
    create_storage,
    parse_storage_uri,
    read_table,
)
from .run_stats import RunStats
from .settings_store import PROPERTY_DIRECTORY, SettingsStore


@dataclass
class RunContext:
    """Everything one invocation shares across files. Never reused between runs."""
    driver: StorageDriver
    config: RunConfig
    folders: Dict[str, Optional[str]]
    storage_type: str
    stats: RunStats
    resolver: Optional[IdentityResolver] = None
    folder_cache: Dict[Tuple[str, str], str] = field(default_factory=dict)

    def folder(self, key: str) -> Optional[str]:
        return self.folders.get(key)

    def ensure_path(self, root_id: str, names: Iterable[str]) -> Optional[str]:
        """Return the id of root/names[0]/names[1]/..., creating folders as needed.

        Created folders are cached for the rest of the run. In dry-run mode
        nothing is created and None is returned for folders not seen yet.
        """
        current = root_id
        for name in names:
            key = (current, name)
            if key not in self.folder_cache:
                if self.config.dry_run:
                    return None
                self.folder_cache[key] = self.driver.ensure_folder(current, name).id
            current = self.folder_cache[key]
        return current


def load_directory(settings: SettingsStore, config: RunConfig) -> PropertyDirectoryIndex:
    """Read the property table and build the lookup index.

    Raises:
        ConfigurationError: If the table is missing, empty or lacks columns
    """
    uri = settings.require(PROPERTY_DIRECTORY)
    rows = read_table(uri, config.lookup_sheet)
    index = PropertyDirectoryIndex.build(load_property_records(rows))

    StarSort.print_right(f"Loaded {len(index.records)} properties from directory")
    for code in index.duplicate_codes:
        StarSort.print_right(f"[yellow]⚠ Duplicate property code {code}; last row wins[/yellow]")
    for key in index.conflicts:
        StarSort.print_right(f"[yellow]⚠ Name/alias '{key}' matches several properties; ignored[/yellow]")
    return index


def open_context(settings: SettingsStore, config: RunConfig, title: str,
                 required: List[str], optional: List[str] = (),
                 with_directory: bool = True) -> RunContext:
    """Validate configured folders and build a RunContext.

    All folders must live on the same storage backend and must exist.

    Raises:
        ConfigurationError: On any missing or invalid setting
    """
    uris: Dict[str, Optional[str]] = {key: settings.require(key) for key in required}
    for key in optional:
        uris[key] = settings.get(key)

    storage_type = None
    folders: Dict[str, Optional[str]] = {}
    for key, uri in uris.items():
        if not uri:
            folders[key] = None
            continue
        try:
            kind, value = parse_storage_uri(uri)
        except ValueError as e:
            raise ConfigurationError(f"Setting '{key}': {e}")
        if storage_type is None:
            storage_type = kind
        elif kind != storage_type:
            raise ConfigurationError(
                f"Setting '{key}' uses {kind} but other folders use {storage_type}; "
                "all folders must be on the same storage"
            )
        folders[key] = value

    try:
        driver = create_storage(storage_type)
    except (StorageError, ValueError) as e:
        raise ConfigurationError(str(e))

    for key, folder_id in folders.items():
        if folder_id is None:
            continue
        try:
            folder = driver.get_folder(folder_id)
        except StorageError as e:
            raise ConfigurationError(f"Setting '{key}' points to a missing folder: {e}")
        folders[key] = folder.id

    context = RunContext(
        driver=driver,
        config=config,
        folders=folders,
        storage_type=storage_type,
        stats=RunStats(title=title),
    )
    if with_directory:
        context.resolver = IdentityResolver(load_directory(settings, config))
    return context
