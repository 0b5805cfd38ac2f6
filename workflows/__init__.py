"""Workflow layer for starsort.

Contains the business logic for moving STAR reports through the pipeline:
- Rename: canonical names from startDataPipeline into tempRenamingComplete
- Filing: per-property hierarchy under processedStarReports
- Routing: route-table moves for files that are already canonical
"""

from .settings_store import (
    SettingsStore,
    SETTING_KEYS,
    START_DATA_PIPELINE,
    TEMP_RENAMING_COMPLETE,
    PROCESSED_STAR_REPORTS,
    DUPLICATE_REPORTS,
    UNRESOLVED_REPORTS,
    PROPERTY_DIRECTORY,
    ROUTE_TABLE,
)
from .walker import WalkEntry, walk_files
from .run_stats import RunStats
from .run_log import notify
from .context import RunContext, open_context, load_directory
from .organize import (
    process_entry,
    rename_reports,
    file_reports,
    run_pipeline,
)
from .routing import load_route_table, route_reports


__all__ = [
    # Settings
    'SettingsStore',
    'SETTING_KEYS',
    'START_DATA_PIPELINE',
    'TEMP_RENAMING_COMPLETE',
    'PROCESSED_STAR_REPORTS',
    'DUPLICATE_REPORTS',
    'UNRESOLVED_REPORTS',
    'PROPERTY_DIRECTORY',
    'ROUTE_TABLE',

    # Traversal and bookkeeping
    'WalkEntry',
    'walk_files',
    'RunStats',
    'notify',
    'RunContext',
    'open_context',
    'load_directory',

    # Rename and filing
    'process_entry',
    'rename_reports',
    'file_reports',
    'run_pipeline',

    # Routing
    'load_route_table',
    'route_reports',
]
