"""Route-table workflow for files that already have canonical names.

Destinations come from a flat table keyed by report key and year; the
property directory is not consulted.
"""

from typing import Dict

from resolver import build_route_table, extract_route_key, route
from starsort import RunConfig, StarSort
from starsort.errors import ConfigurationError
from storage import StorageError, read_table
from .context import RunContext, open_context
from .organize import collect_entries, fallback_park, log_filing, park_file
from .run_log import notify
from .run_stats import RunStats
from .settings_store import (
    DUPLICATE_REPORTS,
    PROCESSED_STAR_REPORTS,
    ROUTE_TABLE,
    TEMP_RENAMING_COMPLETE,
    UNRESOLVED_REPORTS,
    SettingsStore,
)
from .walker import WalkEntry


def _folder_id(value: str, storage_type: str) -> str:
    """Route tables may hold bare folder ids or storage URIs."""
    prefix = f"{storage_type}:"
    if value.startswith(prefix):
        return value[len(prefix):]
    return value


def load_route_table(settings: SettingsStore) -> Dict[str, str]:
    """Read and index the route table.

    Raises:
        ConfigurationError: If the table is missing or has no usable rows
    """
    rows = read_table(settings.require(ROUTE_TABLE))
    table = build_route_table(rows)
    if not table:
        raise ConfigurationError("Route table has no rows with report key, year and folder id")
    StarSort.print_right(f"Loaded {len(table)} routes")
    return table


def route_entry(ctx: RunContext, entry: WalkEntry, table: Dict[str, str]) -> None:
    """Move one canonically named file to its routed folder."""
    file = entry.file
    stats = ctx.stats
    StarSort.print_right(f"\n--- {file.name} ---")

    parts = extract_route_key(file.name)
    target = route(file.name, table)
    if target is None:
        stats.unresolved += 1
        reason = "no route key in name" if parts is None else f"no route for {parts[0]} {parts[1]}"
        StarSort.print_right(f"  [red]Unrouted: {reason}[/red]")
        if not park_file(ctx, file, UNRESOLVED_REPORTS, reason):
            stats.note(f"{file.name}: {reason}")
        return

    stats.resolved += 1
    dest_id = _folder_id(target, ctx.storage_type)

    if file.parent_id == dest_id:
        StarSort.print_right("  ✓ Already in routed folder (skipping)")
        stats.skipped += 1
        return

    if ctx.driver.file_exists(dest_id, file.name):
        stats.duplicates += 1
        StarSort.print_right("  [yellow]Duplicate in routed folder[/yellow]")
        park_file(ctx, file, DUPLICATE_REPORTS, f"duplicate in route {parts[0]} {parts[1]}")
        return

    if ctx.config.dry_run:
        StarSort.print_right(f"  [dry run] would move to {dest_id}")
        return

    try:
        ctx.driver.move(file, dest_id)
        stats.moved += 1
    except StorageError as e:
        StarSort.print_right(f"  [red]✗ Move failed: {e}[/red]")
        fallback_park(ctx, file, e)
        return
    log_filing(file.name, file.name, f"{parts[0]} {parts[1]}")


def route_reports(settings: SettingsStore, config: RunConfig) -> RunStats:
    """Route canonically named files from tempRenamingComplete via the route table."""
    ctx = open_context(
        settings, config, "Routing",
        required=[TEMP_RENAMING_COMPLETE],
        optional=[DUPLICATE_REPORTS, UNRESOLVED_REPORTS, PROCESSED_STAR_REPORTS],
        with_directory=False,
    )
    table = load_route_table(settings)

    source_id = ctx.folder(TEMP_RENAMING_COMPLETE)
    skip_ids = {fid for key, fid in ctx.folders.items() if fid and fid != source_id}
    skip_ids.update(_folder_id(v, ctx.storage_type) for v in table.values())
    entries = collect_entries(ctx, source_id, skip_ids)

    for i, entry in enumerate(entries, 1):
        StarSort.set_progress(i, len(entries))
        ctx.stats.scanned += 1
        try:
            route_entry(ctx, entry, table)
        except Exception as e:
            ctx.stats.errors += 1
            ctx.stats.note(f"{entry.file.name}: {e}")
            StarSort.print_right(f"  [red]Error routing {entry.file.name}: {e}[/red]")
        StarSort.update_counters(ctx.stats)

    notify(
        ctx.stats.summary(dry_run=config.dry_run),
        driver=None if config.dry_run else ctx.driver,
        folder_id=ctx.folder(PROCESSED_STAR_REPORTS),
    )
    return ctx.stats
