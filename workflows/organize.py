"""Rename and filing workflows for STAR reports.

Three entry points share one per-file routine:
- rename_reports: startDataPipeline -> canonical name -> tempRenamingComplete
- file_reports: tempRenamingComplete -> processedStarReports/<property>/<kind>/<year>
- run_pipeline: startDataPipeline -> processedStarReports in one pass

Per-file failures are counted and noted; they never stop the batch.
"""

import os
from datetime import datetime
from typing import Callable, List, Optional, Set

from resolver import (
    Resolved,
    build_canonical_name,
    build_destination_path,
)
from resolver.content import can_read_content, read_cell_text
from starsort import RunConfig, StarSort
from storage import FileInfo, StorageError
from .context import RunContext, open_context
from .run_log import notify
from .run_stats import RunStats
from .settings_store import (
    DUPLICATE_REPORTS,
    PROCESSED_STAR_REPORTS,
    START_DATA_PIPELINE,
    TEMP_RENAMING_COMPLETE,
    UNRESOLVED_REPORTS,
    SettingsStore,
)
from .walker import WalkEntry, walk_files

# Resolved report -> (destination folder id or None in dry run, display path)
Destination = Callable[[RunContext, Resolved], tuple]

PARKING_FOLDERS = (DUPLICATE_REPORTS, UNRESOLVED_REPORTS)


def log_filing(old_name: str, new_name: str, dest_display: str) -> None:
    """Log a filing to the left panel."""
    timestamp = datetime.now().strftime("%H:%M")
    line1 = f"{timestamp} {new_name}"
    arrow = f"{old_name} → " if old_name != new_name else ""
    line2 = f"  {arrow}{dest_display}"
    StarSort.print_left(line1, line2)


def _content_loader(ctx: RunContext, file: FileInfo) -> Optional[Callable[[], Optional[str]]]:
    """Build a lazy cell-text reader for workbooks openpyxl can open."""
    if not can_read_content(file.name):
        return None

    def load() -> Optional[str]:
        temp_path = None
        try:
            temp_path = ctx.driver.download_to_temp(file)
            return read_cell_text(temp_path)
        except Exception as e:
            StarSort.print_right(f"  [yellow]Could not read cells of {file.name}: {e}[/yellow]")
            return None
        finally:
            if temp_path and ctx.driver.is_temp_copy and os.path.exists(temp_path):
                os.unlink(temp_path)

    return load


def park_file(ctx: RunContext, file: FileInfo, key: str, reason: str) -> bool:
    """Move a file into the duplicates or unresolved folder.

    Leaves the file in place when the folder isn't configured or already has
    a file with the same name. Returns True if the file was moved.
    """
    folder_id = ctx.folder(key)
    label = "duplicates" if key == DUPLICATE_REPORTS else "unresolved"
    if not folder_id:
        ctx.stats.note(f"{file.name}: {reason} (left in place, no {label} folder)")
        return False
    if file.parent_id == folder_id:
        return False
    if ctx.driver.file_exists(folder_id, file.name):
        ctx.stats.note(f"{file.name}: {reason} (left in place, already in {label})")
        return False
    if ctx.config.dry_run:
        StarSort.print_right(f"  [dry run] would move to {label}")
        return True
    ctx.driver.move(file, folder_id)
    StarSort.print_right(f"  Moved to {label}: {reason}")
    return True


def fallback_park(ctx: RunContext, file: FileInfo, error: Exception) -> None:
    """After a failed move, try one parking folder before counting an error."""
    key = DUPLICATE_REPORTS if ctx.folder(DUPLICATE_REPORTS) else UNRESOLVED_REPORTS
    try:
        if park_file(ctx, file, key, f"move failed: {error}"):
            ctx.stats.note(f"{file.name}: move failed, parked ({error})")
            return
    except StorageError as e:
        StarSort.print_right(f"  [red]✗ Fallback move failed: {e}[/red]")
    ctx.stats.errors += 1
    ctx.stats.note(f"{file.name}: move failed ({error})")


def process_entry(ctx: RunContext, entry: WalkEntry, destination: Destination) -> None:
    """Resolve, rename and move one file."""
    file = entry.file
    stats = ctx.stats
    StarSort.print_right(f"\n--- {'/'.join(reversed(entry.ancestors))}/{file.name} ---")

    result = ctx.resolver.resolve(
        file.name, entry.ancestors, content_loader=_content_loader(ctx, file)
    )

    if not result.ok:
        stats.unresolved += 1
        reason = result.describe()
        StarSort.print_right(f"  [red]Unresolved: {reason}[/red]")
        if not park_file(ctx, file, UNRESOLVED_REPORTS, reason):
            stats.note(f"{file.name}: unresolved ({reason})")
        return

    stats.resolved += 1
    _, extension = os.path.splitext(file.name)
    canonical = build_canonical_name(result, extension)
    dest_id, dest_display = destination(ctx, result)
    StarSort.print_right(
        f"  {result.property_code} ({result.matched_by}) {result.date.compact_form} "
        f"{result.kind.label} → {canonical}"
    )

    if dest_id is not None and file.parent_id == dest_id and file.name == canonical:
        StarSort.print_right("  ✓ Already filed (skipping)")
        stats.skipped += 1
        return

    if dest_id is not None and ctx.driver.file_exists(dest_id, canonical):
        stats.duplicates += 1
        StarSort.print_right(f"  [yellow]Duplicate: {canonical} already in {dest_display}[/yellow]")
        park_file(ctx, file, DUPLICATE_REPORTS, f"duplicate of {dest_display}/{canonical}")
        return

    if ctx.config.dry_run:
        action = "rename + move" if file.name != canonical else "move"
        StarSort.print_right(f"  [dry run] would {action} to {dest_display}")
        log_filing(file.name, canonical, dest_display)
        return

    old_name = file.name
    if file.name != canonical:
        if ctx.driver.file_exists(file.parent_id, canonical):
            stats.duplicates += 1
            park_file(ctx, file, DUPLICATE_REPORTS, f"{canonical} already exists beside it")
            return
        file = ctx.driver.rename(file, canonical)
        stats.renamed += 1

    try:
        if file.parent_id != dest_id:
            file = ctx.driver.move(file, dest_id)
            stats.moved += 1
    except StorageError as e:
        StarSort.print_right(f"  [red]✗ Move failed: {e}[/red]")
        fallback_park(ctx, file, e)
        return

    log_filing(old_name, canonical, dest_display)


def collect_entries(ctx: RunContext, source_id: str, skip_ids: Set[str]) -> List[WalkEntry]:
    """List every file to process; unreadable folders count as errors and are skipped."""
    def folder_failed(path: str, error: StorageError) -> None:
        ctx.stats.errors += 1
        ctx.stats.note(f"{path}: folder skipped ({error})")
        StarSort.print_right(f"[red]✗ Could not list {path}: {error}[/red]")

    entries = list(walk_files(
        ctx.driver, source_id,
        include_subfolders=ctx.config.include_subfolders,
        skip_folder_ids=skip_ids,
        on_error=folder_failed,
    ))
    StarSort.print_right(f"Found {len(entries)} files")
    StarSort.update_counters(ctx.stats)
    return entries


def run_batch(ctx: RunContext, source_key: str, destination: Destination) -> RunStats:
    """Walk the source folder and process every file."""
    source_id = ctx.folder(source_key)
    skip_ids = {
        folder_id for key, folder_id in ctx.folders.items()
        if folder_id and key != source_key
    }
    entries = collect_entries(ctx, source_id, skip_ids)

    for i, entry in enumerate(entries, 1):
        StarSort.set_progress(i, len(entries))
        ctx.stats.scanned += 1
        try:
            process_entry(ctx, entry, destination)
        except Exception as e:
            ctx.stats.errors += 1
            ctx.stats.note(f"{entry.file.name}: {e}")
            StarSort.print_right(f"  [red]Error processing {entry.file.name}: {e}[/red]")
        StarSort.update_counters(ctx.stats)

    notify(
        ctx.stats.summary(dry_run=ctx.config.dry_run),
        driver=None if ctx.config.dry_run else ctx.driver,
        folder_id=ctx.folder(PROCESSED_STAR_REPORTS),
    )
    return ctx.stats


def flat_destination(key: str) -> Destination:
    """All resolved files go straight into one configured folder."""
    def destination(ctx: RunContext, result: Resolved) -> tuple:
        return ctx.folder(key), key
    return destination


def hierarchy_destination(ctx: RunContext, result: Resolved) -> tuple:
    """processedStarReports/<code name>/<code kind>/<code year kind>."""
    names = build_destination_path(result)
    dest_id = ctx.ensure_path(ctx.folder(PROCESSED_STAR_REPORTS), names)
    return dest_id, "/".join(names)


def rename_reports(settings: SettingsStore, config: RunConfig) -> RunStats:
    """Canonically rename files in startDataPipeline into tempRenamingComplete."""
    ctx = open_context(
        settings, config, "Rename",
        required=[START_DATA_PIPELINE, TEMP_RENAMING_COMPLETE],
        optional=[DUPLICATE_REPORTS, UNRESOLVED_REPORTS, PROCESSED_STAR_REPORTS],
    )
    return run_batch(ctx, START_DATA_PIPELINE, flat_destination(TEMP_RENAMING_COMPLETE))


def file_reports(settings: SettingsStore, config: RunConfig) -> RunStats:
    """File renamed reports into the per-property hierarchy."""
    ctx = open_context(
        settings, config, "Filing",
        required=[TEMP_RENAMING_COMPLETE, PROCESSED_STAR_REPORTS],
        optional=[DUPLICATE_REPORTS, UNRESOLVED_REPORTS],
    )
    return run_batch(ctx, TEMP_RENAMING_COMPLETE, hierarchy_destination)


def run_pipeline(settings: SettingsStore, config: RunConfig) -> RunStats:
    """Rename and file straight from startDataPipeline."""
    ctx = open_context(
        settings, config, "Pipeline",
        required=[START_DATA_PIPELINE, PROCESSED_STAR_REPORTS],
        optional=[DUPLICATE_REPORTS, UNRESOLVED_REPORTS, TEMP_RENAMING_COMPLETE],
    )
    return run_batch(ctx, START_DATA_PIPELINE, hierarchy_destination)
