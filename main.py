#!/usr/bin/env python3
"""StarSort - STAR report organizer."""

import argparse
import os
import sys

from resolver import (
    IdentityResolver,
    build_canonical_name,
    build_destination_path,
    is_canonical,
)
from starsort import RunConfig, StarSort, __version__
from starsort.errors import ConfigurationError
from storage import StorageError, parse_storage_uri
from workflows import (
    SETTING_KEYS,
    SettingsStore,
    file_reports,
    load_directory,
    rename_reports,
    route_reports,
    run_pipeline,
)
from workflows.settings_store import env_var_for

# CLI flag -> (entry operation, source setting shown in the UI header, destination setting)
OPERATIONS = {
    "rename": (rename_reports, "startDataPipeline", "tempRenamingComplete"),
    "file": (file_reports, "tempRenamingComplete", "processedStarReports"),
    "pipeline": (run_pipeline, "startDataPipeline", "processedStarReports"),
    "route": (route_reports, "tempRenamingComplete", "routeTable"),
}


def get_display_name(uri: str) -> str:
    """Short human-readable label for a configured storage URI."""
    if not uri:
        return "(not set)"
    try:
        storage_type, value = parse_storage_uri(uri)
    except ValueError:
        return uri
    if storage_type == "local":
        return f"{value} (local)"
    return f"{value} (Google Drive)"


def show_settings(settings: SettingsStore) -> None:
    """Print every known setting and where its value comes from."""
    print(f"Settings database: {settings.db_path}")
    for key in SETTING_KEYS:
        value = settings.get(key)
        print(f"  {key:22} {value or '(not set)'}")
    print(f"Override any value with an environment variable, e.g. {env_var_for(SETTING_KEYS[0])}")


def set_setting(settings: SettingsStore, assignment: str) -> None:
    """Handle --set KEY=VALUE."""
    key, sep, value = assignment.partition("=")
    if not sep or not key.strip() or not value.strip():
        raise ConfigurationError("--set expects KEY=VALUE, e.g. --set startDataPipeline=gdrive:abc123")
    settings.set(key.strip(), value)
    print(f"{key.strip()} = {value.strip()}")


def resolve_one(settings: SettingsStore, config: RunConfig, path: str) -> None:
    """Show how a single filename resolves. Folder names in the path are used as context."""
    parts = [p for p in path.replace("\\", "/").split("/") if p]
    if not parts:
        raise ConfigurationError("--resolve needs a filename")
    filename = parts[-1]
    ancestors = list(reversed(parts[:-1]))[:3]

    resolver = IdentityResolver(load_directory(settings, config))
    result = resolver.resolve(filename, ancestors)

    print(f"File: {filename}")
    if ancestors:
        print(f"Folders (nearest first): {', '.join(ancestors)}")
    if not result.ok:
        print(f"Unresolved: {result.describe()}")
        if result.detail:
            print(f"  {result.detail}")
        return

    _, extension = os.path.splitext(filename)
    print(f"Property: {result.property_code} {result.record.property_name} (matched by {result.matched_by})")
    print(f"STAR ID: {result.star_id}  GEO ID: {result.geo_id or '(blank)'}")
    print(f"Period: {result.date.compact_form}  Kind: {result.kind.label}")
    print(f"Canonical name: {build_canonical_name(result, extension)}")
    print(f"Destination: {'/'.join(build_destination_path(result))}")
    if is_canonical(filename, result, extension):
        print("Already canonical")


def main(name: str, settings: SettingsStore, config: RunConfig) -> int:
    """Run one batch operation with plain text output (CLI mode)."""
    if config.dry_run:
        print("Dry run: nothing will be renamed, moved or created")
    try:
        OPERATIONS[name][0](settings, config)
    except (ConfigurationError, StorageError) as e:
        print(f"Error: {e}")
        return 1
    return 0


def main_tui(name: str, settings: SettingsStore, config: RunConfig) -> int:
    """Run one batch operation inside the Textual UI."""
    from textui import StarSortApp

    _, source_key, dest_key = OPERATIONS[name]
    source = get_display_name(settings.get(source_key))
    destination = get_display_name(settings.get(dest_key))
    failure = []

    # The batch runs on the app's worker thread and opens its own settings connection
    db_path = settings.db_path

    def process_func() -> None:
        thread_settings = SettingsStore(db_path)
        try:
            OPERATIONS[name][0](thread_settings, config)
        except (ConfigurationError, StorageError) as e:
            failure.append(str(e))
            StarSort.print_right(f"[red]Error: {e}[/red]")
        finally:
            thread_settings.close()
        StarSort.print_right("\n[green]Processing complete![/green]")

    app = StarSortApp(
        operation=name,
        source=source,
        destination=destination,
        process_func=process_func,
        dry_run=config.dry_run,
    )
    app.run()

    if failure:
        print(f"Error: {failure[0]}")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"STAR report organizer (v{__version__})")
    parser.add_argument("--rename", action="store_true",
                        help="Rename files in startDataPipeline into tempRenamingComplete")
    parser.add_argument("--file", action="store_true",
                        help="File renamed reports into the processedStarReports hierarchy")
    parser.add_argument("--pipeline", action="store_true",
                        help="Rename and file straight from startDataPipeline")
    parser.add_argument("--route", action="store_true",
                        help="Move canonically named files using the route table")
    parser.add_argument("--resolve", type=str, metavar="NAME",
                        help="Show how one filename (optionally with folders) resolves and exit")
    parser.add_argument("--set", type=str, metavar="KEY=VALUE", action="append",
                        help="Store a setting (storage URI), e.g. startDataPipeline=gdrive:abc123")
    parser.add_argument("--show-settings", action="store_true",
                        help="Print the configured settings and exit")
    parser.add_argument("--sheet", type=str, metavar="NAME",
                        help="Worksheet name of the property directory")
    parser.add_argument("--no-subfolders", action="store_true",
                        help="Only process files directly inside the source folder")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report what would happen without renaming or moving anything")
    parser.add_argument("--cli", action="store_true",
                        help="Use CLI output instead of TextUI (default is TextUI)")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    config = RunConfig.from_args(args)
    settings = SettingsStore()
    exit_code = 0

    try:
        if args.set:
            for assignment in args.set:
                set_setting(settings, assignment)

        if args.show_settings:
            show_settings(settings)

        elif args.resolve:
            resolve_one(settings, config, args.resolve)

        else:
            selected = [name for name in OPERATIONS if getattr(args, name)]
            if len(selected) > 1:
                raise ConfigurationError(
                    "Choose one of --rename, --file, --pipeline or --route"
                )
            if selected:
                if args.cli:
                    exit_code = main(selected[0], settings, config)
                else:
                    exit_code = main_tui(selected[0], settings, config)
            elif not args.set:
                build_parser().print_help()
    except ConfigurationError as e:
        print(f"Error: {e}")
        exit_code = 1
    finally:
        settings.close()

    sys.exit(exit_code)
