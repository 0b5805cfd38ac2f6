"""StarSort - Run configuration and output routing."""

import re
from dataclasses import dataclass
from typing import Optional, Any

__version__ = "0.1.0"

DEFAULT_LOOKUP_SHEET = "STAR Property Lookup"


def _strip_rich_markup(text: str) -> str:
    """Remove Rich markup tags like [red], [/red], [bold], etc."""
    return re.sub(r'\[/?[a-zA-Z_]+\]', '', text)


@dataclass
class RunConfig:
    """Options for one invocation, passed into every entry operation."""

    lookup_sheet: str = DEFAULT_LOOKUP_SHEET
    include_subfolders: bool = True
    dry_run: bool = False

    @classmethod
    def from_args(cls, args: Any) -> "RunConfig":
        """Build from parsed CLI args."""
        return cls(
            lookup_sheet=getattr(args, 'sheet', None) or DEFAULT_LOOKUP_SHEET,
            include_subfolders=not getattr(args, 'no_subfolders', False),
            dry_run=getattr(args, 'dry_run', False),
        )


class StarSort:
    """Output routing for StarSort (Textual UI panes or stdout)."""

    # UI app reference (None = CLI mode)
    _app: Optional[Any] = None

    @classmethod
    def set_app(cls, app: Any) -> None:
        """Set the Textual app reference for UI updates."""
        cls._app = app

    @classmethod
    def print_left(cls, line1: str, line2: str) -> None:
        """Add entry to the filed-reports log (left panel in TUI, stdout in CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_filing, line1, line2)
        else:
            print(_strip_rich_markup(line1))
            print(_strip_rich_markup(line2))

    @classmethod
    def print_right(cls, message: str) -> None:
        """Add line to the run log (right panel in TUI, stdout in CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_log_line, message)
        else:
            print(_strip_rich_markup(message))

    @classmethod
    def set_progress(cls, current: int, total: int) -> None:
        """Update progress bar and label."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.set_progress, current, total)

    @classmethod
    def update_counters(cls, stats: Any) -> None:
        """Show a run's outcome counters next to the progress bar (TUI only)."""
        if cls._app is not None:
            cls._app.call_from_thread(
                cls._app.set_counters,
                stats.resolved, stats.unresolved, stats.duplicates, stats.errors,
            )
