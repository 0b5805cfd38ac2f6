"""TextUI - Textual terminal UI for a StarSort batch run."""

from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Label, ProgressBar, RichLog, Static
from textual.worker import Worker, WorkerState

from starsort import StarSort, __version__


def format_counters(resolved: int, unresolved: int, duplicates: int, errors: int) -> str:
    """Footer line for the outcome counters; non-zero problems are highlighted."""
    parts = [f"[green]{resolved} resolved[/green]"]
    parts.append(f"[yellow]{unresolved} unresolved[/yellow]" if unresolved else "0 unresolved")
    parts.append(f"[yellow]{duplicates} duplicates[/yellow]" if duplicates else "0 duplicates")
    parts.append(f"[red]{errors} errors[/red]" if errors else "0 errors")
    return "  ".join(parts)


class StarSortApp(App):
    """Filed reports on the left, run log on the right, counters below."""

    CSS = """
    #run-info {
        height: auto;
        padding: 0 1;
        border-bottom: solid $primary;
    }

    #panes {
        height: 1fr;
    }

    .pane {
        width: 1fr;
    }

    #filed-pane {
        border-right: solid $primary;
    }

    .pane-title {
        background: $primary;
        text-align: center;
        text-style: bold;
    }

    #status-bar {
        height: 2;
        padding: 0 1;
        border-top: solid $primary;
    }

    #progress-bar {
        width: 1fr;
    }

    #progress-label, #counters {
        width: auto;
        margin-left: 2;
    }
    """

    BINDINGS = [Binding("q", "quit", "Quit")]

    def __init__(self, operation: str, source: str, destination: str,
                 process_func: Optional[Callable[[], None]] = None,
                 dry_run: bool = False) -> None:
        super().__init__()
        self.operation = operation
        self.source = source
        self.destination = destination
        self.dry_run = dry_run
        self._process_func = process_func

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        dry = "  [bold yellow](dry run: nothing is renamed or moved)[/bold yellow]" if self.dry_run else ""
        yield Static(
            f"[bold]{self.operation.capitalize()}[/bold]{dry}\n"
            f"{self.source} → {self.destination}",
            id="run-info",
        )
        with Horizontal(id="panes"):
            with Vertical(id="filed-pane", classes="pane"):
                yield Static("FILED REPORTS", classes="pane-title")
                yield RichLog(id="filing-log", markup=True)
            with Vertical(classes="pane"):
                yield Static("RUN LOG", classes="pane-title")
                yield RichLog(id="run-log", markup=True)
        with Horizontal(id="status-bar"):
            yield ProgressBar(id="progress-bar", show_eta=True)
            yield Label("0/0 reports", id="progress-label")
            yield Label(format_counters(0, 0, 0, 0), id="counters")
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"StarSort v{__version__}"
        self.sub_title = "running"
        StarSort.set_app(self)
        if self._process_func:
            self.run_worker(self._process_func, thread=True, exit_on_error=False)

    def on_unmount(self) -> None:
        StarSort.set_app(None)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.SUCCESS:
            self.sub_title = "finished, press q to quit"
        elif event.state == WorkerState.ERROR:
            self.sub_title = "stopped with an error"
            self.add_log_line(f"[red]Run aborted: {event.worker.error}[/red]")

    def add_filing(self, line1: str, line2: str) -> None:
        self.query_one("#filing-log", RichLog).write(f"{line1}\n{line2}\n")

    def add_log_line(self, message: str) -> None:
        self.query_one("#run-log", RichLog).write(message)

    def set_progress(self, current: int, total: int) -> None:
        self.query_one("#progress-bar", ProgressBar).update(total=total, progress=current)
        self.query_one("#progress-label", Label).update(f"{current}/{total} reports")

    def set_counters(self, resolved: int, unresolved: int, duplicates: int, errors: int) -> None:
        self.query_one("#counters", Label).update(
            format_counters(resolved, unresolved, duplicates, errors)
        )
