"""Run summary notifications.

``notify`` never raises: a summary that cannot be delivered becomes a
printed warning and the run carries on.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from starsort import StarSort

if TYPE_CHECKING:
    from storage import StorageDriver

LOG_FOLDER = "--RunLog"


def _log_name() -> str:
    """Monthly log file: YYYY-MM-starsort.log"""
    return f"{datetime.now().strftime('%Y-%m')}-starsort.log"


def _format(summary: str) -> str:
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return f"[{ts}]\n{summary}\n\n"


def notify(summary: str, driver: Optional["StorageDriver"] = None,
           folder_id: Optional[str] = None) -> None:
    """Show the run summary and append it to the run log folder."""
    try:
        StarSort.print_right(summary)
    except Exception as e:
        print(f"Failed to display run summary: {e}")

    if driver is None or not folder_id:
        return
    try:
        log_folder = driver.ensure_folder(folder_id, LOG_FOLDER)
        driver.append_text(log_folder.id, _log_name(), _format(summary))
    except Exception as e:
        try:
            StarSort.print_right(f"[yellow]⚠ Failed to write run log: {e}[/yellow]")
        except Exception:
            pass
