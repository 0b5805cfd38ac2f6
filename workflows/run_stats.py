"""Counters and capped diagnostics for one run."""

from dataclasses import dataclass, field
from typing import List

MAX_MESSAGES = 25


@dataclass
class RunStats:
    """Accumulates per-file outcomes across a batch."""
    title: str = "Run"
    scanned: int = 0
    resolved: int = 0
    renamed: int = 0
    moved: int = 0
    skipped: int = 0
    unresolved: int = 0
    duplicates: int = 0
    errors: int = 0
    messages: List[str] = field(default_factory=list)
    dropped_messages: int = 0

    def note(self, message: str) -> None:
        """Record a diagnostic line, keeping at most MAX_MESSAGES."""
        if len(self.messages) < MAX_MESSAGES:
            self.messages.append(message)
        else:
            self.dropped_messages += 1

    def summary(self, dry_run: bool = False) -> str:
        header = f"=== {self.title} Summary{' (dry run)' if dry_run else ''} ==="
        lines = [
            header,
            f"Scanned: {self.scanned}",
            f"Resolved: {self.resolved}",
            f"Renamed: {self.renamed}",
            f"Moved: {self.moved}",
            f"Skipped: {self.skipped}",
            f"Unresolved: {self.unresolved}",
            f"Duplicates: {self.duplicates}",
            f"Errors: {self.errors}",
        ]
        if self.messages:
            lines.append("Notes:")
            lines.extend(f"  - {m}" for m in self.messages)
        if self.dropped_messages:
            lines.append(f"  ... and {self.dropped_messages} more")
        return "\n".join(lines)
