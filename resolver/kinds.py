"""Report kind classification."""

import re
from enum import Enum
from typing import List, Optional, Tuple

from .dates import ParsedDate


class ReportKind(Enum):
    """STAR report kinds with their canonical prefix and folder label."""
    MONTHLY = ("MonthlySTAR_", "Monthly STAR")
    WEEKLY = ("WeeklySTAR_", "Weekly STAR")
    PULSE = ("PulseSTAR_", "Pulse STAR")
    BANDWIDTH = ("BandwidthSTAR_", "Bandwidth STAR")
    RPM = ("RPM_", "RPM")

    def __init__(self, prefix: str, label: str) -> None:
        self.prefix = prefix
        self.label = label

    @property
    def is_special(self) -> bool:
        return self not in (ReportKind.MONTHLY, ReportKind.WEEKLY)


def _bounded(*tokens: str) -> "re.Pattern":
    alternation = "|".join(tokens)
    return re.compile(rf'(?<![A-Za-z0-9])(?:{alternation})(?![A-Za-z0-9])', re.IGNORECASE)


# Checked in list order; first match wins.
SPECIAL_KINDS: List[Tuple["re.Pattern", ReportKind]] = [
    (_bounded("PULSESTAR", "PULSE"), ReportKind.PULSE),
    (_bounded("BANDWIDTHSTAR", "BANDWIDTH"), ReportKind.BANDWIDTH),
    (_bounded("RPM"), ReportKind.RPM),
]


def classify_special(filename: str) -> Optional[ReportKind]:
    """Return the special report kind named in a filename, if any.

    None means the file is a cadence report (Monthly/Weekly).
    """
    for pattern, kind in SPECIAL_KINDS:
        if pattern.search(filename or ""):
            return kind
    return None


def cadence_for(parsed: Optional[ParsedDate]) -> Optional[ReportKind]:
    """Monthly for month-only periods, Weekly when a day is known."""
    if parsed is None:
        return None
    return ReportKind.MONTHLY if parsed.is_month_only else ReportKind.WEEKLY


def classify(filename: str, parsed: Optional[ParsedDate]) -> Optional[ReportKind]:
    """Special kind if named, otherwise the cadence implied by the date."""
    return classify_special(filename) or cadence_for(parsed)
