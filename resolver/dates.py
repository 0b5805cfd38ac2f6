"""Report period extraction from filenames and folder context."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

MIN_YEAR = 2000

# Number of enclosing folders consulted for a 4-digit year.
YEAR_CONTEXT_DEPTH = 2

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_FULL_DATE = re.compile(r'(?<!\d)(\d{4})(\d{2})(\d{2})(?!\d)')
_SEPARATED_DATE = re.compile(r'(?<!\d)(\d{4})[-_.]?(\d{2})[-_.]?(\d{2})(?!\d)')
_MONTH_YEAR = re.compile(r'(?<!\d)(\d{2})(\d{4})(?!\d)')
_MONTH_SHORT_YEAR = re.compile(r'(?<!\d)(\d{2})(\d{2})(?!\d)')
_MONTH_NAME = re.compile(
    r'(?<![a-z])'
    r'(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|'
    r'aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)'
    r'(?![a-z])[^0-9]{0,3}?(\d{4}|\d{2})(?!\d)',
    re.IGNORECASE,
)
_FOLDER_YEAR = re.compile(r'(?<!\d)((?:19|20)\d{2})(?!\d)')


@dataclass(frozen=True)
class ParsedDate:
    """A report period. ``day == 0`` means month-only (monthly cadence)."""
    year: int
    month: int
    day: int = 0

    @property
    def compact_form(self) -> str:
        return f"{self.year:04d}{self.month:02d}{self.day:02d}"

    @property
    def is_month_only(self) -> bool:
        return self.day == 0


def make_date(year: int, month: int, day: int = 0) -> Optional[ParsedDate]:
    """Build a ParsedDate, or None if the parts do not form a valid period.

    A nonzero day must produce a real calendar date with no rollover.
    """
    if year < MIN_YEAR or not 1 <= month <= 12:
        return None
    if day:
        try:
            date(year, month, day)
        except ValueError:
            return None
    return ParsedDate(year, month, day)


def year_from_folders(folder_names: Sequence[str],
                      depth: int = YEAR_CONTEXT_DEPTH) -> Optional[int]:
    """Return the first 4-digit year found in the nearest ``depth`` folder names."""
    for name in list(folder_names)[:depth]:
        match = _FOLDER_YEAR.search(name or "")
        if match:
            return int(match.group(1))
    return None


def _full_date(text: str, folders: Sequence[str]) -> Iterable[Optional[ParsedDate]]:
    for m in _FULL_DATE.finditer(text):
        yield make_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _separated_date(text: str, folders: Sequence[str]) -> Iterable[Optional[ParsedDate]]:
    for m in _SEPARATED_DATE.finditer(text):
        day = int(m.group(3))
        # 00 would be a canonical month-only block, which the first pattern owns
        if day == 0:
            continue
        yield make_date(int(m.group(1)), int(m.group(2)), day)


def _month_year(text: str, folders: Sequence[str]) -> Iterable[Optional[ParsedDate]]:
    for m in _MONTH_YEAR.finditer(text):
        yield make_date(int(m.group(2)), int(m.group(1)))


def _month_short_year(text: str, folders: Sequence[str]) -> Iterable[Optional[ParsedDate]]:
    context_year = year_from_folders(folders)
    for m in _MONTH_SHORT_YEAR.finditer(text):
        year = context_year if context_year else 2000 + int(m.group(2))
        yield make_date(year, int(m.group(1)))


def _month_name(text: str, folders: Sequence[str]) -> Iterable[Optional[ParsedDate]]:
    for m in _MONTH_NAME.finditer(text):
        month = MONTHS[m.group(1)[:3].lower()]
        raw_year = m.group(2)
        year = int(raw_year) if len(raw_year) == 4 else 2000 + int(raw_year)
        yield make_date(year, month)


# Fixed priority order; the first structurally valid candidate wins.
PATTERNS: List[Callable[[str, Sequence[str]], Iterable[Optional[ParsedDate]]]] = [
    _full_date,
    _separated_date,
    _month_year,
    _month_short_year,
    _month_name,
]


def resolve_date(filename: str,
                 parent_folders: Sequence[str] = ()) -> Optional[ParsedDate]:
    """Extract a report period from a filename.

    Args:
        filename: The filename (extension may be included)
        parent_folders: Enclosing folder names, nearest first, used to infer
            the year for MMYY names

    Returns:
        ParsedDate, or None if no pattern yields a valid period
    """
    if not filename:
        return None
    for pattern in PATTERNS:
        for candidate in pattern(filename, parent_folders):
            if candidate is not None:
                return candidate
    return None


def resolve_month_name_date(text: str) -> Optional[ParsedDate]:
    """Month-name pattern only, for free text such as spreadsheet headers."""
    for candidate in _month_name(text or "", ()):
        if candidate is not None:
            return candidate
    return None
