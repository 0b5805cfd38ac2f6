"""Route-table lookup for files that already carry canonical names.

The route table is header-positional:
LEVEL, REPORTKEY, YEARKEY, FOLDERNAME, FOLDERURL, FOLDERID.
Only REPORTKEY, YEARKEY and FOLDERID are used.
"""

import re
from typing import Dict, Optional, Sequence, Tuple

REPORT_KEY_COLUMN = 1
YEAR_KEY_COLUMN = 2
FOLDER_ID_COLUMN = 5

_REPORT_KEY = re.compile(r'^([^-]+)-')
_YEAR = re.compile(r'-(\d{4})\d{4}(?!\d)')


def route_key(report_key: str, year: str) -> str:
    """Compound lookup key, e.g. 'WEEKLYSTAR_BWLLIH|2009'."""
    return f"{report_key.strip().upper()}|{str(year).strip()}"


def extract_route_key(filename: str) -> Optional[Tuple[str, str]]:
    """Return (report key, year) from a canonical filename, or None.

    The report key is everything before the first hyphen; the year is the
    first four digits of the first 8-digit block after a hyphen.
    """
    key_match = _REPORT_KEY.match(filename or "")
    year_match = _YEAR.search(filename or "")
    if not key_match or not year_match:
        return None
    return (key_match.group(1), year_match.group(1))


def _year_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    if re.fullmatch(r'\d{4}\.0+', text):
        text = text.split('.')[0]
    return text


def _cell(row: Sequence[object], column: int) -> str:
    if column >= len(row) or row[column] is None:
        return ""
    return str(row[column]).strip()


def build_route_table(rows: Sequence[Sequence[object]],
                      has_header: bool = True) -> Dict[str, str]:
    """Build {route key: folder id} from route-table rows.

    Rows missing a report key, year or folder id are skipped.
    """
    table: Dict[str, str] = {}
    for row in rows[1:] if has_header else rows:
        report_key = _cell(row, REPORT_KEY_COLUMN)
        year = _year_text(row[YEAR_KEY_COLUMN]) if len(row) > YEAR_KEY_COLUMN else ""
        folder_id = _cell(row, FOLDER_ID_COLUMN)
        if not report_key or not year or not folder_id:
            continue
        table[route_key(report_key, year)] = folder_id
    return table


def route(filename: str, table: Dict[str, str]) -> Optional[str]:
    """Return the destination folder id for a canonical filename, or None."""
    parts = extract_route_key(filename)
    if parts is None:
        return None
    return table.get(route_key(*parts))
