"""Spreadsheet cell text used as a fallback identity source.

STAR workbooks carry the property name, STR number and report month in the
first rows of the first worksheet. Only .xlsx/.xlsm can be read; openpyxl
does not open legacy .xls files.
"""

import re
from typing import List, Optional

from openpyxl import load_workbook

READABLE_EXTENSIONS = (".xlsx", ".xlsm")

# Header area scanned for identity text.
MAX_ROWS = 15
MAX_COLUMNS = 20

_STAR_ID = re.compile(
    r'\b(?:STR|STAR)\s*(?:ID|#|No\.?|Number|Code)?\s*[:#]?\s*(\d{3,7})\b',
    re.IGNORECASE,
)


def can_read_content(filename: str) -> bool:
    return filename.lower().endswith(READABLE_EXTENSIONS)


def read_cell_text(path: str, max_rows: int = MAX_ROWS,
                   max_columns: int = MAX_COLUMNS) -> str:
    """Join the non-empty cells of the first worksheet's header area.

    Args:
        path: Local path to an .xlsx/.xlsm workbook

    Returns:
        Cell values separated by newlines (row) and ' | ' (column)
    """
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        lines: List[str] = []
        for row in sheet.iter_rows(max_row=max_rows, max_col=max_columns, values_only=True):
            cells = [str(v).strip() for v in row if v is not None and str(v).strip()]
            if cells:
                lines.append(" | ".join(cells))
        return "\n".join(lines)
    finally:
        workbook.close()


def extract_star_id(text: str) -> Optional[str]:
    """Find an 'STR # 12345' style identifier in free text."""
    match = _STAR_ID.search(text or "")
    return match.group(1) if match else None
