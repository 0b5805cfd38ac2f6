"""Tabular sources: property directory and route table.

Supported URIs:
    gsheet:<spreadsheet id>   Google Sheets (same service account as Drive)
    local:/path/table.xlsx    Excel workbook (openpyxl)
    local:/path/table.csv     CSV file (sheet name ignored)
"""

import csv
import os
from typing import List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from openpyxl import load_workbook

from starsort.errors import ConfigurationError
from .gdrive import execute_with_retry, load_credentials

Rows = List[List[object]]


def _read_gsheet(spreadsheet_id: str, sheet_name: Optional[str]) -> Rows:
    try:
        service = build('sheets', 'v4', credentials=load_credentials())
    except Exception as e:
        raise ConfigurationError(f"Failed to initialize Google Sheets: {e}")

    if sheet_name is None:
        meta = execute_with_retry(service.spreadsheets().get(
            spreadsheetId=spreadsheet_id, fields="sheets.properties.title"
        ))
        sheets = meta.get('sheets', [])
        if not sheets:
            raise ConfigurationError(f"Spreadsheet {spreadsheet_id} has no sheets")
        sheet_name = sheets[0]['properties']['title']

    escaped = sheet_name.replace("'", "''")
    try:
        result = execute_with_retry(service.spreadsheets().values().get(
            spreadsheetId=spreadsheet_id,
            range=f"'{escaped}'",
            valueRenderOption='UNFORMATTED_VALUE',
        ))
    except HttpError as e:
        raise ConfigurationError(
            f"Sheet '{sheet_name}' not found in spreadsheet {spreadsheet_id} "
            f"(HTTP {e.resp.status})"
        )
    return [list(row) for row in result.get('values', [])]


def _read_xlsx(path: str, sheet_name: Optional[str]) -> Rows:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        if sheet_name is None:
            sheet = workbook.worksheets[0]
        elif sheet_name in workbook.sheetnames:
            sheet = workbook[sheet_name]
        else:
            raise ConfigurationError(
                f"Sheet '{sheet_name}' not found in {path}. "
                f"Sheets: {workbook.sheetnames}"
            )
        return [list(row) for row in sheet.iter_rows(values_only=True)
                if any(v not in (None, "") for v in row)]
    finally:
        workbook.close()


def _read_csv(path: str) -> Rows:
    with open(path, newline='', encoding='utf-8-sig') as f:
        return [row for row in csv.reader(f) if any(cell.strip() for cell in row)]


def read_table(uri: str, sheet_name: Optional[str] = None) -> Rows:
    """Read all rows (header first) of a table.

    Args:
        uri: Table URI (see module docstring)
        sheet_name: Worksheet name; None reads the first sheet

    Raises:
        ConfigurationError: If the URI is invalid or the table/sheet is missing
    """
    if uri.startswith("gsheet:"):
        return _read_gsheet(uri[7:], sheet_name)

    if uri.startswith("local:"):
        path = uri[6:]
        if not os.path.isfile(path):
            raise ConfigurationError(f"Table file not found: {path}")
        if path.lower().endswith(".csv"):
            return _read_csv(path)
        if path.lower().endswith((".xlsx", ".xlsm")):
            return _read_xlsx(path, sheet_name)
        raise ConfigurationError(f"Unsupported table file type: {path}")

    raise ConfigurationError(
        f"Invalid table URI: {uri}. Must start with 'gsheet:' or 'local:'"
    )
