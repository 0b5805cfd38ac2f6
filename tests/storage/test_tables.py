"""Tests for tabular sources (CSV and Excel property directories)."""

import csv
import os

import pytest
from openpyxl import Workbook

from resolver import load_property_records
from starsort import DEFAULT_LOOKUP_SHEET
from starsort.errors import ConfigurationError
from storage import read_table


@pytest.fixture
def csv_path(tmp_path, directory_rows):
    path = tmp_path / "directory.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for row in directory_rows:
            writer.writerow(row)
        writer.writerow([])
    return str(path)


@pytest.fixture
def xlsx_path(tmp_path, directory_rows):
    path = tmp_path / "directory.xlsx"
    workbook = Workbook()
    workbook.active.title = "Notes"
    workbook.active.append(["not the directory"])
    sheet = workbook.create_sheet(DEFAULT_LOOKUP_SHEET)
    for row in directory_rows:
        sheet.append(row)
    workbook.save(path)
    return str(path)


class TestCsv:

    def test_reads_rows_and_skips_blank_lines(self, csv_path, directory_rows):
        rows = read_table(f"local:{csv_path}")
        assert len(rows) == len(directory_rows)
        assert rows[0][1] == "Property Name"

    def test_feeds_directory_loader(self, csv_path):
        records = load_property_records(read_table(f"local:{csv_path}", DEFAULT_LOOKUP_SHEET))
        assert records[0].star_id == "19650"
        assert records[0].property_name == "Laurel Inn"


class TestXlsx:

    def test_reads_named_sheet(self, xlsx_path, directory_rows):
        rows = read_table(f"local:{xlsx_path}", DEFAULT_LOOKUP_SHEET)
        assert len(rows) == len(directory_rows)
        records = load_property_records(rows)
        assert records[0].property_code == "SFOLAU"
        assert records[1].star_id == "9402"

    def test_first_sheet_by_default(self, xlsx_path):
        rows = read_table(f"local:{xlsx_path}")
        assert rows == [["not the directory"]]

    def test_missing_sheet_raises(self, xlsx_path):
        with pytest.raises(ConfigurationError) as excinfo:
            read_table(f"local:{xlsx_path}", "Other Sheet")
        assert "Other Sheet" in str(excinfo.value)


class TestInvalidSources:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            read_table(f"local:{os.path.join(str(tmp_path), 'missing.csv')}")

    def test_unsupported_type(self, tmp_path):
        path = tmp_path / "directory.txt"
        path.write_text("x")
        with pytest.raises(ConfigurationError):
            read_table(f"local:{path}")

    def test_unknown_scheme(self):
        with pytest.raises(ConfigurationError):
            read_table("dropbox:/directory.csv")
