"""Tests for the spreadsheet cell-text fallback."""

from openpyxl import Workbook

from resolver.content import can_read_content, extract_star_id, read_cell_text


def make_workbook(path):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["STR # 19650", None, "Laurel Inn"])
    sheet.append([])
    sheet.append(["For the month of:", "April 2013"])
    for _ in range(20):
        sheet.append(["filler"])
    sheet.append(["Below the header area"])
    workbook.create_sheet("Other").append(["Bowline Lighthouse"])
    workbook.save(path)


class TestReadCellText:

    def test_reads_header_area_of_first_sheet(self, tmp_path):
        path = str(tmp_path / "export.xlsx")
        make_workbook(path)
        text = read_cell_text(path)
        assert text.splitlines()[0] == "STR # 19650 | Laurel Inn"
        assert "April 2013" in text
        assert "Below the header area" not in text
        assert "Bowline" not in text

    def test_resolves_through_identity_resolver(self, tmp_path, resolver):
        path = str(tmp_path / "export.xlsx")
        make_workbook(path)
        result = resolver.resolve("export.xlsx", content_loader=lambda: read_cell_text(path))
        assert result.ok
        assert result.property_code == "SFOLAU"
        assert result.date.compact_form == "20130400"


class TestHelpers:

    def test_can_read_content(self):
        assert can_read_content("Report.XLSX")
        assert can_read_content("Report.xlsm")
        assert not can_read_content("Report.xls")

    def test_extract_star_id(self):
        assert extract_star_id("STR # 19650") == "19650"
        assert extract_star_id("STAR ID: 77609") == "77609"
        assert extract_star_id("str number 9402") == "9402"
        assert extract_star_id("Laurel Inn") is None
