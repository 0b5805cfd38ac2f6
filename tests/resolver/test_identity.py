"""Tests for IdentityResolver, including the end-to-end naming cases."""

import pytest

from resolver import (
    IdentityResolver,
    MissingField,
    PropertyDirectoryIndex,
    ReportKind,
    build_canonical_name,
)
from resolver.directory import PropertyRecord


class TestEndToEnd:

    def test_canonical_monthly_name(self, resolver):
        filename = "MonthlySTAR_SFOLAU-19650-20130400-USD-E.xlsx"
        result = resolver.resolve(filename)
        assert result.ok
        assert result.property_code == "SFOLAU"
        assert result.date.compact_form == "20130400"
        assert result.date.day == 0
        assert result.kind is ReportKind.MONTHLY
        assert build_canonical_name(result, ".xlsx") == filename

    def test_canonical_weekly_name(self, resolver):
        filename = "WeeklySTAR_SANLAB-9402-20141201-USD-E.xlsx"
        result = resolver.resolve(filename)
        assert result.ok
        assert result.date.compact_form == "20141201"
        assert result.date.day == 1
        assert result.kind is ReportKind.WEEKLY
        assert build_canonical_name(result, ".xlsx") == filename

    def test_generic_word_only_is_unresolved(self, resolver):
        result = resolver.resolve("Resort Report March 2015.xlsx")
        assert not result.ok
        assert MissingField.PROPERTY in result.reasons
        assert MissingField.DATE not in result.reasons
        assert not result.ambiguous

    def test_tied_token_overlap_is_ambiguous(self, resolver):
        result = resolver.resolve("Harborview Apr 2013.xlsx")
        assert not result.ok
        assert result.reasons == frozenset({MissingField.PROPERTY})
        assert result.ambiguous
        assert set(result.candidates) == {"HVGRND", "HVPLZA"}
        assert "ambiguous" in result.describe()


class TestCodeStage:

    def test_code_case_insensitive(self, resolver):
        result = resolver.resolve("sfolau 2013-04-07.xlsx")
        assert result.ok
        assert result.property_code == "SFOLAU"
        assert result.matched_by == "code"

    def test_geo_prefixed_canonical_block(self, resolver):
        filename = "MonthlySTAR_FLSUNCOV-41234-20140300-USD-E.xlsx"
        result = resolver.resolve(filename)
        assert result.ok
        assert result.property_code == "SUNCOV"
        assert build_canonical_name(result, ".xlsx") == filename

    def test_canonical_block_before_other_tokens(self, resolver):
        result = resolver.resolve("PulseSTAR_SANLAB-9402-20130407 from SFOLAU.xlsx")
        assert result.property_code == "SANLAB"
        assert result.kind is ReportKind.PULSE

    def test_first_token_in_filename_order(self, resolver):
        result = resolver.resolve("Copy of BWLLIH and SFOLAU 2013-04-07.xlsx")
        assert result.property_code == "BWLLIH"


class TestNameStages:

    def test_exact_name(self, resolver):
        match = resolver.match_name("Laurel Inn")
        assert match.record.property_code == "SFOLAU"
        assert match.stage == "exact"

    def test_contained_alias(self, resolver):
        result = resolver.resolve("Cove Miami 2014-03-15.xlsx")
        assert result.ok
        assert result.property_code == "SUNCOV"
        assert result.matched_by == "contained"
        assert build_canonical_name(result, ".xlsx") == (
            "WeeklySTAR_FLSUNCOV-41234-20140315-USD-E.xlsx"
        )

    def test_longest_contained_key_wins(self, resolver):
        match = resolver.match_name("Sunset Cove Resort April")
        assert match.record.property_code == "SUNCOV"

    def test_unique_first_word_with_folder_year(self, resolver):
        result = resolver.resolve("Laurel 0413.xls", ["Monthly", "2013"])
        assert result.ok
        assert result.property_code == "SFOLAU"
        assert result.date.compact_form == "20130400"
        assert result.kind is ReportKind.MONTHLY

    def test_nothing_matches(self, resolver):
        match = resolver.match_name("Unknown Place")
        assert match.record is None
        assert not match.ambiguous

    def test_token_overlap_needs_name_or_alias_in_filename(self, resolver):
        match = resolver.match_name("Lighthouse Apr 2013")
        assert match.record is None
        assert not match.ambiguous
        result = resolver.resolve("Lighthouse Apr 2013.xlsx")
        assert MissingField.PROPERTY in result.reasons
        assert not result.ambiguous


class TestTokenOverlap:
    """Directory where the only shared alias is dropped as a conflict."""

    @pytest.fixture
    def harbor_resolver(self):
        return IdentityResolver(PropertyDirectoryIndex.build([
            PropertyRecord("ANCHOR", "The Anchorage", "5001", search_keywords=("Harbor Pier",)),
            PropertyRecord("GULLMO", "Seagull Motel", "5002", search_keywords=("Harbor Pier",)),
        ]))

    def test_conflicting_alias_is_not_indexed(self, harbor_resolver):
        assert harbor_resolver.index.conflicts == ["harborpier"]
        assert harbor_resolver.match_name("Harbor Pier").record is None

    def test_confirmed_by_alias_in_filename(self, harbor_resolver):
        match = harbor_resolver.match_name("Harbor Pier Anchorage 0413")
        assert match.record.property_code == "ANCHOR"
        assert match.stage == "token"

    def test_unconfirmed_token_is_discarded(self, harbor_resolver):
        match = harbor_resolver.match_name("Anchorage 0413")
        assert match.record is None
        assert match.stage == "token"
        assert not match.ambiguous


class TestMissingFields:

    def test_blank_star_id(self, resolver):
        result = resolver.resolve("QHLODG 2013-04-07.xlsx")
        assert not result.ok
        assert result.reasons == frozenset({MissingField.STAR_ID})

    def test_missing_date(self, resolver):
        result = resolver.resolve("SFOLAU summary.xlsx")
        assert result.reasons == frozenset({MissingField.DATE, MissingField.CADENCE})

    def test_describe_lists_fields(self, resolver):
        result = resolver.resolve("nothing useful.xlsx")
        text = result.describe()
        assert "property" in text
        assert "date" in text


class TestContentFallback:

    def test_star_id_and_month_from_cells(self, resolver):
        text = "STR # 19650\nMonthly STAR Report\nFor the month of: April 2013"
        result = resolver.resolve("export (3).xlsx", content_loader=lambda: text)
        assert result.ok
        assert result.property_code == "SFOLAU"
        assert result.matched_by == "content star id"
        assert result.date.compact_form == "20130400"

    def test_name_from_cells(self, resolver):
        text = "Bowline Lighthouse | Portland, ME"
        result = resolver.resolve("export 2013-04-07.xlsx", content_loader=lambda: text)
        assert result.ok
        assert result.property_code == "BWLLIH"
        assert result.matched_by.startswith("content")

    def test_loader_not_called_when_filename_is_enough(self, resolver):
        def loader():
            pytest.fail("content loader should not be called")
        result = resolver.resolve("SFOLAU 2013-04-07.xlsx", content_loader=loader)
        assert result.ok

    def test_empty_content(self, resolver):
        result = resolver.resolve("export.xlsx", content_loader=lambda: None)
        assert not result.ok
        assert MissingField.PROPERTY in result.reasons
