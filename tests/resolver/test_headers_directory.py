"""Tests for header resolution and the property directory index."""

import pytest

from resolver import PropertyDirectoryIndex, load_property_records, resolve_headers
from resolver.directory import PropertyRecord
from resolver.headers import (
    PROPERTY_HEADER_ALIASES,
    PROPERTY_REQUIRED_COLUMNS,
    normalize_header,
)
from starsort.errors import ConfigurationError


def record(code, name, star_id="1000", **kwargs):
    return PropertyRecord(property_code=code, property_name=name, star_id=star_id, **kwargs)


class TestResolveHeaders:

    def test_aliases_ignore_case_spaces_and_punctuation(self):
        header = ["sort", "Hotel Name", "STR #", "prop. code", "GEO-ID", "City", "St"]
        columns = resolve_headers(header, PROPERTY_REQUIRED_COLUMNS, PROPERTY_HEADER_ALIASES)
        assert columns == {
            "SORT": 0, "PROPERTYNAME": 1, "STARID": 2, "PROPERTYCODE": 3,
            "GEOID": 4, "CITY": 5, "STATE": 6,
        }

    def test_missing_columns_listed_with_headers_seen(self):
        header = ["Sort", "Property Name", "City"]
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_headers(header, PROPERTY_REQUIRED_COLUMNS, PROPERTY_HEADER_ALIASES)
        message = str(excinfo.value)
        for key in ("STARID", "PROPERTYCODE", "GEOID", "STATE"):
            assert key in message
        assert "Property Name" in message

    def test_optional_only_when_present(self):
        columns = resolve_headers(
            ["Code", "Aliases"], ["PROPERTYCODE"], PROPERTY_HEADER_ALIASES,
            optional=["SEARCHKEYWORDS", "CITY"],
        )
        assert columns == {"PROPERTYCODE": 0, "SEARCHKEYWORDS": 1}

    def test_normalize_header(self):
        assert normalize_header(" str # ") == "STR#"
        assert normalize_header(None) == ""


class TestLoadPropertyRecords:

    def test_loads_rows(self, directory_rows):
        records = load_property_records(directory_rows)
        assert len(records) == 7
        laurel = records[0]
        assert laurel.property_code == "SFOLAU"
        assert laurel.property_name == "Laurel Inn"
        assert laurel.geo_id == ""
        assert laurel.sort == "1"

    def test_integral_float_star_id(self, directory_rows):
        records = load_property_records(directory_rows)
        assert records[1].star_id == "9402"

    def test_keywords_split(self, directory_rows):
        records = load_property_records(directory_rows)
        assert records[5].search_keywords == ("Sunset Cove", "Cove Miami")

    def test_codes_uppercased_and_blank_codes_skipped(self, directory_rows):
        directory_rows.append([8, "Nameless", "555", "", "", "", "", ""])
        directory_rows.append([9, "Lower Case", "556", "lowcas", "", "", "", ""])
        codes = [r.property_code for r in load_property_records(directory_rows)]
        assert "LOWCAS" in codes
        assert len(codes) == 8

    def test_empty_table_raises(self):
        with pytest.raises(ConfigurationError):
            load_property_records([])

    def test_header_only_raises(self, directory_rows):
        with pytest.raises(ConfigurationError):
            load_property_records(directory_rows[:1])


class TestPropertyDirectoryIndex:

    def test_lookup_by_code_case_insensitive(self, index, directory_rows):
        for row in directory_rows[1:]:
            code = row[3]
            assert index.lookup_by_code(code.lower()).property_code == code
            assert index.lookup_by_code(code.upper()).property_code == code

    def test_lookup_by_name_and_alias(self, index):
        assert index.lookup_by_name_or_alias("laurelinn").property_code == "SFOLAU"
        assert index.lookup_by_name_or_alias("covemiami").property_code == "SUNCOV"
        assert index.lookup_by_name_or_alias("nothing") is None

    def test_unique_first_word_is_a_key(self, index):
        assert index.lookup_by_name_or_alias("laurel").property_code == "SFOLAU"
        assert index.lookup_by_name_or_alias("bowline").property_code == "BWLLIH"

    def test_shared_first_word_is_not_a_key(self, index):
        assert index.lookup_by_name_or_alias("harborview") is None

    def test_short_or_generic_first_word_is_not_a_key(self):
        index = PropertyDirectoryIndex.build([
            record("AAA", "La Quinta Airport"),
            record("BBB", "Hotel Marlowe"),
        ])
        assert index.lookup_by_name_or_alias("la") is None
        assert index.lookup_by_name_or_alias("hotel") is None

    def test_first_word_used_elsewhere_is_not_a_key(self):
        index = PropertyDirectoryIndex.build([
            record("AAA", "Grand Plaza"),
            record("BBB", "The Grand"),
        ])
        assert index.lookup_by_name_or_alias("grand") is None

    def test_conflicting_name_key_dropped(self):
        index = PropertyDirectoryIndex.build([
            record("AAA", "Grand Hotel", "1"),
            record("BBB", "Grand Hotel", "2"),
        ])
        assert index.lookup_by_name_or_alias("grandhotel") is None
        assert "grandhotel" in index.conflicts

    def test_duplicate_code_last_wins(self):
        index = PropertyDirectoryIndex.build([
            record("AAA", "First", "1"),
            record("AAA", "Second", "2"),
        ])
        assert index.lookup_by_code("AAA").property_name == "Second"
        assert index.duplicate_codes == ["AAA"]

    def test_shared_star_id_excluded(self):
        index = PropertyDirectoryIndex.build([
            record("AAA", "First", "123"),
            record("BBB", "Second", "123"),
            record("CCC", "Third", "456"),
        ])
        assert index.lookup_by_star_id("123") is None
        assert index.lookup_by_star_id("456").property_code == "CCC"

    def test_empty_index_raises(self):
        with pytest.raises(ConfigurationError):
            PropertyDirectoryIndex.build([])
