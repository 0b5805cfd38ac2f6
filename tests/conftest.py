"""Shared fixtures: a small property directory used across test modules."""

import pytest

from resolver import IdentityResolver, PropertyDirectoryIndex, load_property_records

DIRECTORY_HEADER = [
    "Sort", "Property Name", "STR #", "Property Code", "Geo ID", "City", "State",
    "Search Keywords",
]

DIRECTORY_ROWS = [
    DIRECTORY_HEADER,
    [1, "Laurel Inn", "19650", "SFOLAU", "", "San Francisco", "CA", ""],
    [2, "La Bella Suites", 9402.0, "SANLAB", "", "San Diego", "CA", ""],
    [3, "Bowline Lighthouse", "77609", "BWLLIH", "", "Portland", "ME", ""],
    [4, "Harborview Grand", "30001", "HVGRND", "", "New York", "NY", "HVG Grand"],
    [5, "Harborview Plaza", "30002", "HVPLZA", "", "Boston", "MA", ""],
    [6, "Sunset Cove Resort", "41234", "SUNCOV", "FL", "Miami", "FL", "Sunset Cove; Cove Miami"],
    [7, "Quiet Harbor Lodge", "", "QHLODG", "", "Bar Harbor", "ME", ""],
]


@pytest.fixture
def directory_rows():
    return [list(row) for row in DIRECTORY_ROWS]


@pytest.fixture
def index(directory_rows):
    return PropertyDirectoryIndex.build(load_property_records(directory_rows))


@pytest.fixture
def resolver(index):
    return IdentityResolver(index)
