"""Property directory loading and lookup index."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from starsort.errors import ConfigurationError
from .headers import (
    PROPERTY_HEADER_ALIASES,
    PROPERTY_OPTIONAL_COLUMNS,
    PROPERTY_REQUIRED_COLUMNS,
    resolve_headers,
)
from .normalize import normalize


# First words that are too generic to stand in for a property name.
FIRST_WORD_STOPLIST = frozenset({"resort", "hotel", "inn", "spa", "the"})


@dataclass(frozen=True)
class PropertyRecord:
    """One row of the property directory."""
    property_code: str
    property_name: str
    star_id: str
    geo_id: str = ""
    city: str = ""
    state: str = ""
    search_keywords: Tuple[str, ...] = ()
    sort: str = ""

    @property
    def normalized_name(self) -> str:
        return normalize(self.property_name)

    @property
    def normalized_aliases(self) -> Tuple[str, ...]:
        return tuple(a for a in (normalize(k) for k in self.search_keywords) if a)


def _cell_text(value: object) -> str:
    """Render a spreadsheet cell as trimmed text (integral floats lose '.0')."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _split_keywords(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in re.split(r'[,;|\n]', value) if part.strip())


def load_property_records(rows: Sequence[Sequence[object]]) -> List[PropertyRecord]:
    """Turn a header row plus data rows into PropertyRecords.

    Rows without a property code are skipped.

    Raises:
        ConfigurationError: If the table is empty or required columns
            cannot be located in the header row.
    """
    if not rows:
        raise ConfigurationError("Property directory table is empty")

    columns = resolve_headers(
        rows[0],
        PROPERTY_REQUIRED_COLUMNS,
        PROPERTY_HEADER_ALIASES,
        optional=PROPERTY_OPTIONAL_COLUMNS,
    )

    def cell(row: Sequence[object], key: str) -> str:
        index = columns.get(key)
        if index is None or index >= len(row):
            return ""
        return _cell_text(row[index])

    records = []
    for row in rows[1:]:
        code = cell(row, "PROPERTYCODE")
        if not code:
            continue
        records.append(PropertyRecord(
            property_code=code.upper(),
            property_name=cell(row, "PROPERTYNAME"),
            star_id=cell(row, "STARID"),
            geo_id=cell(row, "GEOID"),
            city=cell(row, "CITY"),
            state=cell(row, "STATE"),
            search_keywords=_split_keywords(cell(row, "SEARCHKEYWORDS")),
            sort=cell(row, "SORT"),
        ))

    if not records:
        raise ConfigurationError("Property directory has a header row but no property rows")
    return records


@dataclass
class PropertyDirectoryIndex:
    """In-memory lookups over the property directory.

    ``by_name`` holds normalized full names, aliases and unique first words.
    A key claimed by two different records is dropped and listed in
    ``conflicts`` so every remaining key resolves to exactly one record.
    """
    records: List[PropertyRecord]
    by_code: Dict[str, PropertyRecord] = field(default_factory=dict)
    by_name: Dict[str, PropertyRecord] = field(default_factory=dict)
    by_star_id: Dict[str, PropertyRecord] = field(default_factory=dict)
    conflicts: List[str] = field(default_factory=list)
    duplicate_codes: List[str] = field(default_factory=list)

    @classmethod
    def build(cls, records: Sequence[PropertyRecord]) -> "PropertyDirectoryIndex":
        if not records:
            raise ConfigurationError("Property directory is empty")

        index = cls(records=list(records))

        for record in records:
            code = record.property_code.upper()
            if code in index.by_code and index.by_code[code] != record:
                index.duplicate_codes.append(code)
            index.by_code[code] = record

        dropped = set()

        def claim(key: str, record: PropertyRecord) -> None:
            if not key or key in dropped:
                return
            existing = index.by_name.get(key)
            if existing is None:
                index.by_name[key] = record
            elif existing != record:
                del index.by_name[key]
                dropped.add(key)
                index.conflicts.append(key)

        for record in records:
            claim(record.normalized_name, record)
            for alias in record.normalized_aliases:
                claim(alias, record)

        # A first word qualifies only if no other record uses that word anywhere
        # in its name.
        word_owners: Dict[str, set] = {}
        for position, record in enumerate(records):
            for word in record.property_name.split():
                word_owners.setdefault(normalize(word), set()).add(position)
        for position, record in enumerate(records):
            words = record.property_name.split()
            if not words:
                continue
            first = normalize(words[0])
            if len(first) < 3 or first in FIRST_WORD_STOPLIST:
                continue
            if word_owners.get(first) == {position} and first not in index.by_name:
                claim(first, record)

        star_owners: Dict[str, List[PropertyRecord]] = {}
        for record in records:
            if record.star_id:
                star_owners.setdefault(record.star_id, []).append(record)
        for star_id, owners in star_owners.items():
            if len(owners) == 1:
                index.by_star_id[star_id] = owners[0]

        return index

    def lookup_by_code(self, code: str) -> Optional[PropertyRecord]:
        if not code:
            return None
        return self.by_code.get(code.upper())

    def lookup_by_name_or_alias(self, normalized_key: str) -> Optional[PropertyRecord]:
        if not normalized_key:
            return None
        return self.by_name.get(normalized_key)

    def lookup_by_star_id(self, star_id: str) -> Optional[PropertyRecord]:
        return self.by_star_id.get(str(star_id).strip()) if star_id else None

    def name_keys(self) -> List[str]:
        return list(self.by_name.keys())
