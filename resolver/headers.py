"""Header row resolution for tabular sources.

Maps logical column keys to column indexes by comparing headers with case,
spaces and punctuation ignored, using a fixed alias table per logical key.
"""

import re
from typing import Dict, Iterable, List, Sequence

from starsort.errors import ConfigurationError


PROPERTY_HEADER_ALIASES: Dict[str, List[str]] = {
    "SORT": ["SORT", "SORT ORDER", "ORDER", "#"],
    "PROPERTYNAME": ["PROPERTY NAME", "PROPERTY", "HOTEL NAME", "HOTEL", "NAME"],
    "STARID": ["STAR ID", "STR ID", "STRID", "STR #", "STR NUMBER", "STAR NUMBER", "STR"],
    "PROPERTYCODE": ["PROPERTY CODE", "PROP CODE", "CODE", "SPIRIT CODE"],
    "GEOID": ["GEO ID", "GEO", "GEO CODE"],
    "CITY": ["CITY"],
    "STATE": ["STATE", "ST", "PROVINCE"],
    "SEARCHKEYWORDS": ["SEARCH KEYWORDS", "KEYWORDS", "ALIASES", "ALIAS", "SEARCH TERMS"],
}

PROPERTY_REQUIRED_COLUMNS = [
    "SORT", "PROPERTYNAME", "STARID", "PROPERTYCODE", "GEOID", "CITY", "STATE",
]
PROPERTY_OPTIONAL_COLUMNS = ["SEARCHKEYWORDS"]


def normalize_header(header: object) -> str:
    """Uppercase and drop everything but letters, digits and '#'."""
    if header is None:
        return ""
    return re.sub(r'[^A-Z0-9#]', '', str(header).upper())


def resolve_headers(header_row: Sequence[object],
                    required: Iterable[str],
                    aliases: Dict[str, List[str]],
                    optional: Iterable[str] = ()) -> Dict[str, int]:
    """Map logical keys to column indexes.

    Args:
        header_row: The raw header cells
        required: Logical keys that must be found
        aliases: Logical key -> accepted header spellings
        optional: Logical keys included only when present

    Returns:
        Dict of logical key -> zero-based column index

    Raises:
        ConfigurationError: If any required key has no matching header. The
            message lists every unresolved key and every header seen.
    """
    positions: Dict[str, int] = {}
    for index, cell in enumerate(header_row):
        key = normalize_header(cell)
        if key and key not in positions:
            positions[key] = index

    def _find(logical: str):
        candidates = [logical] + aliases.get(logical, [])
        for candidate in candidates:
            index = positions.get(normalize_header(candidate))
            if index is not None:
                return index
        return None

    resolved: Dict[str, int] = {}
    missing = []
    for logical in required:
        index = _find(logical)
        if index is None:
            missing.append(logical)
        else:
            resolved[logical] = index

    if missing:
        seen = [str(h) for h in header_row if h not in (None, "")]
        raise ConfigurationError(
            f"Could not resolve required column(s): {', '.join(missing)}. "
            f"Headers seen: {seen}"
        )

    for logical in optional:
        index = _find(logical)
        if index is not None:
            resolved[logical] = index

    return resolved
