"""Canonical report filenames and destination folder paths."""

import re
from typing import Tuple

from .identity import Resolved

CURRENCY_SUFFIX = "-USD-E"


def sanitize_folder_name(name: str) -> str:
    """Sanitize a string for use as a folder name."""
    name = name.replace('/', '-')
    name = name.replace('\\', '-')
    name = name.replace(':', '-')
    name = name.replace('*', '')
    name = name.replace('?', '')
    name = name.replace('"', "'")
    name = name.replace('<', '')
    name = name.replace('>', '')
    name = name.replace('|', '-')
    name = name.strip().strip('.')
    name = re.sub(r'\s+', ' ', name)
    if len(name) > 100:
        name = name[:100].strip()
    return name


def build_canonical_name(result: Resolved, extension: str = "") -> str:
    """Compose ``{prefix}{geoId}{code}-{starId}-{YYYYMMDD}-USD-E{ext}``.

    Pure; the same result and extension always give the same string.
    """
    return (
        f"{result.kind.prefix}{result.geo_id}{result.property_code}"
        f"-{result.star_id}-{result.date.compact_form}{CURRENCY_SUFFIX}{extension}"
    )


def build_destination_path(result: Resolved) -> Tuple[str, str, str]:
    """Return the three nested folder names for a resolved report.

    Example: ("SFOLAU Laurel Inn", "SFOLAU Monthly STAR", "SFOLAU 2013 Monthly STAR")
    """
    code = result.property_code
    label = result.kind.label
    level1 = sanitize_folder_name(f"{code} {result.record.property_name}")
    level2 = sanitize_folder_name(f"{code} {label}")
    level3 = sanitize_folder_name(f"{code} {result.date.year} {label}")
    return (level1, level2, level3)


def is_canonical(filename: str, result: Resolved, extension: str = "") -> bool:
    """True if ``filename`` already equals the canonical name for ``result``."""
    return filename == build_canonical_name(result, extension)
