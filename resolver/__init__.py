"""Resolution engine for STAR report filenames.

Turns inconsistently named report files into a canonical identity:
- normalize: string folding and tokenization
- directory: property directory index (code, name, alias lookups)
- dates: report period extraction
- kinds: special report / cadence classification
- identity: staged resolution with ambiguity detection
- canonical: canonical filename and destination path
- routing: route-table lookup for already canonical files
"""

from .normalize import normalize, tokenize, fuse_bigrams
from .headers import resolve_headers
from .directory import PropertyRecord, PropertyDirectoryIndex, load_property_records
from .dates import ParsedDate, resolve_date
from .kinds import ReportKind, classify_special, cadence_for
from .identity import IdentityResolver, MissingField, Resolved, Unresolved
from .canonical import build_canonical_name, build_destination_path, is_canonical
from .routing import build_route_table, extract_route_key, route, route_key


__all__ = [
    'normalize',
    'tokenize',
    'fuse_bigrams',
    'resolve_headers',
    'PropertyRecord',
    'PropertyDirectoryIndex',
    'load_property_records',
    'ParsedDate',
    'resolve_date',
    'ReportKind',
    'classify_special',
    'cadence_for',
    'IdentityResolver',
    'MissingField',
    'Resolved',
    'Unresolved',
    'build_canonical_name',
    'build_destination_path',
    'is_canonical',
    'build_route_table',
    'extract_route_key',
    'route',
    'route_key',
]
