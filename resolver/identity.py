"""Identity resolution: filename (and optional cell text) to report identity.

Stages run in a fixed order and stop at the first decision:

1. Property code tokens (trusted outright, no scoring)
2. Name/alias matching: exact, then longest contained key, then token overlap
3. Report period from the filename with folder-name year context
4. Special report kind, else cadence from the period

A file is resolved only when property, STAR ID, period and kind are all
known. Ambiguous name matches are never guessed.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from .content import extract_star_id
from .dates import ParsedDate, resolve_date, resolve_month_name_date
from .directory import PropertyDirectoryIndex, PropertyRecord
from .kinds import ReportKind, classify
from .normalize import fuse_bigrams, normalize, tokenize


class MissingField(Enum):
    PROPERTY = "property"
    STAR_ID = "star id"
    DATE = "date"
    CADENCE = "cadence"


@dataclass(frozen=True)
class Resolved:
    """A file whose full identity is known."""
    record: PropertyRecord
    date: ParsedDate
    kind: ReportKind
    matched_by: str = ""

    ok = True

    @property
    def property_code(self) -> str:
        return self.record.property_code

    @property
    def geo_id(self) -> str:
        return self.record.geo_id

    @property
    def star_id(self) -> str:
        return self.record.star_id


@dataclass(frozen=True)
class Unresolved:
    """A file that needs manual handling, with the fields that were missing."""
    reasons: FrozenSet[MissingField]
    detail: str = ""
    ambiguous: bool = False
    candidates: Tuple[str, ...] = ()

    ok = False

    def describe(self) -> str:
        missing = ", ".join(sorted(r.value for r in self.reasons))
        text = f"missing {missing}"
        if self.ambiguous:
            text += f" (ambiguous: {', '.join(self.candidates)})"
        if self.detail:
            text += f" - {self.detail}"
        return text


ResolutionResult = Union[Resolved, Unresolved]


@dataclass
class NameMatch:
    """Outcome of the name/alias stages."""
    record: Optional[PropertyRecord] = None
    stage: str = ""
    ambiguous: bool = False
    candidates: List[str] = field(default_factory=list)


CANONICAL_PREFIX = re.compile(
    r'^(?:MonthlySTAR|WeeklySTAR|PulseSTAR|BandwidthSTAR|RPM)_([A-Za-z0-9]+)-',
    re.IGNORECASE,
)
_CODE_TOKEN = re.compile(r'[A-Za-z0-9]+')

MIN_CODE_LENGTH = 2
MAX_CODE_LENGTH = 6
MIN_OVERLAP_TOKEN = 4


def _code_candidates(stem: str) -> List[str]:
    return [
        token for token in _CODE_TOKEN.findall(stem)
        if MIN_CODE_LENGTH <= len(token) <= MAX_CODE_LENGTH
        and any(c.isalpha() for c in token)
    ]


class IdentityResolver:
    """Resolves report filenames against one PropertyDirectoryIndex."""

    def __init__(self, index: PropertyDirectoryIndex) -> None:
        self.index = index

    # ------------------------------------------------------------------
    # Stage 1: property codes
    # ------------------------------------------------------------------

    def match_code(self, stem: str) -> Optional[PropertyRecord]:
        """Return the record for the first property code found in ``stem``.

        A block right after a canonical prefix is tried first, as a bare code
        and as geo id + code. Then short alphanumeric tokens are tried in
        filename order.
        """
        canonical = CANONICAL_PREFIX.match(stem)
        if canonical:
            block = canonical.group(1).upper()
            record = self.index.lookup_by_code(block)
            if record:
                return record
            for split in range(1, len(block)):
                geo, code = block[:split], block[split:]
                record = self.index.lookup_by_code(code)
                if record and record.geo_id.upper() == geo:
                    return record

        for token in _code_candidates(stem):
            record = self.index.lookup_by_code(token)
            if record:
                return record
        return None

    # ------------------------------------------------------------------
    # Stage 2: names and aliases
    # ------------------------------------------------------------------

    def match_name(self, text: str) -> NameMatch:
        key = normalize(text)
        if not key:
            return NameMatch()

        # (a) exact
        record = self.index.lookup_by_name_or_alias(key)
        if record:
            return NameMatch(record, "exact")

        # (b) longest contained key
        contained = [k for k in self.index.name_keys() if k in key]
        tied: List[PropertyRecord] = []
        if contained:
            longest = max(len(k) for k in contained)
            winners = []
            for k in contained:
                owner = self.index.by_name[k]
                if len(k) == longest and owner not in winners:
                    winners.append(owner)
            if len(winners) == 1:
                return NameMatch(winners[0], "contained")
            tied = winners

        # (c) token overlap
        match = self._match_tokens(text, key)
        if match.record is None and not match.ambiguous and tied:
            return NameMatch(None, "contained", True, [r.property_code for r in tied])
        return match

    def _match_tokens(self, text: str, key: str) -> NameMatch:
        tokens = tokenize(text)
        candidates = {t for t in tokens + fuse_bigrams(tokens) if len(t) >= MIN_OVERLAP_TOKEN}
        if not candidates:
            return NameMatch()

        best_length = 0
        best: List[PropertyRecord] = []
        for record in self.index.records:
            name = record.normalized_name
            hits = [len(t) for t in candidates if t in name]
            if not hits:
                continue
            length = max(hits)
            if length > best_length:
                best_length, best = length, [record]
            elif length == best_length and record not in best:
                best.append(record)

        if not best:
            return NameMatch()
        if len(best) > 1:
            return NameMatch(None, "token", True, [r.property_code for r in best])

        record = best[0]
        confirmed = record.normalized_name in key or any(
            alias in key for alias in record.normalized_aliases
        )
        if not confirmed:
            return NameMatch(None, "token")
        return NameMatch(record, "token")

    # ------------------------------------------------------------------
    # Cell content fallback
    # ------------------------------------------------------------------

    def match_content(self, text: str) -> NameMatch:
        star_id = extract_star_id(text)
        if star_id:
            record = self.index.lookup_by_star_id(star_id)
            if record:
                return NameMatch(record, "content star id")
        match = self.match_name(text)
        if match.stage:
            match.stage = f"content {match.stage}"
        return match

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def resolve(self, filename: str, parent_folders: Sequence[str] = (),
                content_loader: Optional[Callable[[], Optional[str]]] = None
                ) -> ResolutionResult:
        """Resolve a filename to a report identity.

        Args:
            filename: Report filename, with extension
            parent_folders: Enclosing folder names, nearest first
            content_loader: Optional callable returning the spreadsheet's
                cell text; only called when the filename alone is not enough

        Returns:
            Resolved or Unresolved
        """
        stem, _ = os.path.splitext(filename)

        record = self.match_code(stem)
        matched_by = "code" if record else ""
        name_match = NameMatch()
        if record is None:
            name_match = self.match_name(stem)
            record = name_match.record
            matched_by = name_match.stage if record else ""

        parsed = resolve_date(stem, parent_folders)

        details = []
        if (record is None or parsed is None) and content_loader is not None:
            text = content_loader()
            if text:
                if record is None:
                    content_match = self.match_content(text)
                    if content_match.record is not None:
                        record = content_match.record
                        matched_by = content_match.stage
                        name_match = content_match
                    elif content_match.ambiguous and not name_match.ambiguous:
                        name_match = content_match
                if parsed is None:
                    parsed = resolve_month_name_date(text)
                    if parsed:
                        details.append("period from cell content")

        kind = classify(stem, parsed)

        reasons = set()
        if record is None:
            reasons.add(MissingField.PROPERTY)
        elif not record.star_id:
            reasons.add(MissingField.STAR_ID)
        if parsed is None:
            reasons.add(MissingField.DATE)
        if kind is None:
            reasons.add(MissingField.CADENCE)

        if reasons:
            return Unresolved(
                reasons=frozenset(reasons),
                detail="; ".join(details),
                ambiguous=name_match.ambiguous,
                candidates=tuple(name_match.candidates),
            )
        return Resolved(record=record, date=parsed, kind=kind, matched_by=matched_by)
