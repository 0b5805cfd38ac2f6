"""Name normalization and tokenization shared by every matching stage."""

import re
import unicodedata
from typing import Iterable, List

# Words that never identify a property on their own.
GENERIC_STOPWORDS = frozenset({
    # articles and connectives
    "the", "and", "for", "von", "del", "les", "los",
    # file extension words
    "xls", "xlsx", "xlsm", "csv", "pdf", "copy",
    # cadence and report words
    "monthly", "weekly", "daily", "star", "monthlystar", "weeklystar",
    "report", "reports", "usd", "str", "month", "week", "final",
    # generic lodging nouns
    "hotel", "hotels", "resort", "resorts", "inn", "spa", "suites", "suite",
    "motel", "lodging", "property",
})

_NON_ALNUM = re.compile(r'[^a-z0-9]+')
_SPLIT = re.compile(r'[^A-Za-z0-9]+')


def normalize(text: str) -> str:
    """Fold a string to lowercase ASCII letters and digits only.

    Diacritics are stripped, ``&`` becomes ``and`` and curly apostrophes are
    treated as plain ones before punctuation is removed. Never raises.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", str(text))
    folded = "".join(c for c in decomposed if not unicodedata.combining(c))
    folded = folded.replace("&", " and ")
    folded = folded.replace("’", "'").replace("‘", "'")
    return _NON_ALNUM.sub("", folded.lower()).strip()


def tokenize(text: str, stopwords: Iterable[str] = ()) -> List[str]:
    """Split on non-alphanumeric runs and normalize each piece.

    Tokens shorter than 3 characters and stopwords (the generic set plus any
    caller-supplied words) are dropped. Order is preserved.
    """
    blocked = GENERIC_STOPWORDS | {normalize(w) for w in stopwords}
    tokens = []
    for piece in _SPLIT.split(text or ""):
        token = normalize(piece)
        if len(token) < 3 or token in blocked:
            continue
        tokens.append(token)
    return tokens


def fuse_bigrams(tokens: List[str]) -> List[str]:
    """Concatenate adjacent token pairs, keeping fused strings of length >= 5."""
    fused = []
    for left, right in zip(tokens, tokens[1:]):
        joined = left + right
        if len(joined) >= 5:
            fused.append(joined)
    return fused
