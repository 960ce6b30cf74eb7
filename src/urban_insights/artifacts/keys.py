"""Field-name canonicalization used for tolerant key lookups."""

import re
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

MISSING = object()


def normalize_lookup_key(key: str) -> str:
    """Lowercase ``key`` and collapse punctuation runs into single underscores.

    >>> normalize_lookup_key("APR-JUN 2025")
    'apr_jun_2025'
    """
    return _NON_ALNUM.sub("_", key.strip().lower()).strip("_")


def find_value(row: dict[str, Any], key: str, *, fuzzy: bool = True) -> Any:
    """Look ``key`` up in ``row`` exactly, then case-insensitively, then by
    normalized form. Returns ``MISSING`` when nothing matches."""
    if key in row:
        return row[key]

    lowered = key.lower()
    for candidate in row:
        if isinstance(candidate, str) and candidate.lower() == lowered:
            return row[candidate]

    if not fuzzy:
        return MISSING

    normalized = normalize_lookup_key(key)
    if not normalized:
        return MISSING
    for candidate in row:
        if not isinstance(candidate, str):
            continue
        if normalize_lookup_key(candidate) == normalized:
            return row[candidate]
    return MISSING
