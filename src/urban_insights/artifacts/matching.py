"""Match resolved rows against a data requirement.

Two independent checks apply. Coverage (``require_key_coverage``) asks whether
every required key exists somewhere in the row set at all; the per-row policy
(``require_all_keys``) asks whether a given row holds renderable values for
all, or at least one, of the required keys. Tables use coverage ``all`` with
the ``any`` row policy so optional columns may be sparse; charts need both
axis keys on every plotted row.
"""

import logging
import math
from typing import Any

from urban_insights.artifacts.keys import MISSING, find_value
from urban_insights.artifacts.paths import DataPathError, resolve_data_path
from urban_insights.models.renderability import (
    DataRequirement,
    KeyCoverage,
    ResolvedRows,
)

logger = logging.getLogger(__name__)


def has_renderable_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return math.isfinite(value)
    return True


def clean_keys(keys: list[str]) -> list[str]:
    return [key.strip() for key in keys if key.strip()]


def normalize_row(row: dict[str, Any], required_keys: list[str]) -> dict[str, Any]:
    """Copy fuzzily-matched values under the exact required key names.

    The original keys are kept, so the result is always a superset of ``row``.
    The input row is never mutated.
    """
    normalized: dict[str, Any] | None = None
    for key in required_keys:
        if key in row:
            continue
        value = find_value(row, key)
        if value is MISSING:
            continue
        if normalized is None:
            normalized = dict(row)
        normalized[key] = value
    return normalized if normalized is not None else row


def _row_matches(
    row: dict[str, Any], required_keys: list[str], require_all: bool
) -> bool:
    if not required_keys:
        return True
    matches = (has_renderable_value(row.get(key)) for key in required_keys)
    return all(matches) if require_all else any(matches)


def match_rows(
    rows: list[dict[str, Any]],
    required_keys: list[str] | None = None,
    *,
    require_all_keys: bool = True,
    require_key_coverage: KeyCoverage = KeyCoverage.ANY,
) -> ResolvedRows:
    keys = clean_keys(required_keys or [])
    normalized_rows = [normalize_row(row, keys) for row in rows]

    if keys and require_key_coverage == KeyCoverage.ALL:
        uncovered = [k for k in keys if not any(k in row for row in normalized_rows)]
        if uncovered:
            logger.debug("Uncovered required keys: %s", uncovered)
            return ResolvedRows(
                rows=[], error=f"Missing required fields ({', '.join(uncovered)})"
            )

    matched = [
        row for row in normalized_rows if _row_matches(row, keys, require_all_keys)
    ]
    if not matched:
        error = f"No rows matched required fields ({', '.join(keys)})" if keys else None
        return ResolvedRows(rows=[], error=error)
    return ResolvedRows(rows=matched)


def resolve_renderable_rows(
    data: dict[str, Any],
    data_path: str | None,
    requirement: DataRequirement | None = None,
) -> ResolvedRows:
    """Resolve ``data_path`` and apply ``requirement``; never raises."""
    if not data_path or not data_path.strip():
        return ResolvedRows(rows=[], error="Missing data path")

    try:
        rows = resolve_data_path(data, data_path)
    except DataPathError as exc:
        return ResolvedRows(rows=[], error=str(exc))

    if not rows:
        return ResolvedRows(rows=[])

    if requirement is None:
        return match_rows(rows)
    return match_rows(
        rows,
        requirement.required_keys,
        require_all_keys=requirement.require_all_keys,
        require_key_coverage=requirement.require_key_coverage,
    )
