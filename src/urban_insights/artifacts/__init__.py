"""Renderability checks and data snapshots for agent-generated artifacts."""

from urban_insights.artifacts.issues import collect_renderability_issues
from urban_insights.artifacts.keys import normalize_lookup_key
from urban_insights.artifacts.matching import match_rows, resolve_renderable_rows
from urban_insights.artifacts.paths import (
    DataPathError,
    NoObjectRows,
    NotAnArray,
    PathNotFound,
    resolve_data_path,
    to_result_key,
)
from urban_insights.artifacts.pruning import prune_report, prune_ui
from urban_insights.artifacts.sanitizer import (
    build_query_result_data,
    sanitize_artifact_content,
)
from urban_insights.artifacts.snapshots import (
    build_artifact_data_snapshot,
    merge_query_results_with_snapshot,
    snapshot_has_rows,
)

__all__ = [
    "DataPathError",
    "NoObjectRows",
    "NotAnArray",
    "PathNotFound",
    "build_artifact_data_snapshot",
    "build_query_result_data",
    "collect_renderability_issues",
    "match_rows",
    "merge_query_results_with_snapshot",
    "normalize_lookup_key",
    "prune_report",
    "prune_ui",
    "resolve_data_path",
    "resolve_renderable_rows",
    "sanitize_artifact_content",
    "snapshot_has_rows",
    "to_result_key",
]
