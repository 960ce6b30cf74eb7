"""Single-pass pruning of an agent artifact against its query results."""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from urban_insights.artifacts.pruning import (
    has_renderable_report,
    prune_report,
    prune_ui,
)
from urban_insights.models.query import QueryResult
from urban_insights.models.renderability import SanitizedArtifact
from urban_insights.models.report import Report
from urban_insights.models.ui import UINode

logger = logging.getLogger(__name__)


def coerce_query_results(raw: Iterable[Any]) -> list[QueryResult]:
    """Validate loosely-typed results, dropping the ones that are malformed."""
    results: list[QueryResult] = []
    for item in raw:
        if isinstance(item, QueryResult):
            results.append(item)
            continue
        try:
            results.append(QueryResult.model_validate(item))
        except ValidationError:
            logger.debug("Dropped malformed query result: %r", item)
    return results


def build_query_result_data(
    query_results: Iterable[QueryResult | dict[str, Any]],
) -> dict[str, list[Any]]:
    """Map each ``resultKey`` to its rows; later results win on duplicates."""
    return {r.result_key: r.data for r in coerce_query_results(query_results)}


def sanitize_artifact_content(
    ui: UINode | None = None,
    report: Report | None = None,
    query_results: Iterable[QueryResult | dict[str, Any]] = (),
) -> SanitizedArtifact:
    data = build_query_result_data(query_results)
    sanitized_ui = prune_ui(ui, data)
    sanitized_report = prune_report(report, data)
    return SanitizedArtifact(
        ui=sanitized_ui,
        report=sanitized_report,
        data=data,
        has_renderable_content=(
            sanitized_ui is not None or has_renderable_report(sanitized_report, data)
        ),
    )
