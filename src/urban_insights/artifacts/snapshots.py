"""Minimal stored copies of the rows an artifact displays.

A snapshot only ever holds the result keys an artifact binds to, projected to
the columns its components declare and capped per component kind, so that it
can be persisted next to the artifact and redisplayed without re-running the
queries.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from urban_insights.artifacts.keys import MISSING, find_value
from urban_insights.artifacts.paths import to_result_key
from urban_insights.artifacts.sanitizer import coerce_query_results
from urban_insights.config import ArtifactConfig
from urban_insights.models.query import QueryResult, Row
from urban_insights.models.report import ChartType, Report, SectionType
from urban_insights.models.session import ArtifactDataSnapshot
from urban_insights.models.ui import UINode, UINodeType

logger = logging.getLogger(__name__)


@dataclass
class SnapshotRequirement:
    columns: frozenset[str] | None  # None means every column is kept
    row_limit: int

    def merge(self, other: "SnapshotRequirement") -> "SnapshotRequirement":
        if self.columns is None or other.columns is None:
            columns = None
        else:
            columns = self.columns | other.columns
        return SnapshotRequirement(columns, max(self.row_limit, other.row_limit))


class _RequirementCollector:
    def __init__(self, config: ArtifactConfig) -> None:
        self.config = config
        self.requirements: dict[str, SnapshotRequirement] = {}
        self._column_order: dict[str, list[str]] = {}

    def register(
        self, data_path: str | None, columns: list[str] | None, row_limit: int
    ) -> None:
        result_key = to_result_key(data_path)
        if result_key is None:
            return

        declared: frozenset[str] | None = None
        if columns is not None:
            cleaned = [c.strip() for c in columns if isinstance(c, str) and c.strip()]
            if not cleaned:
                # A keyed component that declares no keys cannot render.
                return
            declared = frozenset(cleaned)
            order = self._column_order.setdefault(result_key, [])
            order.extend(c for c in cleaned if c not in order)

        incoming = SnapshotRequirement(declared, row_limit)
        existing = self.requirements.get(result_key)
        self.requirements[result_key] = (
            incoming if existing is None else existing.merge(incoming)
        )

    def ordered_columns(self, result_key: str) -> list[str] | None:
        requirement = self.requirements[result_key]
        if requirement.columns is None:
            return None
        return self._column_order[result_key]

    def collect_ui(self, root: UINode | None) -> None:
        stack = [root] if root is not None else []
        while stack:
            node = stack.pop()
            data_path = node.prop_str("dataPath")
            if node.type in (UINodeType.BAR_CHART, UINodeType.LINE_CHART):
                self.register(
                    data_path,
                    [node.prop_str("xKey") or "", node.prop_str("yKey") or ""],
                    self.config.chart_row_limit,
                )
            elif node.type == UINodeType.PIE_CHART:
                self.register(
                    data_path,
                    [node.prop_str("nameKey") or "", node.prop_str("valueKey") or ""],
                    self.config.chart_row_limit,
                )
            elif node.type == UINodeType.TABLE:
                self.register(
                    data_path,
                    node.prop_str_list("columns"),
                    self.config.table_row_limit,
                )
            else:
                self.register(data_path, None, self.config.fallback_row_limit)
            stack.extend(reversed(node.children or []))

    def collect_report(self, report: Report | None) -> None:
        if report is None:
            return
        for section in report.sections:
            if section.type == SectionType.CHART and section.chart_type in (
                ChartType.BAR,
                ChartType.LINE,
            ):
                self.register(
                    section.data_path,
                    [section.x_key or "", section.y_key or ""],
                    self.config.chart_row_limit,
                )
            elif (
                section.type == SectionType.CHART
                and section.chart_type == ChartType.PIE
            ):
                self.register(
                    section.data_path,
                    [section.name_key or "", section.value_key or ""],
                    self.config.chart_row_limit,
                )
            elif section.type == SectionType.TABLE:
                self.register(
                    section.data_path,
                    section.columns or [],
                    self.config.table_row_limit,
                )
            else:
                self.register(section.data_path, None, self.config.fallback_row_limit)


def project_row(row: Row, columns: list[str] | None) -> Row:
    """Keep only ``columns`` of ``row``, each under its declared casing.

    A lowercase alias is added when the declared name is not lowercase, so
    components that look the key up in either form still find it.
    """
    if columns is None:
        return dict(row)

    projected: Row = {}
    for column in columns:
        value = find_value(row, column, fuzzy=False)
        if value is MISSING:
            continue
        projected[column] = value
        lowered = column.lower()
        if lowered != column and lowered not in projected:
            projected[lowered] = value
    return projected


def build_artifact_data_snapshot(
    ui: UINode | None = None,
    report: Report | None = None,
    query_results: Iterable[QueryResult | dict[str, Any]] = (),
    config: ArtifactConfig | None = None,
) -> ArtifactDataSnapshot:
    collector = _RequirementCollector(config or ArtifactConfig())
    collector.collect_ui(ui)
    collector.collect_report(report)
    if not collector.requirements:
        return {}

    snapshot: ArtifactDataSnapshot = {}
    for result in coerce_query_results(query_results):
        requirement = collector.requirements.get(result.result_key)
        if requirement is None:
            continue
        rows = [row for row in result.data if isinstance(row, dict)]
        if not rows:
            continue
        columns = collector.ordered_columns(result.result_key)
        snapshot[result.result_key] = [
            project_row(row, columns) for row in rows[: requirement.row_limit]
        ]

    logger.debug(
        "Built snapshot for %d of %d bound result key(s)",
        len(snapshot),
        len(collector.requirements),
    )
    return snapshot


def merge_query_results_with_snapshot(
    query_results: list[QueryResult],
    snapshot: ArtifactDataSnapshot | None,
) -> list[QueryResult]:
    """Fill missing or empty live results from ``snapshot``.

    Live results with rows are returned unchanged. Substitutes carry the live
    entry's query text, when there is one, and are flagged ``partial``.
    """
    if not snapshot:
        return list(query_results)

    merged: dict[str, QueryResult] = {r.result_key: r for r in query_results}
    for result_key, rows in snapshot.items():
        existing = merged.get(result_key)
        if existing is not None and existing.data:
            continue
        merged[result_key] = QueryResult(
            result_key=result_key,
            data=rows,
            query=existing.query if existing is not None else None,
            partial=True,
        )
    return list(merged.values())


def snapshot_has_rows(snapshot: ArtifactDataSnapshot | None, result_key: str) -> bool:
    if not snapshot:
        return False
    rows = snapshot.get(result_key)
    return isinstance(rows, list) and len(rows) > 0
