"""Diagnostics describing why bound components cannot render.

Unlike the pruner, collection visits every node so that a repair prompt can
list all problems at once.
"""

from typing import Any

from urban_insights.artifacts.matching import resolve_renderable_rows
from urban_insights.artifacts.paths import DataPathError, walk_data_path
from urban_insights.artifacts.requirements import section_requirement, ui_requirement
from urban_insights.artifacts.sanitizer import build_query_result_data
from urban_insights.models.query import QueryResult
from urban_insights.models.renderability import (
    DataRequirement,
    IssueTarget,
    RenderabilityIssue,
)
from urban_insights.models.report import Report
from urban_insights.models.ui import UINode

NO_ROWS_MESSAGE = "No rows available for render"


def available_keys_at(data: dict[str, Any], data_path: str | None) -> list[str]:
    """Keys of the first record-shaped row found at ``data_path``."""
    if not data_path:
        return []
    try:
        terminal = walk_data_path(data, data_path)
    except DataPathError:
        return []

    if isinstance(terminal, list):
        sample = next((row for row in terminal if isinstance(row, dict)), None)
        return list(sample) if sample is not None else []
    if isinstance(terminal, dict):
        return list(terminal)
    return []


def _issue_for(
    target: IssueTarget,
    component_type: str,
    requirement: DataRequirement,
    data: dict[str, Any],
) -> RenderabilityIssue | None:
    resolved = resolve_renderable_rows(data, requirement.data_path, requirement)
    if resolved.rows:
        return None
    return RenderabilityIssue(
        target=target,
        component_type=component_type,
        message=resolved.error or NO_ROWS_MESSAGE,
        data_path=requirement.data_path,
        required_keys=requirement.required_keys,
        available_keys=available_keys_at(data, requirement.data_path),
    )


def collect_ui_issues(
    node: UINode | None, data: dict[str, Any]
) -> list[RenderabilityIssue]:
    issues: list[RenderabilityIssue] = []
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        requirement = ui_requirement(current)
        if requirement is not None:
            issue = _issue_for(IssueTarget.UI, current.type, requirement, data)
            if issue is not None:
                issues.append(issue)
        # reversed so that issues come out in document order
        stack.extend(reversed(current.children or []))
    return issues


def collect_report_issues(
    report: Report | None, data: dict[str, Any]
) -> list[RenderabilityIssue]:
    if report is None:
        return []
    issues: list[RenderabilityIssue] = []
    for section in report.sections:
        requirement = section_requirement(section)
        if requirement is None:
            continue
        issue = _issue_for(
            IssueTarget.REPORT, section.component_type, requirement, data
        )
        if issue is not None:
            issues.append(issue)
    return issues


def collect_renderability_issues(
    ui: UINode | None = None,
    report: Report | None = None,
    query_results: list[QueryResult] | None = None,
) -> list[RenderabilityIssue]:
    data = build_query_result_data(query_results or [])
    return collect_ui_issues(ui, data) + collect_report_issues(report, data)
