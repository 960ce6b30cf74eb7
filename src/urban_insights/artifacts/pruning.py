"""Reduce a UI tree or report to the parts that can actually render."""

import logging
from typing import Any

from urban_insights.artifacts.matching import resolve_renderable_rows
from urban_insights.artifacts.requirements import (
    is_data_bound,
    section_requirement,
    ui_requirement,
)
from urban_insights.config import STRUCTURAL_UI_TYPES
from urban_insights.models.report import Report, ReportSection, SectionType
from urban_insights.models.ui import UINode, UINodeType

logger = logging.getLogger(__name__)


def _has_text(node: UINode, *keys: str) -> bool:
    return any((node.prop_str(key) or "").strip() for key in keys)


def prune_ui(node: UINode | None, data: dict[str, Any]) -> UINode | None:
    """Return a copy of ``node`` holding only renderable content, or ``None``.

    Structural containers survive only through their children. Component kinds
    this module does not know and that carry no children are kept untouched.
    """
    if node is None:
        return None

    children = [
        pruned
        for child in node.children or []
        if (pruned := prune_ui(child, data)) is not None
    ]

    requirement = ui_requirement(node)
    if requirement is not None:
        resolved = resolve_renderable_rows(data, requirement.data_path, requirement)
        if not resolved.rows:
            logger.debug(
                "Pruned %s at %s: %s", node.type, requirement.data_path, resolved.error
            )
            return None
        return node.with_children(children)

    if is_data_bound(node):
        logger.debug("Pruned %s without a usable data binding", node.type)
        return None

    if node.type == UINodeType.TEXT:
        return node.with_children(children) if _has_text(node, "content") else None

    if node.type == UINodeType.METRIC:
        if not _has_text(node, "label", "value"):
            return None
        return node.with_children(children)

    if children:
        return node.with_children(children)

    if node.type in STRUCTURAL_UI_TYPES:
        return None

    return node.with_children(children)


def is_section_renderable(section: ReportSection, data: dict[str, Any]) -> bool:
    if section.type == SectionType.TEXT:
        return section.has_text("content")

    if section.type == SectionType.METRIC:
        return section.has_text("content", "title")

    requirement = section_requirement(section)
    if requirement is None:
        return False

    resolved = resolve_renderable_rows(data, requirement.data_path, requirement)
    return bool(resolved.rows)


def prune_report(report: Report | None, data: dict[str, Any]) -> Report | None:
    if report is None:
        return None
    sections = [s for s in report.sections if is_section_renderable(s, data)]
    if len(sections) < len(report.sections):
        logger.debug(
            "Pruned %d report section(s)", len(report.sections) - len(sections)
        )
    return report.model_copy(update={"sections": sections})


def has_renderable_report(report: Report | None, data: dict[str, Any]) -> bool:
    if report is None:
        return False
    if any(is_section_renderable(s, data) for s in report.sections):
        return True
    return report.has_narrative
