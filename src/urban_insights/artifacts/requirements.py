"""Derive the data requirement of a UI node or report section.

Every component kind that binds to query rows is listed in exactly one of the
two tables below. Kinds absent from a table carry no data requirement.
"""

from collections.abc import Callable

from urban_insights.artifacts.matching import clean_keys
from urban_insights.models.renderability import DataRequirement, KeyCoverage
from urban_insights.models.report import ChartType, ReportSection, SectionType
from urban_insights.models.ui import UINode, UINodeType


def _keyed(data_path: str | None, *keys: str | None) -> DataRequirement | None:
    """Requirement for chart-like bindings: every key must be present."""
    if not data_path or not all(k and k.strip() for k in keys):
        return None
    return DataRequirement(
        data_path=data_path,
        required_keys=clean_keys([k for k in keys if k]),
        require_all_keys=True,
    )


def _columns(
    data_path: str | None, columns: list[str] | None
) -> DataRequirement | None:
    cleaned = clean_keys(columns or [])
    if not data_path or not cleaned:
        return None
    return DataRequirement(
        data_path=data_path,
        required_keys=cleaned,
        require_all_keys=False,
        require_key_coverage=KeyCoverage.ALL,
    )


def _xy_chart(node: UINode) -> DataRequirement | None:
    return _keyed(
        node.prop_str("dataPath"), node.prop_str("xKey"), node.prop_str("yKey")
    )


def _pie_chart(node: UINode) -> DataRequirement | None:
    return _keyed(
        node.prop_str("dataPath"), node.prop_str("nameKey"), node.prop_str("valueKey")
    )


def _table(node: UINode) -> DataRequirement | None:
    return _columns(node.prop_str("dataPath"), node.prop_str_list("columns"))


def _list(node: UINode) -> DataRequirement | None:
    # Items render through a template string; only the path itself matters.
    data_path = node.prop_str("dataPath")
    return DataRequirement(data_path=data_path) if data_path else None


UI_REQUIREMENTS: dict[str, Callable[[UINode], DataRequirement | None]] = {
    UINodeType.BAR_CHART: _xy_chart,
    UINodeType.LINE_CHART: _xy_chart,
    UINodeType.PIE_CHART: _pie_chart,
    UINodeType.TABLE: _table,
    UINodeType.LIST: _list,
}


def _xy_section(section: ReportSection) -> DataRequirement | None:
    return _keyed(section.data_path, section.x_key, section.y_key)


def _pie_section(section: ReportSection) -> DataRequirement | None:
    return _keyed(section.data_path, section.name_key, section.value_key)


def _table_section(section: ReportSection) -> DataRequirement | None:
    return _columns(section.data_path, section.columns)


SectionRequirementFn = Callable[[ReportSection], DataRequirement | None]

CHART_REQUIREMENTS: dict[str, SectionRequirementFn] = {
    ChartType.BAR: _xy_section,
    ChartType.LINE: _xy_section,
    ChartType.PIE: _pie_section,
}


def is_data_bound(node: UINode) -> bool:
    """Whether ``node`` is a kind that only makes sense with bound rows."""
    return node.type in UI_REQUIREMENTS


def ui_requirement(node: UINode) -> DataRequirement | None:
    derive = UI_REQUIREMENTS.get(node.type)
    return derive(node) if derive else None


def section_requirement(section: ReportSection) -> DataRequirement | None:
    if section.type == SectionType.TABLE:
        return _table_section(section)
    if section.type == SectionType.CHART:
        derive = CHART_REQUIREMENTS.get(section.chart_type or "")
        return derive(section) if derive else None
    return None
