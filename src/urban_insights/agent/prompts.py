"""Prompt text for the data exploration agent and its repair pass."""

from urban_insights.models.renderability import RenderabilityIssue

SYSTEM_PROMPT = """\
You are a data exploration assistant helping residents understand datasets \
about their local government area (LGA). Answer questions directly, query data \
when needed, and explain what you found.

WORKFLOW:
1. Use query_dataset with exact table and column names. Double-quote column \
names in SQL.
2. Explain the result. When presenting breakdowns, trends or comparisons, call \
render_ui with a chart or table alongside the explanation.
3. When the user asks for a report to a council member or representative, call \
render_report with a clear introduction, data-backed sections, a specific call \
to action and source citations.

BINDINGS:
- dataPath is "/" followed by the resultKey you gave query_dataset, e.g. "/sales".
- xKey, yKey, nameKey, valueKey and table columns must be column names that \
appear in that result's rows.

STYLE: concise, lead with the insight, no emojis."""

RENDER_UI_DESCRIPTION = """\
Render a visualization in the artifact panel.

Components:
- Card {title} and Grid {columns?}: containers with children
- Metric {label, value, trend?}: single statistic
- Text {content, variant?}
- Table {columns: string[], dataPath}
- BarChart / LineChart {title, dataPath, xKey, yKey}
- PieChart {title, dataPath, nameKey, valueKey}
- List {dataPath, template}"""

RENDER_REPORT_DESCRIPTION = """\
Generate a formal report the user can send to a local council member.

Fields: title, recipient, lga, date, introduction, sections, callToAction, \
closing, sources. Section types: text {content}, metric {title, content}, \
chart {chartType: bar|line|pie, dataPath, xKey/yKey or nameKey/valueKey}, \
table {columns, dataPath}."""

QUERY_DATASET_DESCRIPTION = """\
Run a read-only SELECT query. The rows are stored under resultKey and can be \
bound by render_ui / render_report through dataPath "/<resultKey>"."""

_UI_NODE_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string"},
        "props": {"type": "object"},
        "children": {"type": "array", "items": {"type": "object"}},
    },
    "required": ["type"],
}

_SECTION_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["text", "chart", "table", "metric"]},
        "title": {"type": "string"},
        "content": {"type": "string"},
        "dataPath": {"type": "string"},
        "chartType": {"type": "string", "enum": ["bar", "line", "pie"]},
        "xKey": {"type": "string"},
        "yKey": {"type": "string"},
        "nameKey": {"type": "string"},
        "valueKey": {"type": "string"},
        "columns": {"type": "array", "items": {"type": "string"}},
        "source": {"type": "string"},
    },
    "required": ["type"],
}

TOOL_DEFINITIONS = [
    {
        "name": "render_ui",
        "description": RENDER_UI_DESCRIPTION,
        "input_schema": {
            "type": "object",
            "properties": {"ui": _UI_NODE_SCHEMA},
            "required": ["ui"],
        },
    },
    {
        "name": "render_report",
        "description": RENDER_REPORT_DESCRIPTION,
        "input_schema": {
            "type": "object",
            "properties": {
                "report": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "recipient": {"type": "string"},
                        "lga": {"type": "string"},
                        "date": {"type": "string"},
                        "introduction": {"type": "string"},
                        "sections": {"type": "array", "items": _SECTION_SCHEMA},
                        "callToAction": {"type": "string"},
                        "closing": {"type": "string"},
                        "sources": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["title", "introduction", "sections"],
                }
            },
            "required": ["report"],
        },
    },
    {
        "name": "query_dataset",
        "description": QUERY_DATASET_DESCRIPTION,
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "resultKey": {"type": "string"},
            },
            "required": ["query", "resultKey"],
        },
    },
]

REPAIR_PROMPT_HEADER = """\
The artifact you rendered cannot be displayed as-is. These components have no \
renderable rows:
"""

REPAIR_PROMPT_FOOTER = """
Call render_ui and/or render_report again with corrected bindings. Reuse the \
existing query results wherever possible and only run query_dataset again if \
the needed columns were never queried. Use only keys that appear in the \
available keys. Do not add any narrative text to your reply."""


def _fmt_keys(keys: list[str]) -> str:
    return ", ".join(keys) if keys else "(none)"


def build_repair_prompt(issues: list[RenderabilityIssue]) -> str:
    lines = [REPAIR_PROMPT_HEADER]
    for i, issue in enumerate(issues, 1):
        lines.append(
            f"{i}. [{issue.target}] {issue.component_type} "
            f"at {issue.data_path or '(no dataPath)'}\n"
            f"   required keys: {_fmt_keys(issue.required_keys)}\n"
            f"   available keys: {_fmt_keys(issue.available_keys)}\n"
            f"   error: {issue.message}"
        )
    lines.append(REPAIR_PROMPT_FOOTER)
    return "\n".join(lines)
