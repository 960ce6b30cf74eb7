from urban_insights.artifacts.issues import (
    NO_ROWS_MESSAGE,
    available_keys_at,
    collect_renderability_issues,
)
from urban_insights.models.query import QueryResult
from urban_insights.models.renderability import IssueTarget
from urban_insights.models.report import Report, ReportSection
from urban_insights.models.ui import UINode


class TestAvailableKeys:
    def test_first_record_row(self):
        data = {"crime": ["x", {"suburb": "A", "apr_jun_2025": 1}]}
        assert available_keys_at(data, "/crime") == ["suburb", "apr_jun_2025"]

    def test_dict_terminal(self):
        assert available_keys_at({"meta": {"a": 1, "b": 2}}, "/meta") == ["a", "b"]

    def test_unresolvable(self):
        assert available_keys_at({}, "/nope") == []
        assert available_keys_at({"x": []}, None) == []


class TestCollectIssues:
    def setup_method(self):
        self.results = [
            QueryResult(
                result_key="crime",
                data=[{"suburb": "Carlton", "apr_jun_2025": 14}],
                query="SELECT * FROM crime",
            ),
            QueryResult(result_key="empty", data=[]),
        ]

    def test_no_issues_for_renderable_artifact(self):
        ui = UINode.model_validate(
            {
                "type": "BarChart",
                "props": {
                    "dataPath": "/crime",
                    "xKey": "Suburb",
                    "yKey": "APR-JUN 2025",
                },
            }
        )
        assert collect_renderability_issues(ui=ui, query_results=self.results) == []

    def test_wrong_key_reports_available_keys(self):
        ui = UINode.model_validate(
            {
                "type": "BarChart",
                "props": {"dataPath": "/crime", "xKey": "suburb", "yKey": "total"},
            }
        )
        issues = collect_renderability_issues(ui=ui, query_results=self.results)
        assert len(issues) == 1
        issue = issues[0]
        assert issue.target == IssueTarget.UI
        assert issue.component_type == "BarChart"
        assert issue.data_path == "/crime"
        assert issue.required_keys == ["suburb", "total"]
        assert issue.available_keys == ["suburb", "apr_jun_2025"]
        assert issue.message == "No rows matched required fields (suburb, total)"

    def test_empty_rows_use_default_message(self):
        ui = UINode(type="List", props={"dataPath": "/empty"})
        issues = collect_renderability_issues(ui=ui, query_results=self.results)
        assert issues[0].message == NO_ROWS_MESSAGE

    def test_issues_in_document_order_with_report_last(self):
        ui = UINode.model_validate(
            {
                "type": "Grid",
                "children": [
                    {"type": "Table", "props": {"dataPath": "/a", "columns": ["x"]}},
                    {
                        "type": "Card",
                        "children": [
                            {"type": "List", "props": {"dataPath": "/b"}},
                        ],
                    },
                    {"type": "List", "props": {"dataPath": "/c"}},
                ],
            }
        )
        report = Report(
            title="r",
            sections=[
                ReportSection(
                    type="chart",
                    chart_type="line",
                    data_path="/d",
                    x_key="x",
                    y_key="y",
                )
            ],
        )
        issues = collect_renderability_issues(
            ui=ui, report=report, query_results=self.results
        )
        assert [i.data_path for i in issues] == ["/a", "/b", "/c", "/d"]
        assert issues[-1].target == IssueTarget.REPORT
        assert issues[-1].component_type == "chart:line"
        assert issues[0].message == 'Data not found at path "/a"'

    def test_unbound_nodes_produce_no_issue(self):
        ui = UINode(type="BarChart", props={"dataPath": "/crime"})
        assert collect_renderability_issues(ui=ui, query_results=self.results) == []

    def test_serializes_with_camel_case(self):
        ui = UINode(type="Table", props={"dataPath": "/crime", "columns": ["x"]})
        issue = collect_renderability_issues(ui=ui, query_results=self.results)[0]
        dumped = issue.model_dump(by_alias=True)
        assert dumped["componentType"] == "Table"
        assert dumped["requiredKeys"] == ["x"]
        assert dumped["message"] == "Missing required fields (x)"
