from urban_insights.artifacts.sanitizer import (
    build_query_result_data,
    coerce_query_results,
    sanitize_artifact_content,
)
from urban_insights.models.query import QueryResult
from urban_insights.models.report import Report, ReportSection
from urban_insights.models.ui import UINode


class TestQueryResultData:
    def test_malformed_results_dropped(self):
        raw = [
            {"resultKey": "a", "data": [{"x": 1}]},
            {"resultKey": "b", "data": "not a list"},
            {"data": []},
            "junk",
            QueryResult(result_key="c", data=[]),
        ]
        results = coerce_query_results(raw)
        assert [r.result_key for r in results] == ["a", "c"]

    def test_later_duplicate_wins(self):
        data = build_query_result_data(
            [
                {"resultKey": "a", "data": [{"x": 1}]},
                {"resultKey": "a", "data": [{"x": 2}]},
            ]
        )
        assert data == {"a": [{"x": 2}]}


class TestSanitizeArtifact:
    def test_only_binding_empty(self):
        ui = UINode.model_validate(
            {
                "type": "Card",
                "children": [
                    {
                        "type": "BarChart",
                        "props": {"dataPath": "/crime", "xKey": "y", "yKey": "n"},
                    }
                ],
            }
        )
        result = sanitize_artifact_content(
            ui=ui, query_results=[QueryResult(result_key="crime", data=[])]
        )
        assert result.ui is None
        assert result.report is None
        assert result.has_renderable_content is False
        assert result.data == {"crime": []}

    def test_renderable_ui(self):
        ui = UINode(
            type="Table", props={"dataPath": "/crime", "columns": ["suburb", "n"]}
        )
        result = sanitize_artifact_content(
            ui=ui,
            query_results=[{"resultKey": "crime", "data": [{"suburb": "A"}, {"n": 2}]}],
        )
        assert result.ui is not None
        assert result.has_renderable_content

    def test_report_narrative_is_renderable(self):
        report = Report(
            title="Letter",
            call_to_action="Please fund more lighting.",
            sections=[ReportSection(type="table", data_path="/x", columns=["a"])],
        )
        result = sanitize_artifact_content(report=report)
        assert result.ui is None
        assert result.report is not None
        assert result.report.sections == []
        assert result.has_renderable_content

    def test_empty_artifact(self):
        result = sanitize_artifact_content()
        assert result.ui is None
        assert result.report is None
        assert not result.has_renderable_content
