from urban_insights.artifacts.snapshots import (
    build_artifact_data_snapshot,
    merge_query_results_with_snapshot,
    project_row,
    snapshot_has_rows,
)
from urban_insights.config import ArtifactConfig
from urban_insights.models.query import QueryResult
from urban_insights.models.report import Report, ReportSection
from urban_insights.models.ui import UINode


def _rows(n: int) -> list[dict]:
    return [{"year": 2000 + i, "count": i, "extra": "x"} for i in range(n)]


class TestProjectRow:
    def test_keeps_declared_columns(self):
        row = {"year": 2024, "count": 10, "ignored": "x"}
        assert project_row(row, ["year", "count"]) == {"year": 2024, "count": 10}

    def test_declared_casing_and_lowercase_alias(self):
        row = {"year": 2024}
        assert project_row(row, ["Year"]) == {"Year": 2024, "year": 2024}

    def test_no_restriction(self):
        row = {"a": 1}
        projected = project_row(row, None)
        assert projected == row
        assert projected is not row

    def test_missing_column_skipped(self):
        assert project_row({"a": 1}, ["b"]) == {}


class TestBuildSnapshot:
    def test_bar_chart_projection(self):
        ui = UINode(
            type="BarChart",
            props={"dataPath": "/crime_trend", "xKey": "year", "yKey": "count"},
        )
        results = [
            QueryResult(
                result_key="crime_trend",
                data=[{"year": 2024, "count": 10, "ignored": "x"}],
            )
        ]
        snapshot = build_artifact_data_snapshot(ui=ui, query_results=results)
        assert snapshot == {"crime_trend": [{"year": 2024, "count": 10}]}

    def test_unreferenced_results_omitted(self):
        ui = UINode(type="List", props={"dataPath": "/a"})
        results = [
            QueryResult(result_key="a", data=[{"x": 1}]),
            QueryResult(result_key="b", data=[{"y": 2}]),
        ]
        snapshot = build_artifact_data_snapshot(ui=ui, query_results=results)
        assert snapshot == {"a": [{"x": 1}]}

    def test_row_caps(self):
        config = ArtifactConfig(
            chart_row_limit=5, table_row_limit=3, fallback_row_limit=4
        )
        ui = UINode.model_validate(
            {
                "type": "Grid",
                "children": [
                    {"type": "Table", "props": {"dataPath": "/t", "columns": ["year"]}},
                    {
                        "type": "LineChart",
                        "props": {"dataPath": "/c", "xKey": "year", "yKey": "count"},
                    },
                    {"type": "List", "props": {"dataPath": "/l"}},
                ],
            }
        )
        results = [
            QueryResult(result_key="t", data=_rows(10)),
            QueryResult(result_key="c", data=_rows(10)),
            QueryResult(result_key="l", data=_rows(10)),
        ]
        snapshot = build_artifact_data_snapshot(
            ui=ui, query_results=results, config=config
        )
        assert len(snapshot["t"]) == 3
        assert len(snapshot["c"]) == 5
        assert len(snapshot["l"]) == 4
        assert snapshot["t"][0] == {"year": 2000}
        assert snapshot["l"][0] == {"year": 2000, "count": 0, "extra": "x"}

    def test_union_of_columns_and_max_cap(self):
        config = ArtifactConfig(chart_row_limit=6, table_row_limit=2)
        ui = UINode.model_validate(
            {
                "type": "Grid",
                "children": [
                    {
                        "type": "Table",
                        "props": {"dataPath": "/c", "columns": ["extra"]},
                    },
                    {
                        "type": "BarChart",
                        "props": {"dataPath": "/c", "xKey": "year", "yKey": "count"},
                    },
                ],
            }
        )
        results = [QueryResult(result_key="c", data=_rows(10))]
        snapshot = build_artifact_data_snapshot(
            ui=ui, query_results=results, config=config
        )
        assert len(snapshot["c"]) == 6
        assert snapshot["c"][0] == {"extra": "x", "year": 2000, "count": 0}

    def test_unrestricted_binding_wins_over_columns(self):
        report = Report(
            title="r",
            sections=[
                ReportSection(type="table", data_path="/c", columns=["year"]),
                ReportSection(type="text", content="see data", data_path="/c"),
            ],
        )
        results = [QueryResult(result_key="c", data=_rows(1))]
        snapshot = build_artifact_data_snapshot(report=report, query_results=results)
        assert snapshot["c"] == [{"year": 2000, "count": 0, "extra": "x"}]

    def test_keyed_binding_without_keys_registers_nothing(self):
        ui = UINode(type="Table", props={"dataPath": "/c", "columns": []})
        results = [QueryResult(result_key="c", data=_rows(3))]
        assert build_artifact_data_snapshot(ui=ui, query_results=results) == {}

    def test_empty_and_scalar_rows_skipped(self):
        ui = UINode.model_validate(
            {
                "type": "Grid",
                "children": [
                    {"type": "List", "props": {"dataPath": "/empty"}},
                    {"type": "List", "props": {"dataPath": "/scalars"}},
                ],
            }
        )
        results = [
            QueryResult(result_key="empty", data=[]),
            QueryResult(result_key="scalars", data=[1, 2]),
        ]
        assert build_artifact_data_snapshot(ui=ui, query_results=results) == {}

    def test_nothing_bound(self):
        results = [QueryResult(result_key="c", data=_rows(3))]
        assert build_artifact_data_snapshot(query_results=results) == {}

    def test_unknown_chart_type_registers_without_restriction(self):
        report = Report.model_validate(
            {
                "title": "r",
                "sections": [
                    {"type": "chart", "chartType": "area", "dataPath": "/c"},
                ],
            }
        )
        results = [QueryResult(result_key="c", data=_rows(1))]
        snapshot = build_artifact_data_snapshot(report=report, query_results=results)
        assert snapshot["c"] == [{"year": 2000, "count": 0, "extra": "x"}]


class TestMergeWithSnapshot:
    def test_live_rows_kept_unchanged(self):
        live = QueryResult(result_key="a", data=[{"x": 1}], query="SELECT 1")
        merged = merge_query_results_with_snapshot([live], {"a": [{"x": 9}]})
        assert merged == [live]

    def test_empty_live_replaced_with_partial_snapshot(self):
        live = QueryResult(result_key="a", data=[], query="SELECT x FROM t")
        merged = merge_query_results_with_snapshot([live], {"a": [{"x": 9}]})
        assert len(merged) == 1
        assert merged[0].data == [{"x": 9}]
        assert merged[0].partial is True
        assert merged[0].query == "SELECT x FROM t"

    def test_snapshot_only_keys_appended(self):
        live = QueryResult(result_key="a", data=[{"x": 1}])
        merged = merge_query_results_with_snapshot(
            [live], {"b": [{"y": 2}], "a": [{"x": 3}]}
        )
        assert [r.result_key for r in merged] == ["a", "b"]
        assert merged[1].partial is True
        assert merged[1].query is None

    def test_no_snapshot(self):
        live = [QueryResult(result_key="a", data=[])]
        assert merge_query_results_with_snapshot(live, None) == live

    def test_snapshot_has_rows(self):
        assert snapshot_has_rows({"a": [{"x": 1}]}, "a")
        assert not snapshot_has_rows({"a": []}, "a")
        assert not snapshot_has_rows(None, "a")
