from urban_insights.models.query import QueryResult
from urban_insights.models.report import ChartType, Report, ReportSection, SectionType
from urban_insights.models.session import ArtifactState, ChatSession
from urban_insights.models.ui import UINode


class TestUINode:
    def test_unknown_type_survives(self):
        node = UINode.model_validate({"type": "Sparkline", "props": {"dataPath": "/a"}})
        assert node.model_dump(exclude_none=True) == {
            "type": "Sparkline",
            "props": {"dataPath": "/a"},
        }

    def test_prop_helpers(self):
        node = UINode(type="Table", props={"title": 3, "columns": ["a", " ", 1, "b"]})
        assert node.prop_str("title") is None
        assert node.prop_str_list("columns") == ["a", "b"]
        assert node.prop_str_list("missing") == []

    def test_with_children_empty(self):
        node = UINode(type="Grid", children=[UINode(type="Text")])
        assert node.with_children([]).children is None
        assert node.children is not None


class TestReportSection:
    def test_component_type(self):
        chart = ReportSection(type=SectionType.CHART, chart_type=ChartType.PIE)
        assert chart.component_type == "chart:pie"
        assert ReportSection(type=SectionType.CHART).component_type == "chart:unknown"
        assert ReportSection(type=SectionType.TABLE).component_type == "table"

    def test_camel_case_aliases(self):
        section = ReportSection.model_validate(
            {"type": "chart", "chartType": "bar", "dataPath": "/x", "xKey": "year"}
        )
        assert section.data_path == "/x"
        dumped = section.model_dump(by_alias=True, exclude_none=True)
        assert dumped["xKey"] == "year"

    def test_has_text(self):
        section = ReportSection(type=SectionType.TEXT, title="  ", content="Body")
        assert section.has_text("title", "content")
        assert not section.has_text("title")


class TestReport:
    def test_has_narrative(self):
        assert not Report(introduction=" ").has_narrative
        assert Report(call_to_action="Please act.").has_narrative


class TestQueryResult:
    def test_populate_by_name(self):
        result = QueryResult.model_validate({"resultKey": "crime", "data": [1, [2]]})
        assert result.result_key == "crime"
        assert result.data == [1, [2]]
        assert QueryResult(result_key="x").partial is False


class TestArtifactState:
    def test_index_clamped(self):
        assert ArtifactState(index=5).index == -1
        assert ArtifactState(items=[{}, {}], index=9).index == 1
        assert ArtifactState(items=[{}], index=-4).index == -1


class TestChatSession:
    def test_defaults(self):
        session = ChatSession.model_validate(
            {"id": "s", "createdAt": "a", "updatedAt": "b"}
        )
        assert session.messages == []
        assert session.artifact_state.index == -1
        assert session.suggestions is None
