"""Narrative report emitted by the agent through ``render_report``."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SectionType(StrEnum):
    TEXT = "text"
    METRIC = "metric"
    TABLE = "table"
    CHART = "chart"


class ChartType(StrEnum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"


class ReportSection(BaseModel):
    """One section of a report.

    ``type`` and ``chart_type`` stay open strings so that a section with a tag
    this package does not know is pruned on its own instead of failing the
    whole report; ``SectionType`` and ``ChartType`` list the known tags.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str
    title: str | None = None
    content: str | None = None
    data_path: str | None = Field(None, alias="dataPath")
    chart_type: str | None = Field(None, alias="chartType")
    x_key: str | None = Field(None, alias="xKey")
    y_key: str | None = Field(None, alias="yKey")
    name_key: str | None = Field(None, alias="nameKey")
    value_key: str | None = Field(None, alias="valueKey")
    columns: list[str] | None = None
    source: str | None = None

    @property
    def component_type(self) -> str:
        if self.type == SectionType.CHART:
            return f"chart:{self.chart_type or 'unknown'}"
        return str(self.type)

    def has_text(self, *fields: str) -> bool:
        for name in fields:
            value = getattr(self, name)
            if isinstance(value, str) and value.strip():
                return True
        return False


class Report(BaseModel):
    """A letter-style report addressed to a local representative."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    recipient: str = ""
    lga: str = ""
    date: str = ""
    introduction: str = ""
    sections: list[ReportSection] = []
    call_to_action: str = Field("", alias="callToAction")
    closing: str = ""
    sources: list[str] = []

    @property
    def has_narrative(self) -> bool:
        return any(
            value.strip()
            for value in (self.introduction, self.call_to_action, self.closing)
        )
