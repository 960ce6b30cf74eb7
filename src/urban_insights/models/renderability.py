"""Value objects produced while checking whether an artifact can render."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from urban_insights.models.report import Report
from urban_insights.models.ui import UINode


class KeyCoverage(StrEnum):
    ALL = "all"
    ANY = "any"


class IssueTarget(StrEnum):
    UI = "ui"
    REPORT = "report"


class DataRequirement(BaseModel):
    """What a bound node or section needs from the rows at ``data_path``."""

    data_path: str
    required_keys: list[str] = []
    require_all_keys: bool = True
    require_key_coverage: KeyCoverage = KeyCoverage.ANY


class ResolvedRows(BaseModel):
    rows: list[dict[str, Any]] = []
    error: str | None = None


class RenderabilityIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target: IssueTarget
    component_type: str = Field(alias="componentType")
    message: str
    data_path: str | None = Field(None, alias="dataPath")
    required_keys: list[str] = Field(default_factory=list, alias="requiredKeys")
    available_keys: list[str] = Field(default_factory=list, alias="availableKeys")


class SanitizedArtifact(BaseModel):
    ui: UINode | None = None
    report: Report | None = None
    data: dict[str, list[Any]] = {}
    has_renderable_content: bool = False
