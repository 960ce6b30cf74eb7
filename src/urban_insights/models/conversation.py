"""Conversation exchanged with the artifact-generating agent."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from urban_insights.models.query import QueryResult
from urban_insights.models.renderability import RenderabilityIssue, SanitizedArtifact
from urban_insights.models.report import Report
from urban_insights.models.session import ArtifactDataSnapshot
from urban_insights.models.ui import UINode


class ToolInvocation(BaseModel):
    id: str
    name: str
    args: dict[str, Any] = {}
    result: Any = None


class ConversationTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: str
    content: str = ""
    tool_calls: list[ToolInvocation] = Field(default_factory=list, alias="toolCalls")


class AgentRun(BaseModel):
    """Final conversation returned by the agent collaborator."""

    turns: list[ConversationTurn] = []
    model_used: str = ""


class ExtractedArtifact(BaseModel):
    ui: UINode | None = None
    report: Report | None = None
    query_results: list[QueryResult] = []

    @property
    def is_empty(self) -> bool:
        return self.ui is None and self.report is None


class RepairOutcome(BaseModel):
    artifact: SanitizedArtifact
    query_results: list[QueryResult] = []
    data_snapshot: ArtifactDataSnapshot = {}
    issues_before: list[RenderabilityIssue] = []
    issues_after: list[RenderabilityIssue] = []
    repair_attempted: bool = False
    repair_accepted: bool = False
    turns: list[ConversationTurn] = []
