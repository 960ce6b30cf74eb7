"""Chat sessions as persisted in browser-style key/value storage."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from urban_insights.models.query import QueryResult, Row
from urban_insights.models.report import Report
from urban_insights.models.ui import UINode

ArtifactDataSnapshot = dict[str, list[Row]]


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCallStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"


class ArtifactType(StrEnum):
    VISUALIZATION = "visualization"
    REPORT = "report"


class ToolCall(BaseModel):
    id: str
    name: str
    args: dict[str, Any] = {}
    result: Any = None
    status: ToolCallStatus = ToolCallStatus.COMPLETE


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: MessageRole
    content: str = ""
    ui: UINode | None = None
    tool_call: ToolCall | None = Field(None, alias="toolCall")


class Artifact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: ArtifactType = ArtifactType.VISUALIZATION
    ui: UINode | None = None
    report: Report | None = None
    query_results: list[QueryResult] = Field(default_factory=list, alias="queryResults")
    data_snapshot: ArtifactDataSnapshot | None = Field(None, alias="dataSnapshot")


class ArtifactState(BaseModel):
    items: list[Artifact] = []
    index: int = -1

    @model_validator(mode="after")
    def _clamp_index(self) -> "ArtifactState":
        self.index = min(len(self.items) - 1, max(-1, self.index))
        return self


class ChatSession(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    messages: list[Message] = []
    artifact_state: ArtifactState = Field(
        default_factory=ArtifactState, alias="artifactState"
    )
    suggestions: list[str] | None = None
