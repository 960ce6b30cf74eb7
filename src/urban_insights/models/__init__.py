from urban_insights.models.conversation import (
    AgentRun,
    ConversationTurn,
    ExtractedArtifact,
    RepairOutcome,
    ToolInvocation,
)
from urban_insights.models.query import QueryResult, Row
from urban_insights.models.renderability import (
    DataRequirement,
    IssueTarget,
    KeyCoverage,
    RenderabilityIssue,
    ResolvedRows,
    SanitizedArtifact,
)
from urban_insights.models.report import ChartType, Report, ReportSection, SectionType
from urban_insights.models.session import (
    Artifact,
    ArtifactDataSnapshot,
    ArtifactState,
    ArtifactType,
    ChatSession,
    Message,
    MessageRole,
    ToolCall,
    ToolCallStatus,
)
from urban_insights.models.ui import UINode, UINodeType

__all__ = [
    "AgentRun",
    "Artifact",
    "ArtifactDataSnapshot",
    "ArtifactState",
    "ArtifactType",
    "ChartType",
    "ChatSession",
    "ConversationTurn",
    "DataRequirement",
    "ExtractedArtifact",
    "IssueTarget",
    "KeyCoverage",
    "Message",
    "MessageRole",
    "QueryResult",
    "RenderabilityIssue",
    "RepairOutcome",
    "Report",
    "ReportSection",
    "ResolvedRows",
    "Row",
    "SanitizedArtifact",
    "SectionType",
    "ToolCall",
    "ToolCallStatus",
    "ToolInvocation",
    "UINode",
    "UINodeType",
]
