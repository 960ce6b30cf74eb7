"""Agent collaborator and the single-shot artifact repair pass."""

from urban_insights.agent.base import BaseArtifactAgent, QueryExecutor
from urban_insights.agent.claude import ClaudeArtifactAgent
from urban_insights.agent.executors import ReplayQueryExecutor
from urban_insights.agent.extraction import extract_artifact, extract_query_results
from urban_insights.agent.orchestrator import (
    ArtifactRepairOrchestrator,
    should_accept_repair,
)
from urban_insights.agent.prompts import build_repair_prompt

__all__ = [
    "ArtifactRepairOrchestrator",
    "BaseArtifactAgent",
    "ClaudeArtifactAgent",
    "QueryExecutor",
    "ReplayQueryExecutor",
    "build_repair_prompt",
    "extract_artifact",
    "extract_query_results",
    "should_accept_repair",
]
