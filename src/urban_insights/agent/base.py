"""Collaborator interfaces for the artifact-generating agent."""

from abc import ABC, abstractmethod
from typing import Any, Protocol

from urban_insights.models.conversation import AgentRun, ConversationTurn


class BaseArtifactAgent(ABC):
    """An agent that answers a conversation with tool calls and text."""

    name: str = ""

    @abstractmethod
    async def run(self, turns: list[ConversationTurn]) -> AgentRun:
        """Continue ``turns`` and return the full resulting conversation."""
        ...


class QueryExecutor(Protocol):
    """Runs agent-written SQL; the result is passed back to the agent as-is.

    Successful results look like ``{"success": True, "resultKey", "query",
    "data"}``; failures like ``{"error": "..."}``.
    """

    def execute(self, query: str, result_key: str) -> dict[str, Any]: ...
