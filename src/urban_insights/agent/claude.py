"""Artifact agent backed by the Anthropic Messages API."""

import json
import logging
from typing import Any

import anthropic

from urban_insights.agent.base import BaseArtifactAgent, QueryExecutor
from urban_insights.agent.extraction import (
    QUERY_DATASET_TOOL,
    RENDER_REPORT_TOOL,
    RENDER_UI_TOOL,
)
from urban_insights.agent.prompts import SYSTEM_PROMPT, TOOL_DEFINITIONS
from urban_insights.config import AgentConfig
from urban_insights.models.conversation import (
    AgentRun,
    ConversationTurn,
    ToolInvocation,
)

logger = logging.getLogger(__name__)


def _append(
    messages: list[dict[str, Any]], role: str, blocks: list[dict[str, Any]]
) -> None:
    """Append ``blocks``, merging into the previous message on the same role."""
    if not blocks:
        return
    if messages and messages[-1]["role"] == role:
        messages[-1]["content"].extend(blocks)
    else:
        messages.append({"role": role, "content": list(blocks)})


def to_api_messages(turns: list[ConversationTurn]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for turn in turns:
        if turn.role == "system":
            continue
        if turn.role != "assistant":
            if turn.content.strip():
                _append(messages, "user", [{"type": "text", "text": turn.content}])
            continue

        blocks: list[dict[str, Any]] = []
        if turn.content.strip():
            blocks.append({"type": "text", "text": turn.content})
        for call in turn.tool_calls:
            blocks.append(
                {
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.name,
                    "input": call.args,
                }
            )
        _append(messages, "assistant", blocks)

        results = [
            {
                "type": "tool_result",
                "tool_use_id": call.id,
                "content": json.dumps(call.result, ensure_ascii=False, default=str),
            }
            for call in turn.tool_calls
        ]
        _append(messages, "user", results)
    return messages


class ClaudeArtifactAgent(BaseArtifactAgent):
    """Runs the render/query tool loop against Claude."""

    name = "claude"

    def __init__(
        self,
        config: AgentConfig | None = None,
        anthropic_key: str = "",
        executor: QueryExecutor | None = None,
    ) -> None:
        self.config = config or AgentConfig()
        self.executor = executor
        self._anthropic_key = anthropic_key
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        """Lazy-init the Anthropic client (only needed once a call is made)."""
        if self._client is None:
            if not self._anthropic_key:
                raise RuntimeError("ANTHROPIC_API_KEY required for agent calls")
            self._client = anthropic.AsyncAnthropic(api_key=self._anthropic_key)
        return self._client

    async def run(self, turns: list[ConversationTurn]) -> AgentRun:
        conversation = list(turns)
        for _ in range(self.config.max_steps):
            response = await self.client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                system=SYSTEM_PROMPT,
                tools=TOOL_DEFINITIONS,
                messages=to_api_messages(conversation),
            )

            text = "".join(b.text for b in response.content if b.type == "text")
            calls = [
                ToolInvocation(id=b.id, name=b.name, args=dict(b.input))
                for b in response.content
                if b.type == "tool_use"
            ]
            for call in calls:
                call.result = self._run_tool(call)
            conversation.append(
                ConversationTurn(role="assistant", content=text, tool_calls=calls)
            )

            if response.stop_reason != "tool_use" or not calls:
                break
        else:
            logger.warning("Agent stopped after %d steps", self.config.max_steps)

        return AgentRun(turns=conversation, model_used=self.config.model)

    def _run_tool(self, call: ToolInvocation) -> dict[str, Any]:
        if call.name in (RENDER_UI_TOOL, RENDER_REPORT_TOOL):
            return {"success": True}
        if call.name != QUERY_DATASET_TOOL:
            return {"error": f"Unknown tool: {call.name}"}
        if self.executor is None:
            return {"error": "No query backend is configured"}

        query = call.args.get("query")
        result_key = call.args.get("resultKey")
        if not isinstance(query, str) or not isinstance(result_key, str):
            return {"error": "query_dataset needs string 'query' and 'resultKey'"}
        try:
            return self.executor.execute(query, result_key)
        except Exception as e:
            logger.warning("Query execution failed for %s", result_key, exc_info=True)
            return {"error": f"Query failed: {e}"}
