"""Pull the artifact out of a finished agent conversation."""

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from urban_insights.models.conversation import ConversationTurn, ExtractedArtifact
from urban_insights.models.query import QueryResult
from urban_insights.models.report import Report
from urban_insights.models.ui import UINode

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

RENDER_UI_TOOL = "render_ui"
RENDER_REPORT_TOOL = "render_report"
QUERY_DATASET_TOOL = "query_dataset"


def _latest_valid(
    turns: list[ConversationTurn], tool_name: str, arg: str, model: type[M]
) -> M | None:
    """Most recent ``arg`` of ``tool_name`` that validates as ``model``."""
    for turn in reversed(turns):
        for call in reversed(turn.tool_calls):
            value = call.args.get(arg) if call.name == tool_name else None
            if not value:
                continue
            try:
                return model.model_validate(value)
            except ValidationError as e:
                logger.debug(
                    "Skipping malformed %s argument of %s: %s", arg, call.id, e
                )
    return None


def extract_query_results(turns: list[ConversationTurn]) -> list[QueryResult]:
    """Successful ``query_dataset`` results in the order they were emitted."""
    results: list[QueryResult] = []
    for turn in turns:
        for call in turn.tool_calls:
            if call.name != QUERY_DATASET_TOOL or not isinstance(call.result, dict):
                continue
            result = call.result
            if not result.get("success"):
                continue
            result_key = result.get("resultKey")
            data = result.get("data")
            if not isinstance(result_key, str) or not isinstance(data, list):
                continue
            query = result.get("query") or call.args.get("query")
            results.append(
                QueryResult(
                    result_key=result_key,
                    data=data,
                    query=query if isinstance(query, str) else None,
                )
            )
    return results


def extract_artifact(turns: list[ConversationTurn]) -> ExtractedArtifact:
    return ExtractedArtifact(
        ui=_latest_valid(turns, RENDER_UI_TOOL, "ui", UINode),
        report=_latest_valid(turns, RENDER_REPORT_TOOL, "report", Report),
        query_results=extract_query_results(turns),
    )
