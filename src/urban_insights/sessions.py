"""Persist chat sessions under a single storage key.

Saving compacts query rows before writing, and degrades further when the
backend refuses the write:

1. ``sampled``: tool-call and artifact query rows cut to the first
   ``max_compact_query_rows`` rows.
2. ``query_only``: all such rows dropped; the SQL text stays so the queries
   can be re-run after loading, and artifact data snapshots still allow a
   partial redisplay.

Every compacted result is flagged ``partial``. If the last tier is refused
too, the failure is logged and storage is left as it was.
"""

import json
import logging
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from urban_insights.artifacts.snapshots import build_artifact_data_snapshot
from urban_insights.config import SessionConfig
from urban_insights.models.query import QueryResult
from urban_insights.models.session import (
    Artifact,
    ArtifactState,
    ChatSession,
    Message,
    MessageRole,
)
from urban_insights.storage import KeyValueStorage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

QUERY_TOOL_NAME = "query_dataset"


class CompactMode(StrEnum):
    SAMPLED = "sampled"
    QUERY_ONLY = "query_only"


COMPACTION_TIERS: tuple[CompactMode, ...] = (
    CompactMode.SAMPLED,
    CompactMode.QUERY_ONLY,
)


def _utc_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _truncate(value: str, max_length: int) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 1] + "…"


def derive_session_title(
    messages: list[Message], config: SessionConfig | None = None
) -> str:
    """First non-blank user message, else first assistant message, else fallback."""
    config = config or SessionConfig()
    for role in (MessageRole.USER, MessageRole.ASSISTANT):
        for message in messages:
            if message.role == role and message.content.strip():
                return _truncate(message.content.strip(), config.title_max_length)
    return config.fallback_title


def ensure_artifact_snapshot(artifact: Artifact) -> Artifact:
    if artifact.data_snapshot:
        return artifact
    snapshot = build_artifact_data_snapshot(
        ui=artifact.ui, report=artifact.report, query_results=artifact.query_results
    )
    if not snapshot:
        return artifact
    return artifact.model_copy(update={"data_snapshot": snapshot})


def create_chat_session(
    id: str,
    messages: list[Message],
    artifact_state: ArtifactState | None = None,
    suggestions: list[str] | None = None,
    created_at: str | None = None,
    updated_at: str | None = None,
    config: SessionConfig | None = None,
) -> ChatSession:
    resolved_updated_at = updated_at or _utc_iso()
    state = artifact_state or ArtifactState()
    return ChatSession(
        id=id,
        title=derive_session_title(messages, config),
        created_at=created_at or resolved_updated_at,
        updated_at=resolved_updated_at,
        messages=messages,
        # re-validate so the index is clamped against the item list
        artifact_state=ArtifactState(items=state.items, index=state.index),
        suggestions=suggestions,
    )


def _sort_key(session: ChatSession) -> datetime:
    try:
        parsed = datetime.fromisoformat(session.updated_at)
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def sort_sessions(sessions: list[ChatSession]) -> list[ChatSession]:
    """Newest ``updated_at`` first; unparseable timestamps sort last."""
    return sorted(sessions, key=_sort_key, reverse=True)


# --- Compaction ---


class _Compactor:
    def __init__(self, mode: CompactMode, config: SessionConfig) -> None:
        self.mode = mode
        self.config = config

    def rows(self, rows: list[Any]) -> list[Any]:
        if self.mode == CompactMode.QUERY_ONLY:
            return []
        return rows[: self.config.max_compact_query_rows]

    def message(self, message: Message) -> Message:
        call = message.tool_call
        if message.role != MessageRole.TOOL or call is None:
            return message
        if call.name != QUERY_TOOL_NAME or not isinstance(call.result, dict):
            return message
        if not isinstance(call.result.get("data"), list):
            return message

        result = {
            **call.result,
            "data": self.rows(call.result["data"]),
            "partial": True,
        }
        return message.model_copy(
            update={"tool_call": call.model_copy(update={"result": result})}
        )

    def artifact(self, artifact: Artifact, query_map: dict[str, str]) -> Artifact:
        artifact = ensure_artifact_snapshot(artifact)
        results = [
            QueryResult(
                result_key=r.result_key,
                data=self.rows(r.data),
                query=r.query or query_map.get(r.result_key),
                partial=True,
            )
            for r in artifact.query_results
        ]
        return artifact.model_copy(update={"query_results": results})

    def session(self, session: ChatSession) -> ChatSession:
        messages = [self.message(m) for m in session.messages]
        query_map = extract_query_map(messages)
        state = session.artifact_state
        items = [self.artifact(a, query_map) for a in state.items]
        return session.model_copy(
            update={
                "messages": messages,
                "artifact_state": state.model_copy(update={"items": items}),
            }
        )


def extract_query_map(messages: list[Message]) -> dict[str, str]:
    """Map ``resultKey`` to SQL text from the session's query tool calls."""
    query_map: dict[str, str] = {}
    for message in messages:
        call = message.tool_call
        if message.role != MessageRole.TOOL or call is None:
            continue
        if call.name != QUERY_TOOL_NAME:
            continue
        query = call.args.get("query")
        result_key = call.args.get("resultKey")
        if isinstance(query, str) and isinstance(result_key, str):
            query_map[result_key] = query
    return query_map


def compact_session(
    session: ChatSession, mode: CompactMode, config: SessionConfig | None = None
) -> ChatSession:
    return _Compactor(mode, config or SessionConfig()).session(session)


def serialize_sessions(sessions: list[ChatSession]) -> str:
    return json.dumps(
        [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in sessions],
        ensure_ascii=False,
    )


def save_chat_sessions(
    sessions: list[ChatSession],
    storage: KeyValueStorage | None,
    config: SessionConfig | None = None,
) -> bool:
    """Write the most recent sessions, compacting further on each refusal.

    Returns whether any tier was written.
    """
    if storage is None:
        return False
    config = config or SessionConfig()
    limited = sort_sessions(sessions)[: config.max_stored_sessions]

    errors: list[Exception] = []
    for mode in COMPACTION_TIERS:
        compacted = [compact_session(s, mode, config) for s in limited]
        payload = serialize_sessions(compacted)
        try:
            storage.set_item(config.storage_key, payload)
        except Exception as e:
            logger.warning("Session write refused in %s mode: %s", mode, e)
            errors.append(e)
            continue
        logger.debug("Saved %d session(s) in %s mode", len(limited), mode)
        return True

    logger.error(
        "Failed to persist chat sessions: %s",
        "; ".join(str(e) for e in errors),
    )
    return False


# --- Loading ---


def _valid_entries(
    model: type[M], values: Any, session_id: str, label: str
) -> list[M]:
    if not isinstance(values, list):
        return []
    valid: list[M] = []
    for value in values:
        try:
            valid.append(model.model_validate(value))
        except ValidationError as e:
            logger.debug("Dropped malformed %s in session %s: %s", label, session_id, e)
    return valid


def normalize_session(
    value: Any, config: SessionConfig | None = None
) -> ChatSession | None:
    """Validate one stored entry; ``None`` when it cannot be used."""
    if not isinstance(value, dict):
        return None
    for field in ("id", "createdAt", "updatedAt"):
        if not isinstance(value.get(field), str) or not value[field]:
            return None

    session_id = value["id"]
    raw = dict(value)
    raw["messages"] = _valid_entries(
        Message, raw.get("messages"), session_id, "message"
    )
    if not isinstance(raw.get("title"), str):
        raw["title"] = ""
    state = raw.get("artifactState")
    if not isinstance(state, dict):
        state = {}
    raw["artifactState"] = {
        "items": _valid_entries(Artifact, state.get("items"), session_id, "artifact"),
        "index": state["index"] if isinstance(state.get("index"), int) else -1,
    }
    suggestions = raw.get("suggestions")
    raw["suggestions"] = (
        [s for s in suggestions if isinstance(s, str)]
        if isinstance(suggestions, list)
        else None
    )

    try:
        session = ChatSession.model_validate(raw)
    except ValidationError as e:
        logger.debug("Dropped malformed session %s: %s", value.get("id"), e)
        return None

    state = session.artifact_state
    items = [ensure_artifact_snapshot(a) for a in state.items]
    title = session.title.strip() or derive_session_title(session.messages, config)
    return session.model_copy(
        update={
            "title": title,
            "artifact_state": ArtifactState(items=items, index=state.index),
        }
    )


def load_chat_sessions(
    storage: KeyValueStorage | None, config: SessionConfig | None = None
) -> list[ChatSession]:
    if storage is None:
        return []
    config = config or SessionConfig()
    raw = storage.get_item(config.storage_key)
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored chat sessions are not valid JSON; ignoring them")
        return []
    if not isinstance(parsed, list):
        return []

    loaded = [normalize_session(entry, config) for entry in parsed]
    return sort_sessions([s for s in loaded if s is not None])

