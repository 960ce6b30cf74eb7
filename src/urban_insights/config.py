from pydantic import BaseModel

STRUCTURAL_UI_TYPES: frozenset[str] = frozenset(
    {"Card", "Grid", "div", "span", "section"}
)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


class ArtifactConfig(BaseModel):
    chart_row_limit: int = 400
    table_row_limit: int = 150
    fallback_row_limit: int = 200


class SessionConfig(BaseModel):
    storage_key: str = "urban-insights.chat-sessions.v1"
    max_stored_sessions: int = 40
    max_compact_query_rows: int = 150
    title_max_length: int = 62
    fallback_title: str = "New chat"
    db_path: str = "sessions/sessions.db"


class AgentConfig(BaseModel):
    model: str = DEFAULT_MODEL
    max_tokens: int = 4096
    max_steps: int = 8  # model calls per run, including tool round trips
