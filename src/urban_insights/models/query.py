from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Row = dict[str, Any]


class QueryResult(BaseModel):
    """Rows returned by one ``query_dataset`` call.

    ``data`` may hold scalars or nested lists as the agent sent them; the path
    resolver reports those instead of validation rejecting the result.
    """

    model_config = ConfigDict(populate_by_name=True)

    result_key: str = Field(alias="resultKey")
    data: list[Any] = []
    query: str | None = None
    partial: bool = False
