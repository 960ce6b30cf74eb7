"""UI description tree emitted by the agent through ``render_ui``."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class UINodeType(StrEnum):
    CARD = "Card"
    GRID = "Grid"
    CONTAINER = "Container"
    TEXT = "Text"
    METRIC = "Metric"
    TABLE = "Table"
    LIST = "List"
    BAR_CHART = "BarChart"
    LINE_CHART = "LineChart"
    PIE_CHART = "PieChart"


class UINode(BaseModel):
    """One node of the UI tree.

    ``type`` stays an open string so that component kinds unknown to this
    package survive a round trip; ``UINodeType`` lists the kinds it understands.
    """

    type: str
    props: dict[str, Any] = Field(default_factory=dict)
    children: list["UINode"] | None = None

    def prop_str(self, key: str) -> str | None:
        value = self.props.get(key)
        return value if isinstance(value, str) else None

    def prop_str_list(self, key: str) -> list[str]:
        value = self.props.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str) and item.strip()]

    def with_children(self, children: list["UINode"]) -> "UINode":
        return self.model_copy(update={"children": children or None})
