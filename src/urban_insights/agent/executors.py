import logging
from typing import Any

from urban_insights.models.query import QueryResult

logger = logging.getLogger(__name__)


def _normalize_sql(query: str) -> str:
    return " ".join(query.split()).rstrip(";").lower()


class ReplayQueryExecutor:
    """Serves recorded query results instead of a live database.

    A request matches a recorded result by identical SQL (ignoring whitespace
    and case) or, failing that, by ``resultKey``. The returned rows are filed
    under the requested key so the agent can rebind them.
    """

    def __init__(self, results: list[QueryResult]) -> None:
        self._by_key = {r.result_key: r for r in results}
        self._by_sql = {_normalize_sql(r.query): r for r in results if r.query}

    def execute(self, query: str, result_key: str) -> dict[str, Any]:
        recorded = self._by_sql.get(_normalize_sql(query))
        if recorded is None:
            recorded = self._by_key.get(result_key)
        if recorded is None:
            logger.info("No recorded result for %s", result_key)
            return {
                "error": (
                    "No live query backend; only previously run queries "
                    "are available"
                ),
                "availableResultKeys": sorted(self._by_key),
            }
        first = recorded.data[0] if recorded.data else None
        return {
            "success": True,
            "resultKey": result_key,
            "query": query,
            "rowCount": len(recorded.data),
            "columns": list(first) if isinstance(first, dict) else [],
            "data": recorded.data,
        }
