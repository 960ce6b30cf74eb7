"""Resolve ``/resultKey[/...]`` data paths against the query-result lookup."""

from typing import Any


class DataPathError(Exception):
    """Base class for data paths that cannot yield rows."""

    def __init__(self, data_path: str, message: str) -> None:
        super().__init__(message)
        self.data_path = data_path


class InvalidDataPath(DataPathError):
    def __init__(self, data_path: str) -> None:
        super().__init__(data_path, f'Invalid data path "{data_path}"')


class PathNotFound(DataPathError):
    def __init__(self, data_path: str) -> None:
        super().__init__(data_path, f'Data not found at path "{data_path}"')


class NotAnArray(DataPathError):
    def __init__(self, data_path: str) -> None:
        super().__init__(data_path, f'Data at "{data_path}" is not an array')


class NoObjectRows(DataPathError):
    def __init__(self, data_path: str) -> None:
        super().__init__(data_path, f'Data at "{data_path}" has no object rows')


def split_data_path(data_path: str) -> list[str]:
    parts = data_path.strip().removeprefix("/").split("/")
    return [part.strip() for part in parts if part.strip()]


def to_result_key(data_path: str | None) -> str | None:
    """First path segment, i.e. the ``resultKey`` a data path binds to."""
    if not data_path:
        return None
    parts = split_data_path(data_path)
    return parts[0] if parts else None


def walk_data_path(data: dict[str, Any], data_path: str) -> Any:
    """Descend ``data`` one record level per segment."""
    parts = split_data_path(data_path)
    if not parts:
        raise InvalidDataPath(data_path)
    current: Any = data
    for part in parts:
        if not isinstance(current, dict) or part not in current:
            raise PathNotFound(data_path)
        current = current[part]
    return current


def resolve_data_path(data: dict[str, Any], data_path: str) -> list[dict[str, Any]]:
    """Return the record-shaped rows at ``data_path``.

    An empty list resolves to no rows without error. Non-record entries in a
    non-empty list are skipped; if none remain, ``NoObjectRows`` is raised.
    """
    terminal = walk_data_path(data, data_path)
    if not isinstance(terminal, list):
        raise NotAnArray(data_path)
    if not terminal:
        return []
    rows = [row for row in terminal if isinstance(row, dict)]
    if not rows:
        raise NoObjectRows(data_path)
    return rows
