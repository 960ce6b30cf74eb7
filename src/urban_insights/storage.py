"""Key/value storage capability used to persist chat sessions."""

from typing import Protocol


class StorageError(Exception):
    """A storage backend rejected a read or write."""


class StorageQuotaExceeded(StorageError):
    def __init__(self, key: str, size: int, quota: int) -> None:
        super().__init__(
            f"Writing {size} bytes under {key!r} exceeds the {quota}-byte quota"
        )
        self.key = key
        self.size = size
        self.quota = quota


class KeyValueStorage(Protocol):
    """Minimal browser-storage style capability."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process storage with an optional per-value byte quota."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._values: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._values.get(key)

    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise StorageQuotaExceeded(key, size, self.quota_bytes)
        self._values[key] = value
