"""Key/value media for the recent-window store.

The window store never probes its environment; one of these backends is
chosen at construction time (see ``create_window_backend``).
"""

import errno
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote, unquote

from modelviz.exceptions import StorageQuotaExceededError
from modelviz.log import get_logger
from modelviz.types import WindowBackendType

logger = get_logger(__name__)

QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class KeyValueBackend(ABC):
    """String key/value storage with a bounded capacity."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageQuotaExceededError: If the medium has no room for the value
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List every stored key."""


class MemoryBackend(KeyValueBackend):
    """Process-local dictionary with an optional size quota."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def _used_bytes(self, excluding: str | None = None) -> int:
        return sum(
            len(key) + len(value)
            for key, value in self._items.items()
            if key != excluding
        )

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(key) + len(value)
            if needed > self.quota_bytes:
                raise StorageQuotaExceededError(
                    f"Writing {key!r} needs {needed} bytes, quota is {self.quota_bytes}"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileBackend(KeyValueBackend):
    """One UTF-8 file per key inside ``directory``; survives restarts."""

    SUFFIX = ".json"

    def __init__(self, directory: Path, quota_bytes: int | None = None) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def _used_bytes(self, excluding: Path | None = None) -> int:
        return sum(
            path.stat().st_size
            for path in self.directory.glob(f"*{self.SUFFIX}")
            if path != excluding
        )

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        data = value.encode("utf-8")

        if self.quota_bytes is not None:
            needed = self._used_bytes(excluding=path) + len(data)
            if needed > self.quota_bytes:
                raise StorageQuotaExceededError(
                    f"Writing {key!r} needs {needed} bytes, quota is {self.quota_bytes}"
                )

        # Write-then-rename so a crash never leaves a half-written window
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            if exc.errno in QUOTA_ERRNOS:
                raise StorageQuotaExceededError(str(exc)) from exc
            raise

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return [
            unquote(path.name[: -len(self.SUFFIX)])
            for path in self.directory.glob(f"*{self.SUFFIX}")
        ]


class NullBackend(KeyValueBackend):
    """Backend for hosts without a window medium: stores nothing."""

    def get_item(self, key: str) -> str | None:
        return None

    def set_item(self, key: str, value: str) -> None:
        pass

    def remove_item(self, key: str) -> None:
        pass

    def keys(self) -> list[str]:
        return []


def create_window_backend(
    backend_type: WindowBackendType,
    directory: Path | None = None,
    quota_bytes: int | None = None,
) -> KeyValueBackend:
    """Build the window backend selected in configuration."""
    if backend_type == WindowBackendType.MEMORY:
        return MemoryBackend(quota_bytes=quota_bytes)
    if backend_type == WindowBackendType.FILE:
        if directory is None:
            raise ValueError("File window backend requires a directory")
        return FileBackend(directory, quota_bytes=quota_bytes)
    if backend_type == WindowBackendType.NULL:
        logger.warning("Recent-window store disabled: using NullBackend")
        return NullBackend()
    raise ValueError(f"Unknown window backend: {backend_type}")
