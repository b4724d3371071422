"""Tests for the window storage backends."""

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from modelviz.exceptions import StorageQuotaExceededError
from modelviz.storage.backends import (
    FileBackend,
    MemoryBackend,
    NullBackend,
    create_window_backend,
)
from modelviz.types import WindowBackendType


class TestMemoryBackend:
    def test_set_get_remove(self) -> None:
        backend = MemoryBackend()

        backend.set_item("a", "1")
        assert backend.get_item("a") == "1"
        assert backend.keys() == ["a"]

        backend.remove_item("a")
        assert backend.get_item("a") is None
        backend.remove_item("a")

    def test_quota_rejects_oversized_write(self) -> None:
        backend = MemoryBackend(quota_bytes=10)

        with pytest.raises(StorageQuotaExceededError):
            backend.set_item("key", "x" * 20)
        assert backend.get_item("key") is None

    def test_quota_ignores_value_being_replaced(self) -> None:
        backend = MemoryBackend(quota_bytes=10)

        backend.set_item("k", "x" * 8)
        backend.set_item("k", "y" * 9)

        assert backend.get_item("k") == "y" * 9


class TestFileBackend:
    def test_round_trip(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path / "window")

        backend.set_item("modelviz_metrics_recent", '[{"id": "1"}]')

        assert backend.get_item("modelviz_metrics_recent") == '[{"id": "1"}]'
        assert backend.get_item("missing") is None

    def test_values_survive_new_instance(self, tmp_path: Path) -> None:
        FileBackend(tmp_path).set_item("recent", "payload")

        assert FileBackend(tmp_path).get_item("recent") == "payload"

    def test_keys_with_separators(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)

        backend.set_item("cache:some/path", "1")
        backend.set_item("ai-showcase:demo", "2")

        assert sorted(backend.keys()) == ["ai-showcase:demo", "cache:some/path"]
        assert backend.get_item("cache:some/path") == "1"

    def test_remove_missing_key_is_noop(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        backend.remove_item("nothing-here")
        assert backend.keys() == []

    def test_quota(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path, quota_bytes=16)
        backend.set_item("a", "x" * 10)

        with pytest.raises(StorageQuotaExceededError):
            backend.set_item("b", "y" * 10)

        assert backend.get_item("b") is None

    def test_disk_full_maps_to_quota_error(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)

        with patch.object(
            Path, "write_bytes", side_effect=OSError(errno.ENOSPC, "No space left")
        ):
            with pytest.raises(StorageQuotaExceededError):
                backend.set_item("recent", "payload")

        assert backend.keys() == []

    def test_other_os_errors_propagate(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)

        with patch.object(
            Path, "write_bytes", side_effect=OSError(errno.EACCES, "Permission denied")
        ):
            with pytest.raises(OSError) as exc_info:
                backend.set_item("recent", "payload")

        assert not isinstance(exc_info.value, StorageQuotaExceededError)


def test_null_backend_stores_nothing() -> None:
    backend = NullBackend()

    backend.set_item("a", "1")

    assert backend.get_item("a") is None
    assert backend.keys() == []


def test_create_window_backend(tmp_path: Path) -> None:
    assert isinstance(create_window_backend(WindowBackendType.MEMORY), MemoryBackend)
    assert isinstance(create_window_backend(WindowBackendType.NULL), NullBackend)

    file_backend = create_window_backend(WindowBackendType.FILE, tmp_path / "w")
    assert isinstance(file_backend, FileBackend)
    assert (tmp_path / "w").is_dir()


def test_file_backend_requires_directory() -> None:
    with pytest.raises(ValueError):
        create_window_backend(WindowBackendType.FILE)
