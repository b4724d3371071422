"""Bounded store holding the most recent call records."""

import json
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from modelviz.constants import (
    DISPOSABLE_KEY_PREFIXES,
    REDUCED_RECORD_FIELDS,
    WINDOW_BACKUP_KEY,
    WINDOW_FALLBACK_ENTRIES,
    WINDOW_KEY,
    WINDOW_MAX_ENTRIES,
    WINDOW_SIZE_THRESHOLD,
)
from modelviz.exceptions import StorageQuotaExceededError
from modelviz.log import get_logger
from modelviz.models.domain.call_record import CallRecord
from modelviz.storage.backends import KeyValueBackend

logger = get_logger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[CallRecord])


class WindowStore:
    """Fast-access tail of the last ``max_entries`` call records.

    The whole window is serialized under one key, with a full copy under a
    backup key. Under size or quota pressure fidelity is traded for
    availability: oversized windows keep only a reduced projection of each
    record, and a quota error shrinks the window to ``fallback_entries``.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        max_entries: int = WINDOW_MAX_ENTRIES,
        size_threshold: int = WINDOW_SIZE_THRESHOLD,
        fallback_entries: int = WINDOW_FALLBACK_ENTRIES,
        disposable_prefixes: Sequence[str] = DISPOSABLE_KEY_PREFIXES,
        key: str = WINDOW_KEY,
        backup_key: str = WINDOW_BACKUP_KEY,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if fallback_entries <= 0:
            raise ValueError("fallback_entries must be positive")

        self.backend = backend
        self.max_entries = max_entries
        self.size_threshold = size_threshold
        self.fallback_entries = fallback_entries
        self.disposable_prefixes = tuple(disposable_prefixes)
        self.key = key
        self.backup_key = backup_key

    async def save(self, records: Sequence[CallRecord]) -> None:
        """Replace the stored window with the tail of ``records``.

        Raises:
            StorageQuotaExceededError: If the medium is still full after
                purging disposable keys and shrinking the window
        """
        recent = list(records)[-self.max_entries :]
        try:
            self._write(recent)
        except StorageQuotaExceededError as exc:
            logger.warning(f"Window save hit the storage quota: {exc}")
            purged = self._purge_disposable_keys()
            minimal = list(records)[-self.fallback_entries :]
            logger.warning(
                f"Purged {purged} disposable keys, retrying with "
                f"{len(minimal)} records"
            )
            self.backend.set_item(self.key, _serialize(minimal))

    def _write(self, recent: list[CallRecord]) -> None:
        data = _serialize(recent)

        if len(data) > self.size_threshold:
            reduced = json.dumps(
                [
                    record.model_dump(mode="json", include=set(REDUCED_RECORD_FIELDS))
                    for record in recent
                ]
            )
            logger.info(
                f"Window payload of {len(data)} chars exceeds {self.size_threshold}, "
                f"storing reduced projection ({len(reduced)} chars)"
            )
            self.backend.set_item(self.key, reduced)
        else:
            self.backend.set_item(self.key, data)

        self.backend.set_item(self.backup_key, data)

    def _purge_disposable_keys(self) -> int:
        doomed = [
            key
            for key in self.backend.keys()
            if key.startswith(self.disposable_prefixes)
        ]
        for key in doomed:
            self.backend.remove_item(key)
        return len(doomed)

    async def load(self) -> list[CallRecord]:
        """Return the stored window, oldest first.

        Falls back to the backup copy when the primary key is absent. Never
        raises: unreadable or malformed data yields an empty list.
        """
        try:
            data = self.backend.get_item(self.key)
            if data is None:
                data = self.backend.get_item(self.backup_key)
            if data is None:
                return []
            return _RECORDS_ADAPTER.validate_json(data)
        except ValidationError as exc:
            logger.warning(
                f"Discarding malformed window data ({exc.error_count()} errors)"
            )
            return []
        except Exception as exc:
            logger.error(f"Window load failed: {exc}")
            return []

    async def clear(self) -> None:
        """Remove both the primary and the backup window."""
        self.backend.remove_item(self.key)
        self.backend.remove_item(self.backup_key)


def _serialize(records: list[CallRecord]) -> str:
    return _RECORDS_ADAPTER.dump_json(records).decode("utf-8")
