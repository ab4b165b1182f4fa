"""
JSON Progress Store for DeutschMeister.

Persists the whole progress map as one JSON object keyed by word id:

    {"w001": {"itemId": "w001", "interval": 6, ...}, ...}

Every save replaces the entire file: the map is written to a temporary
file next to the target and moved over it with os.replace, so readers see
either the old map or the new one.

Concurrent writers are not coordinated: the last save wins.

Default location: ~/.deutschmeister/progress.json
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from loguru import logger

from .errors import MalformedProgressRecord, ProgressStoreError
from .progress import ProgressMap, ProgressRecord


class ProgressStore:
    """File-backed progress map."""

    DEFAULT_PATH = Path.home() / ".deutschmeister" / "progress.json"

    def __init__(self, path: Path | None = None):
        """
        Initialize the store.

        Args:
            path: Custom progress file (defaults to ~/.deutschmeister/progress.json)
        """
        self.path = Path(path) if path is not None else self.DEFAULT_PATH

    def load(self) -> ProgressMap:
        """
        Read the progress map.

        A missing file is an empty map. Entries that cannot be parsed are
        skipped, which makes those words new again.

        Raises:
            ProgressStoreError: The file exists but is not a JSON object
        """
        if not self.path.exists():
            logger.debug(f"No progress file at {self.path}, starting fresh")
            return {}

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ProgressStoreError(f"Cannot read progress file {self.path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ProgressStoreError(f"Progress file {self.path} must contain a JSON object")

        progress: ProgressMap = {}
        for key, entry in raw.items():
            try:
                record = ProgressRecord.from_dict(entry, item_id=key)
            except MalformedProgressRecord as exc:
                logger.warning(f"Skipping progress entry {key!r}: {exc}")
                continue
            # The map key is authoritative
            if record.item_id != key:
                logger.warning(f"Progress entry {key!r} names {record.item_id!r}; using the key")
                record = replace(record, item_id=key)
            progress[key] = record

        logger.debug(f"Loaded {len(progress)} progress records from {self.path}")
        return progress

    def save(self, progress: Mapping[str, ProgressRecord]) -> None:
        """
        Replace the stored map with progress.

        Raises:
            ProgressStoreError: The file or its directory cannot be written
        """
        data = {item_id: record.to_dict() for item_id, record in progress.items()}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as exc:
            raise ProgressStoreError(f"Cannot write progress file {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ProgressStoreError(f"Cannot write progress file {self.path}: {exc}") from exc
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(data)} progress records to {self.path}")

    def reset(self) -> int:
        """
        Clear all progress.

        Returns:
            Number of records removed
        """
        try:
            count = len(self.load())
        except ProgressStoreError:
            count = 0
        self.save({})
        logger.info(f"Progress reset ({count} records cleared)")
        return count
