"""Analysis store persisted as a single JSON document on disk."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from webanalyzer.models import AnalysisRecord

logger = logging.getLogger(__name__)

_Pathish = Union[str, Path]


class JsonAnalysisStore:
    """Store every record in ``{"records": [...]}`` at ``path``.

    Reads go to disk on each call so several stores pointed at the same file
    observe each other's writes. Writes within one process are serialised by a
    lock; the file is replaced atomically.
    """

    def __init__(self, path: _Pathish) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[AnalysisRecord]:
        if not self._path.exists():
            return []

        try:
            with self._path.open("r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Analysis store is unreadable: {self._path}") from exc

        if isinstance(data, dict):
            raw_records = data.get("records", []) or []
        else:
            raw_records = data

        records: List[AnalysisRecord] = []
        for raw in raw_records:
            try:
                records.append(AnalysisRecord.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Skipping invalid record in %s: %s", self._path, exc)
        return records

    def _write(self, records: List[AnalysisRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"records": [record.model_dump(mode="json", by_alias=True) for record in records]}

        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                json.dump(payload, file, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, url: str) -> AnalysisRecord | None:
        return next((record for record in self._load() if record.url == url), None)

    def put(self, record: AnalysisRecord) -> AnalysisRecord:
        with self._lock:
            records = self._load()
            for existing in records:
                if existing.url == record.url:
                    return existing

            next_id = max((existing.id or 0 for existing in records), default=0) + 1
            stored = record.model_copy(update={"id": next_id, "timestamp": datetime.now(UTC)})
            records.append(stored)
            self._write(records)
            return stored

    def recent(self, limit: int = 10) -> List[AnalysisRecord]:
        records = sorted(self._load(), key=lambda record: record.id or 0, reverse=True)
        return records[:limit]
