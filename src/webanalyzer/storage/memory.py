"""Process-local analysis store."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Dict, List

from webanalyzer.models import AnalysisRecord


class InMemoryAnalysisStore:
    """Dictionary-backed store; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._records: Dict[str, AnalysisRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, url: str) -> AnalysisRecord | None:
        return self._records.get(url)

    def put(self, record: AnalysisRecord) -> AnalysisRecord:
        with self._lock:
            existing = self._records.get(record.url)
            if existing is not None:
                return existing

            stored = record.model_copy(update={"id": self._next_id, "timestamp": datetime.now(UTC)})
            self._records[record.url] = stored
            self._next_id += 1
            return stored

    def recent(self, limit: int = 10) -> List[AnalysisRecord]:
        records = sorted(self._records.values(), key=lambda record: record.id or 0, reverse=True)
        return records[:limit]
