"""Keyed stores holding one analysis record per URL."""

from __future__ import annotations

from typing import List, Protocol

from webanalyzer.config import AnalyzerConfig
from webanalyzer.models import AnalysisRecord

from .json_store import JsonAnalysisStore
from .memory import InMemoryAnalysisStore

DEFAULT_RECENT_LIMIT = 10


class AnalysisStore(Protocol):
    """Persistence collaborator used by :class:`~webanalyzer.services.analyzer.WebsiteAnalyzer`.

    ``put`` must behave as an atomic insert-or-ignore keyed on ``url``: the first
    record written for a URL wins and later writers receive that record back.
    """

    def get(self, url: str) -> AnalysisRecord | None:
        ...

    def put(self, record: AnalysisRecord) -> AnalysisRecord:
        ...

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[AnalysisRecord]:
        ...


def create_store(config: AnalyzerConfig) -> AnalysisStore:
    """Return the store selected by ``config.store_path``."""

    if config.store_path is None:
        return InMemoryAnalysisStore()
    return JsonAnalysisStore(config.store_path)


__all__ = [
    "AnalysisStore",
    "DEFAULT_RECENT_LIMIT",
    "InMemoryAnalysisStore",
    "JsonAnalysisStore",
    "create_store",
]
