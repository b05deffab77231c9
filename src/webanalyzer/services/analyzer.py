"""Analysis pipeline with a URL-keyed cache in front of it."""

from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from webanalyzer.config import AnalyzerConfig
from webanalyzer.errors import AnalysisError, ErrorKind
from webanalyzer.models import AnalysisRecord, AnalysisRequest, AnalysisResponse, WebsiteAnalysis
from webanalyzer.services.extractor import extract_content
from webanalyzer.services.fetcher import PageFetcher
from webanalyzer.services.text import (
    build_summary,
    count_words,
    estimate_reading_time,
    extract_key_points,
)
from webanalyzer.storage import DEFAULT_RECENT_LIMIT, AnalysisStore

__all__ = ["WebsiteAnalyzer"]

logger = logging.getLogger(__name__)


class WebsiteAnalyzer:
    """Validate, fetch, extract and persist analyses of single web pages.

    A URL is analysed at most once per store: later requests for the exact same
    URL string return the stored record without touching the network. Concurrent
    first requests for one URL are not deduplicated; the store's insert-or-ignore
    ``put`` decides which result is kept.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        store: AnalysisStore,
        fetcher: PageFetcher | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._fetcher = fetcher or PageFetcher(config)

    @property
    def store(self) -> AnalysisStore:
        return self._store

    def close(self) -> None:
        self._fetcher.close()

    def analyze_html(self, html: str | bytes) -> WebsiteAnalysis:
        """Run extraction and scoring on an already fetched document."""

        content = extract_content(html)
        word_count = count_words(content.body_text)

        return WebsiteAnalysis(
            title=content.title,
            summary=build_summary(content.body_text, self._config.summary_length),
            key_points=extract_key_points(
                content.body_text, content.list_items, self._config.max_key_points
            ),
            word_count=word_count,
            reading_time=estimate_reading_time(word_count, self._config.words_per_minute),
        )

    def analyze(self, url: str) -> AnalysisResponse:
        """Return the analysis of ``url``, computing and storing it on first request."""

        try:
            AnalysisRequest(url=url)
        except ValidationError as exc:
            raise AnalysisError(ErrorKind.INVALID_URL, url=url) from exc

        try:
            existing = self._store.get(url)
        except Exception as exc:  # noqa: BLE001 - storage backends raise their own errors
            logger.exception("Failed to read stored analysis for %s", url)
            raise AnalysisError(ErrorKind.UNKNOWN, url=url) from exc

        if existing is not None:
            logger.info("Cache hit for %s", url)
            return AnalysisResponse(**existing.model_dump(), cached=True)

        logger.info("Analysing %s", url)
        document = self._fetcher.fetch(url)

        try:
            analysis = self.analyze_html(document.text)
        except Exception as exc:  # noqa: BLE001 - any parser failure is reported as unknown
            logger.exception("Failed to extract content from %s", url)
            raise AnalysisError(ErrorKind.UNKNOWN, url=url) from exc

        record = AnalysisRecord(
            url=url,
            title=analysis.title,
            summary=analysis.summary,
            key_points=analysis.key_points,
        )
        if self._config.persist_metrics:
            record = record.model_copy(
                update={"word_count": analysis.word_count, "reading_time": analysis.reading_time}
            )

        try:
            stored = self._store.put(record)
        except Exception as exc:  # noqa: BLE001 - storage backends raise their own errors
            logger.exception("Failed to store analysis for %s", url)
            raise AnalysisError(ErrorKind.UNKNOWN, url=url) from exc

        logger.info(
            "Stored analysis %s for %s (%d words, %d min)",
            stored.id,
            url,
            analysis.word_count,
            analysis.reading_time,
        )

        return AnalysisResponse(
            **stored.model_dump(exclude={"word_count", "reading_time"}),
            word_count=analysis.word_count,
            reading_time=analysis.reading_time,
        )

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[AnalysisRecord]:
        """Return the most recently stored analyses, newest first."""

        return self._store.recent(limit)
