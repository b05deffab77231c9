"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from webanalyzer.validator import is_valid_url

__all__ = [
    "AnalysisRecord",
    "AnalysisRequest",
    "AnalysisResponse",
    "ExtractedContent",
    "RawDocument",
    "WebsiteAnalysis",
]


class _CamelModel(BaseModel):
    """Base model serialising with camelCase aliases for JSON consumers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisRequest(_CamelModel):
    """A request to analyse a single page."""

    url: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError("url must be an absolute http or https URL")
        return value


class RawDocument(BaseModel):
    """Fetched page content. Never persisted."""

    url: str
    final_url: str
    status_code: int
    content_type: str = ""
    text: str = ""


class ExtractedContent(BaseModel):
    """Title and normalized text pulled out of a page."""

    title: str
    body_text: str = ""
    list_items: List[str] = Field(default_factory=list)


class WebsiteAnalysis(_CamelModel):
    """Output of the analysis pipeline for one document."""

    title: str
    summary: str
    key_points: List[str]
    word_count: int
    reading_time: int


class AnalysisRecord(_CamelModel):
    """Persisted analysis of a URL.

    ``id`` and ``timestamp`` are assigned by the store when the record is first
    written. ``word_count`` and ``reading_time`` are only present when metrics
    persistence is enabled.
    """

    id: Optional[int] = None
    url: str
    title: str
    summary: str
    key_points: List[str] = Field(min_length=1, max_length=5)
    timestamp: Optional[datetime] = None
    word_count: Optional[int] = None
    reading_time: Optional[int] = None


class AnalysisResponse(AnalysisRecord):
    """Record returned to callers, with metrics attached on a fresh analysis."""

    cached: bool = Field(default=False, exclude=True)
