"""Service layer entry points for the web analyzer."""

from __future__ import annotations

from .analyzer import WebsiteAnalyzer  # noqa: F401
from .extractor import extract_content  # noqa: F401
from .fetcher import PageFetcher  # noqa: F401

__all__ = ["PageFetcher", "WebsiteAnalyzer", "extract_content"]
