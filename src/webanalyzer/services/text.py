"""Text helpers: normalization, reading metrics, key points and summaries."""

from __future__ import annotations

import math
import re
from typing import Iterable, List

__all__ = [
    "DEFAULT_WORDS_PER_MINUTE",
    "NO_CONTENT_SUMMARY",
    "NO_KEY_POINTS",
    "build_summary",
    "count_words",
    "estimate_reading_time",
    "extract_key_points",
    "normalize_whitespace",
    "split_sentences",
]

DEFAULT_WORDS_PER_MINUTE = 200
DEFAULT_SUMMARY_LENGTH = 300
DEFAULT_MAX_KEY_POINTS = 5
ELLIPSIS = "..."

NO_CONTENT_SUMMARY = "Unable to extract meaningful content from this page."
NO_KEY_POINTS = "No key points could be extracted from this page."

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_END_RE = re.compile(r"[.!?]+")

# Length bounds are exclusive on both ends.
MIN_FRAGMENT_LENGTH = 10
SENTENCE_LENGTH_RANGE = (20, 200)
LIST_ITEM_LENGTH_RANGE = (10, 150)
MAX_SENTENCE_POINTS = 3


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run into one space and trim the result."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def count_words(text: str) -> int:
    return len(text.split())


def estimate_reading_time(word_count: int, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE) -> int:
    """Return the reading time in whole minutes, rounded up."""

    if word_count <= 0:
        return 0
    return math.ceil(word_count / words_per_minute)


def split_sentences(text: str) -> List[str]:
    """Split ``text`` on runs of sentence terminators, dropping short fragments."""

    fragments = (fragment.strip() for fragment in _SENTENCE_END_RE.split(text))
    return [fragment for fragment in fragments if len(fragment) > MIN_FRAGMENT_LENGTH]


def _within(value: str, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low < len(value) < high


def extract_key_points(
    text: str,
    list_items: Iterable[str] = (),
    max_points: int = DEFAULT_MAX_KEY_POINTS,
) -> List[str]:
    """Pick highlight strings from the opening sentences and the page's list items.

    Only the first three sentences are considered; those of a reasonable length
    are kept. List items then fill the remaining slots in document order. An
    item's length is measured after trimming only, and the accepted item is
    returned with its inner whitespace collapsed. The result is never empty.
    """

    points = [
        sentence
        for sentence in split_sentences(text)[:MAX_SENTENCE_POINTS]
        if _within(sentence, SENTENCE_LENGTH_RANGE)
    ][:max_points]

    for item in list_items:
        if len(points) >= max_points:
            break
        item = item.strip()
        if _within(item, LIST_ITEM_LENGTH_RANGE):
            points.append(normalize_whitespace(item))

    return points or [NO_KEY_POINTS]


def build_summary(text: str, max_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Return a preview of ``text`` truncated to ``max_length`` characters."""

    if not text:
        return NO_CONTENT_SUMMARY
    if len(text) > max_length:
        return text[:max_length] + ELLIPSIS
    return text
