"""Bounded-time page fetching with typed failure mapping."""

from __future__ import annotations

import logging
import socket
import time
from typing import Iterator, List

import requests
from bs4 import UnicodeDammit
from urllib3.exceptions import HTTPError as TransportError
from urllib3.exceptions import NameResolutionError
from urllib3.exceptions import TimeoutError as TransportTimeout

from webanalyzer.config import AnalyzerConfig
from webanalyzer.errors import ErrorKind, FetchError
from webanalyzer.models import RawDocument
from webanalyzer.validator import is_valid_url

__all__ = ["PageFetcher", "classify_request_error", "decode_body"]

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

CHUNK_SIZE = 64 * 1024

_STATUS_KINDS = {
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.PAGE_NOT_FOUND,
}

# Fallback for resolvers whose errors only surface as text.
_RESOLUTION_MARKERS = (
    "name or service not known",
    "nodename nor servname provided",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


def _iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and the exceptions it wraps.

    ``requests`` nests urllib3 errors inside ``args`` and ``reason`` rather than
    always chaining them, so all three are followed.
    """

    pending = [exc]
    seen: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        for candidate in (
            current.__cause__,
            current.__context__,
            getattr(current, "reason", None),
            *current.args,
        ):
            if isinstance(candidate, BaseException):
                pending.append(candidate)


def _is_name_resolution_failure(exc: BaseException) -> bool:
    for cause in _iter_causes(exc):
        if isinstance(cause, (NameResolutionError, socket.gaierror)):
            return True
        if any(marker in str(cause).lower() for marker in _RESOLUTION_MARKERS):
            return True
    return False


def classify_request_error(exc: Exception) -> ErrorKind:
    """Map a ``requests`` or urllib3 failure onto an :class:`ErrorKind`."""

    # ConnectTimeout is also a ConnectionError, so timeouts are checked first.
    if isinstance(exc, (requests.Timeout, TransportTimeout)):
        return ErrorKind.TIMEOUT

    if isinstance(exc, requests.HTTPError):
        status = exc.response.status_code if exc.response is not None else None
        return _STATUS_KINDS.get(status, ErrorKind.UNKNOWN)

    if isinstance(exc, requests.ConnectionError) and _is_name_resolution_failure(exc):
        return ErrorKind.NOT_FOUND

    if any(isinstance(cause, TransportTimeout) for cause in _iter_causes(exc)):
        return ErrorKind.TIMEOUT

    return ErrorKind.UNKNOWN


def decode_body(content: bytes, content_type: str = "") -> str:
    """Decode a response body into text.

    A charset named in the ``Content-Type`` header wins. Otherwise the document's
    own declaration (BOM, ``<meta charset>``) is used, falling back to detection.
    """

    if "charset=" in content_type.lower():
        encoding = requests.utils.get_encoding_from_headers({"content-type": content_type})
        try:
            return content.decode(encoding or "utf-8", errors="replace")
        except LookupError:
            logger.debug("Unknown charset in %r, detecting instead", content_type)

    # UTF-8 is tried before statistical detection, which misreads short pages.
    dammit = UnicodeDammit(content, user_encodings=["utf-8"], is_html=True)
    if dammit.unicode_markup is None:
        return content.decode("utf-8", errors="replace")
    return dammit.unicode_markup


class PageFetcher:
    """Fetch single pages with a descriptive User-Agent and a fixed deadline.

    The deadline covers the whole request, body included: a server that keeps
    trickling bytes past it is cut off with a timeout. No retries are attempted;
    the first failure is reported to the caller as a
    :class:`~webanalyzer.errors.FetchError`.
    """

    def __init__(self, config: AnalyzerConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)
        self._session.headers["User-Agent"] = config.user_agent

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def fetch(self, url: str, timeout: float | None = None) -> RawDocument:
        """Return the page at ``url`` or raise :class:`FetchError`."""

        if not is_valid_url(url):
            raise FetchError(ErrorKind.INVALID_URL, url=url)

        limit = timeout if timeout is not None else self._config.request_timeout
        deadline = time.monotonic() + limit
        logger.debug("Fetching %s (timeout %.1fs)", url, limit)

        try:
            response = self._session.get(url, timeout=limit, stream=True)
            try:
                response.raise_for_status()
                content = self._read_body(response, url, deadline)
            finally:
                response.close()
        except (requests.RequestException, TransportError) as exc:
            kind = classify_request_error(exc)
            logger.warning("Failed to fetch %s: %s (%s)", url, kind.value, exc)
            raise FetchError(kind, url=url) from exc

        content_type = response.headers.get("Content-Type", "")
        return RawDocument(
            url=url,
            final_url=str(getattr(response, "url", None) or url),
            status_code=response.status_code,
            content_type=content_type,
            text=decode_body(content, content_type),
        )

    @staticmethod
    def _read_body(response: requests.Response, url: str, deadline: float) -> bytes:
        # read1 returns whatever has arrived instead of waiting for a full chunk,
        # so the deadline is checked after every socket read.
        chunks: List[bytes] = []
        while True:
            if time.monotonic() > deadline:
                logger.warning("Failed to fetch %s: deadline exceeded while reading", url)
                raise FetchError(ErrorKind.TIMEOUT, url=url)
            chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)
