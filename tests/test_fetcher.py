from __future__ import annotations

import socket
from types import SimpleNamespace
from typing import Iterable, List

import pytest
import requests
from urllib3.exceptions import MaxRetryError, ReadTimeoutError

from webanalyzer.config import AnalyzerConfig
from webanalyzer.errors import ErrorKind, FetchError
from webanalyzer.services import fetcher as fetcher_module
from webanalyzer.services.fetcher import PageFetcher, classify_request_error, decode_body


class DummyRaw:
    def __init__(self, chunks: Iterable[bytes], on_read=None) -> None:
        self._chunks = list(chunks)
        self._on_read = on_read

    def read1(self, amt: int, decode_content: bool = True) -> bytes:
        if self._on_read is not None:
            self._on_read()
        if not self._chunks:
            return b""
        return self._chunks.pop(0)


class DummyResponse:
    def __init__(
        self,
        body: str | bytes = b"",
        status_code: int = 200,
        url: str = "https://example.com/",
        content_type: str = "text/html; charset=utf-8",
        chunks: Iterable[bytes] | None = None,
        on_read=None,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.raw = DummyRaw(chunks if chunks is not None else [body], on_read)
        self.status_code = status_code
        self.url = url
        self.headers = {"Content-Type": content_type}
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _fetcher_with(get, config: AnalyzerConfig | None = None) -> PageFetcher:
    session = SimpleNamespace(get=get, headers={}, close=lambda: None)
    return PageFetcher(config or AnalyzerConfig(), session=session)


def test_fetch_returns_document_and_sends_user_agent() -> None:
    captured: dict[str, object] = {}

    def fake_get(url, timeout, stream):
        captured.update(url=url, timeout=timeout, stream=stream)
        return DummyResponse("<html>ok</html>", url="https://example.com/final")

    config = AnalyzerConfig(user_agent="TestBot/1.0", request_timeout=4)
    fetcher = _fetcher_with(fake_get, config)

    document = fetcher.fetch("https://example.com/start")

    assert document.text == "<html>ok</html>"
    assert document.final_url == "https://example.com/final"
    assert document.status_code == 200
    assert document.content_type.startswith("text/html")
    assert captured == {"url": "https://example.com/start", "timeout": 4, "stream": True}
    assert fetcher._session.headers["User-Agent"] == "TestBot/1.0"


def test_fetch_timeout_override() -> None:
    captured: list[float] = []

    def fake_get(url, timeout, stream):
        captured.append(timeout)
        return DummyResponse("")

    _fetcher_with(fake_get).fetch("https://example.com", timeout=2.5)

    assert captured == [2.5]


def test_body_is_read_in_chunks_and_response_closed() -> None:
    response = DummyResponse(chunks=[b"<html><body>", b"Hello", b"</body></html>"])
    document = _fetcher_with(lambda url, timeout, stream: response).fetch("https://example.com")

    assert document.text == "<html><body>Hello</body></html>"
    assert response.closed


def test_slow_trickling_body_hits_the_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = FakeClock()
    monkeypatch.setattr(fetcher_module, "time", clock)

    # One byte every 0.4s: each read is well within the per-read timeout,
    # but twenty of them take far longer than the whole-request limit.
    response = DummyResponse(chunks=[b"x"] * 20, on_read=lambda: clock.advance(0.4))
    fetcher = _fetcher_with(lambda url, timeout, stream: response, AnalyzerConfig(request_timeout=1.0))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/slow")

    assert excinfo.value.kind is ErrorKind.TIMEOUT
    assert response.closed
    assert clock.now - 100.0 <= 1.0 + 0.4 * 2
    assert len(response.raw._chunks) > 10


def test_read_timeout_while_streaming_maps_to_timeout() -> None:
    def stalled_read() -> None:
        raise ReadTimeoutError(None, "https://example.com", "Read timed out.")

    response = DummyResponse(chunks=[b"<html>"], on_read=stalled_read)

    with pytest.raises(FetchError) as excinfo:
        _fetcher_with(lambda url, timeout, stream: response).fetch("https://example.com")

    assert excinfo.value.kind is ErrorKind.TIMEOUT
    assert response.closed


def test_invalid_url_is_rejected_without_network() -> None:
    def fail_get(url, timeout, stream):
        raise AssertionError("Should not fetch")

    with pytest.raises(FetchError) as excinfo:
        _fetcher_with(fail_get).fetch("ftp://example.com")

    assert excinfo.value.kind is ErrorKind.INVALID_URL


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.PAGE_NOT_FOUND),
        (500, ErrorKind.UNKNOWN),
        (410, ErrorKind.UNKNOWN),
    ],
)
def test_http_status_mapping(status: int, kind: ErrorKind) -> None:
    response = DummyResponse("", status_code=status)
    fetcher = _fetcher_with(lambda url, timeout, stream: response)

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/missing")

    assert excinfo.value.kind is kind
    assert excinfo.value.message == kind.message
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)
    assert response.closed


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (requests.ReadTimeout("read timed out"), ErrorKind.TIMEOUT),
        (requests.ConnectTimeout("connect timed out"), ErrorKind.TIMEOUT),
        (
            requests.ConnectionError(ReadTimeoutError(None, "/", "Read timed out.")),
            ErrorKind.TIMEOUT,
        ),
        (
            requests.ConnectionError(socket.gaierror(-2, "Name or service not known")),
            ErrorKind.NOT_FOUND,
        ),
        (
            requests.ConnectionError(
                MaxRetryError(None, "/", reason=socket.gaierror(8, "nodename nor servname provided"))
            ),
            ErrorKind.NOT_FOUND,
        ),
        (requests.ConnectionError("Connection refused"), ErrorKind.UNKNOWN),
        (requests.TooManyRedirects("loop"), ErrorKind.UNKNOWN),
    ],
)
def test_transport_error_mapping(exc: requests.RequestException, kind: ErrorKind) -> None:
    def fake_get(url, timeout, stream):
        raise exc

    with pytest.raises(FetchError) as excinfo:
        _fetcher_with(fake_get).fetch("https://example.com")

    assert excinfo.value.kind is kind
    assert excinfo.value.url == "https://example.com"


def test_classify_http_error_without_response() -> None:
    assert classify_request_error(requests.HTTPError("boom")) is ErrorKind.UNKNOWN


CAFE_PAGE = "<html><head>{meta}<title>Café Crème</title></head><body><p>Café Crème</p></body></html>"


@pytest.mark.parametrize(
    ("content_type", "meta"),
    [
        ("text/html", ""),
        ("text/html", "<meta charset='utf-8'>"),
        ("text/html; charset=utf-8", ""),
    ],
)
def test_utf8_body_is_not_decoded_as_latin1(content_type: str, meta: str) -> None:
    body = CAFE_PAGE.format(meta=meta).encode("utf-8")
    response = DummyResponse(body, content_type=content_type)

    document = _fetcher_with(lambda url, timeout, stream: response).fetch("https://example.com")

    assert "Café Crème" in document.text
    assert "Ã" not in document.text


def test_declared_header_charset_wins() -> None:
    body = "<p>Crème brûlée</p>".encode("latin-1")

    assert decode_body(body, "text/html; charset=ISO-8859-1") == "<p>Crème brûlée</p>"


def test_meta_charset_is_honoured_without_header_charset() -> None:
    body = "<html><head><meta charset='windows-1252'></head><body>Crème</body></html>".encode("cp1252")

    assert "Crème" in decode_body(body, "text/html")


def test_unknown_header_charset_falls_back_to_detection() -> None:
    assert decode_body("Crème".encode("utf-8"), "text/html; charset=bogus-8") == "Crème"


def test_context_manager_closes_session() -> None:
    closed: List[bool] = []
    session = SimpleNamespace(get=None, headers={}, close=lambda: closed.append(True))

    with PageFetcher(AnalyzerConfig(), session=session):
        pass

    assert closed == [True]
