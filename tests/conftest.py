# File: tests/conftest.py
import asyncio
import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import urlsplit

import pytest

from html_scout.fetch.models import RequestOptions
from html_scout.logger import logger
from html_scout.fetch.transport import PreparedRequest, TransportError, TransportResponse


class StubTransport:
    """
    In-memory transport recording every request it receives.

    By default the body is the path of the requested URL; *bodies* overrides
    it per URL and *failures* makes the listed URLs raise TransportError.
    """

    def __init__(
        self,
        bodies: Optional[Dict[str, str]] = None,
        failures: Optional[set] = None,
        default_body: Optional[Callable[[str], str]] = None,
        delay: float = 0.0,
    ) -> None:
        self.bodies = bodies or {}
        self.failures = failures or set()
        self.default_body = default_body or (lambda url: urlsplit(url).path)
        self.delay = delay
        self.requests: List[PreparedRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, request: PreparedRequest) -> TransportResponse:
        url = request.address.url
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url in self.failures:
                raise TransportError(f"connection refused: {url}")
            body = self.bodies.get(url, self.default_body(url))
            return TransportResponse(status=200, url=url, body=body)
        finally:
            self.in_flight -= 1

    @property
    def urls(self) -> List[str]:
        return [r.address.url for r in self.requests]


@pytest.fixture()
def stub_transport() -> StubTransport:
    return StubTransport()


@pytest.fixture()
def root_options() -> RequestOptions:
    """Root options with a cookie and two headers."""
    return RequestOptions(
        address="http://example.test/",
        cookie="PHPSESSID=abc123",
        headers={"X-First": "1", "X-Second": "2"},
        timeout=5.0,
    )


@pytest.fixture()
def sample_html() -> str:
    return (
        "<html><head><!-- head note --></head><body>"
        "<form><input type=\"hidden\" name=\"csrf\" value=\"t0k\">"
        "<input type=\"text\" name=\"q\"></form>"
        "<div><p><span><!-- deep --></span></p></div>"
        "</body></html>"
    )


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def log_records():
    """Records the project logger emits during the test; it does not propagate to caplog."""
    handler = _ListHandler()
    logger.addHandler(handler)
    yield handler.records
    logger.removeHandler(handler)
