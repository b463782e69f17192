# File: tests/test_transport.py
"""Tests for the aiohttp and httpx transports against a local aiohttp test server."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from html_scout.config import ScanSettings
from html_scout.engine import Engine
from html_scout.fetch.cookies import Cookie
from html_scout.fetch.fetcher import Fetcher
from html_scout.fetch.models import Address, FetchError, FetchErrorCause, FetchResult, RequestOptions
from html_scout.fetch.transport import (
    AiohttpTransport,
    HttpxTransport,
    PreparedRequest,
    TransportError,
    build_transport,
)


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def echo_server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_echo(request: web.Request):
        lines = [f"{k}: {v}" for k, v in request.headers.items() if k.lower().startswith("x-")]
        lines.append(f"cookie: {request.cookies.get('sid', '-')}")
        lines.append(f"method: {request.method}")
        lines.append(f"version: {request.version.major}.{request.version.minor}")
        return web.Response(text="\n".join(lines), content_type="text/plain")

    async def handle_redirect(_):
        raise web.HTTPFound("/echo")

    async def handle_slow(_):
        await asyncio.sleep(3)
        return web.Response(text="late")

    async def handle_missing(_):
        return web.Response(status=404, text="<!-- not here -->", content_type="text/html")

    app.router.add_get("/echo", handle_echo)
    app.router.add_get("/sub/echo", handle_echo)
    app.router.add_get("/redirect", handle_redirect)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/missing", handle_missing)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_headers_and_cookie_reach_server(echo_server: str):
    transport = AiohttpTransport()
    request = PreparedRequest(
        address=Address(f"{echo_server}/sub/echo"),
        headers=(("X-One", "1"), ("X-Two", "2")),
        cookie=Cookie("sid", "s3cret"),
        timeout=5.0,
    )
    response = await transport.send(request)

    assert response.status == 200
    assert "X-One: 1" in response.body
    assert "X-Two: 2" in response.body
    assert "cookie: s3cret" in response.body
    assert "method: GET" in response.body


@pytest.mark.asyncio()
async def test_no_cookie_when_absent(echo_server: str):
    response = await AiohttpTransport().send(PreparedRequest(address=Address(f"{echo_server}/echo")))
    assert "cookie: -" in response.body


@pytest.mark.asyncio()
async def test_http_version_is_configurable(echo_server: str):
    response = await AiohttpTransport(http_version="1.0").send(
        PreparedRequest(address=Address(f"{echo_server}/echo"))
    )
    assert "version: 1.0" in response.body


def test_unknown_http_version():
    with pytest.raises(ValueError):
        AiohttpTransport(http_version="2")


@pytest.mark.asyncio()
async def test_redirects_not_followed_by_default(echo_server: str):
    response = await AiohttpTransport().send(PreparedRequest(address=Address(f"{echo_server}/redirect")))
    assert response.status == 302
    assert response.url == f"{echo_server}/redirect"


@pytest.mark.asyncio()
async def test_redirect_reports_final_address(echo_server: str):
    fetcher = Fetcher(AiohttpTransport(follow_redirects=True))
    outcome = await fetcher.fetch(RequestOptions(f"{echo_server}/redirect"))

    assert isinstance(outcome, FetchResult)
    assert outcome.address == Address(f"{echo_server}/echo")
    assert outcome.status == 200


@pytest.mark.asyncio()
async def test_error_status_is_still_a_response(echo_server: str):
    outcome = await Fetcher(AiohttpTransport()).fetch(RequestOptions(f"{echo_server}/missing"))

    assert isinstance(outcome, FetchResult)
    assert outcome.status == 404
    assert outcome.body == "<!-- not here -->"


@pytest.mark.asyncio()
async def test_request_timeout_raises_transport_error(echo_server: str):
    with pytest.raises(TransportError):
        await AiohttpTransport().send(PreparedRequest(address=Address(f"{echo_server}/slow"), timeout=0.5))


@pytest.mark.asyncio()
async def test_timeout_becomes_fetch_error(echo_server: str):
    outcome = await Fetcher(AiohttpTransport()).fetch(RequestOptions(f"{echo_server}/slow", timeout=0.5))

    assert isinstance(outcome, FetchError)
    assert outcome.cause is FetchErrorCause.TRANSPORT_FAILURE


@pytest.mark.asyncio()
async def test_connection_refused_becomes_fetch_error(unused_tcp_port: int):
    outcome = await Fetcher(AiohttpTransport()).fetch(
        RequestOptions(f"http://127.0.0.1:{unused_tcp_port}/", timeout=2.0)
    )

    assert isinstance(outcome, FetchError)
    assert outcome.cause is FetchErrorCause.TRANSPORT_FAILURE




@pytest.mark.asyncio()
@pytest.mark.parametrize("raw", ["=abc", "my cookie=1", "a;b=c"])
@pytest.mark.parametrize("transport_cls", [AiohttpTransport, HttpxTransport])
async def test_malformed_cookie_is_dropped_not_fatal(echo_server: str, raw: str, transport_cls):
    outcome = await Fetcher(transport_cls()).fetch(RequestOptions(f"{echo_server}/echo", cookie=raw))

    assert isinstance(outcome, FetchResult)
    assert outcome.status == 200
    assert "cookie: -" in outcome.body


@pytest.mark.parametrize(
    "version,expected",
    [("1.0", AiohttpTransport), ("1.1", AiohttpTransport), ("2", HttpxTransport)],
)
def test_build_transport_selects_by_version(version, expected):
    transport = build_transport(version, follow_redirects=True)
    assert isinstance(transport, expected)
    assert transport.follow_redirects is True


def test_engine_uses_http2_transport_when_configured():
    assert isinstance(Engine(ScanSettings(http_version="2")).transport, HttpxTransport)
    assert isinstance(Engine(ScanSettings()).transport, AiohttpTransport)


@pytest.mark.asyncio()
async def test_httpx_headers_and_cookie_reach_server(echo_server: str):
    request = PreparedRequest(
        address=Address(f"{echo_server}/sub/echo"),
        headers=(("X-One", "1"), ("X-Two", "2")),
        cookie=Cookie("sid", "s3cret"),
        timeout=5.0,
    )
    response = await HttpxTransport().send(request)

    assert response.status == 200
    assert "X-One: 1" in response.body
    assert "X-Two: 2" in response.body
    assert "cookie: s3cret" in response.body
    assert "method: GET" in response.body


@pytest.mark.asyncio()
async def test_httpx_redirects(echo_server: str):
    kept = await HttpxTransport().send(PreparedRequest(address=Address(f"{echo_server}/redirect")))
    assert kept.status == 302

    outcome = await Fetcher(HttpxTransport(follow_redirects=True)).fetch(RequestOptions(f"{echo_server}/redirect"))
    assert isinstance(outcome, FetchResult)
    assert outcome.address == Address(f"{echo_server}/echo")


@pytest.mark.asyncio()
async def test_httpx_timeout_raises_transport_error(echo_server: str):
    with pytest.raises(TransportError):
        await HttpxTransport().send(PreparedRequest(address=Address(f"{echo_server}/slow"), timeout=0.5))


@pytest.mark.asyncio()
async def test_httpx_connection_refused_becomes_fetch_error(unused_tcp_port: int):
    outcome = await Fetcher(HttpxTransport()).fetch(
        RequestOptions(f"http://127.0.0.1:{unused_tcp_port}/", timeout=2.0)
    )

    assert isinstance(outcome, FetchError)
    assert outcome.cause is FetchErrorCause.TRANSPORT_FAILURE
