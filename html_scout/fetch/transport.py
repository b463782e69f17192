# html_scout/fetch/transport.py
"""
HTTP transports used by the fetcher.

The fetcher hands over a fully built :class:`PreparedRequest` and gets a
:class:`TransportResponse` back. Anything with an async ``send`` of the same
shape can stand in for the bundled transports (tests use stubs).

* :class:`AiohttpTransport` speaks HTTP/1.0 or HTTP/1.1 and is the default.
* :class:`HttpxTransport` negotiates up to HTTP/2 (via ALPN on TLS targets)
  and falls back to HTTP/1.1 where the server does not offer it.

:func:`build_transport` picks one from the configured ``http_version``.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

import aiohttp
import httpx
from aiohttp import ClientError, ClientSession, ClientTimeout, CookieJar
from yarl import URL

from html_scout.fetch.cookies import Cookie
from html_scout.fetch.models import Address

_AIOHTTP_VERSIONS = {
    "1.0": aiohttp.HttpVersion10,
    "1.1": aiohttp.HttpVersion11,
}
HTTP2 = "2"
HTTP_VERSIONS = (*_AIOHTTP_VERSIONS, HTTP2)


class TransportError(Exception):
    """Network or protocol fault while sending a request."""


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    """A GET request ready to go on the wire."""

    address: Address
    headers: Tuple[Tuple[str, str], ...] = ()
    cookie: Optional[Cookie] = None
    timeout: float = 30.0
    method: str = field(default="GET", init=False)

    @property
    def has_cookie(self) -> bool:
        return self.cookie is not None and not self.cookie.is_absent


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status: int
    url: str
    body: str


class Transport(Protocol):
    async def send(self, request: PreparedRequest) -> TransportResponse:
        ...


class AiohttpTransport:
    """Sends each request through its own :class:`aiohttp.ClientSession`.

    Every session owns a private cookie jar, so a cookie attached to one
    request is never visible to another.
    """

    def __init__(self, http_version: str = "1.1", follow_redirects: bool = False) -> None:
        try:
            self.version = _AIOHTTP_VERSIONS[http_version]
        except KeyError:
            raise ValueError(f"unsupported HTTP version for aiohttp: {http_version}") from None
        self.follow_redirects = follow_redirects

    def _cookie_jar(self, request: PreparedRequest) -> CookieJar:
        # unsafe=True keeps cookies for IP-address hosts as well
        jar = CookieJar(unsafe=True)
        if request.has_cookie:
            jar.update_cookies(
                {request.cookie.name: request.cookie.to_morsel()},
                response_url=URL(request.address.url),
            )
        return jar

    async def send(self, request: PreparedRequest) -> TransportResponse:
        jar = self._cookie_jar(request)
        timeout = ClientTimeout(total=request.timeout)
        try:
            async with ClientSession(cookie_jar=jar, timeout=timeout, version=self.version) as session:
                async with session.request(
                    request.method,
                    request.address.url,
                    headers=list(request.headers),
                    allow_redirects=self.follow_redirects,
                ) as resp:
                    body = await resp.text(errors="replace")
                    return TransportResponse(status=resp.status, url=str(resp.url), body=body)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"timed out after {request.timeout}s") from exc
        except (ClientError, OSError, ValueError) as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc


class HttpxTransport:
    """Sends each request through its own HTTP/2-capable :class:`httpx.AsyncClient`.

    Like :class:`AiohttpTransport`, the cookie lives in a jar owned by that
    one client and scoped to the target host with path ``/``.
    """

    def __init__(self, follow_redirects: bool = False) -> None:
        self.follow_redirects = follow_redirects

    def _cookies(self, request: PreparedRequest) -> httpx.Cookies:
        cookies = httpx.Cookies()
        if request.has_cookie:
            cookies.set(
                request.cookie.name,
                request.cookie.value,
                domain=request.address.host,
                path=request.cookie.path,
            )
        return cookies

    async def send(self, request: PreparedRequest) -> TransportResponse:
        # aiohttp reads a zero budget as "no limit"; httpx needs None for that
        timeout = httpx.Timeout(request.timeout or None)
        try:
            async with httpx.AsyncClient(
                http2=True,
                cookies=self._cookies(request),
                timeout=timeout,
                follow_redirects=self.follow_redirects,
            ) as client:
                resp = await client.request(request.method, request.address.url, headers=list(request.headers))
                return TransportResponse(status=resp.status_code, url=str(resp.url), body=resp.text)
        except httpx.TimeoutException as exc:
            raise TransportError(f"timed out after {request.timeout}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc


def build_transport(http_version: str = "1.1", follow_redirects: bool = False) -> Transport:
    """HttpxTransport for ``"2"``, AiohttpTransport for ``"1.0"`` / ``"1.1"``."""
    if http_version == HTTP2:
        return HttpxTransport(follow_redirects=follow_redirects)
    return AiohttpTransport(http_version=http_version, follow_redirects=follow_redirects)


__all__ = (
    "TransportError",
    "PreparedRequest",
    "TransportResponse",
    "Transport",
    "AiohttpTransport",
    "HttpxTransport",
    "HTTP_VERSIONS",
    "build_transport",
)
