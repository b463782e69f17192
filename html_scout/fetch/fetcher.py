# html_scout/fetch/fetcher.py
"""
Fetcher module: builds one GET request from RequestOptions and sends it.

The result is always a FetchResult or a FetchError; transport faults and
cancellation are captured, never raised to the caller.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError

from html_scout.fetch.cookies import parse_cookie
from html_scout.fetch.models import (
    Address,
    FetchError,
    FetchErrorCause,
    FetchOutcome,
    FetchResult,
    RequestOptions,
)
from html_scout.fetch.transport import AiohttpTransport, PreparedRequest, Transport, TransportError
from html_scout.logger import logger


class Fetcher:
    """Sends exactly one request per :meth:`fetch` call."""

    def __init__(self, transport: Optional[Transport] = None) -> None:
        self.transport: Transport = transport if transport is not None else AiohttpTransport()

    @staticmethod
    def build_request(options: RequestOptions) -> PreparedRequest:
        """Translate *options* into a request; the address must be valid."""
        if not isinstance(options.address, Address):
            raise ValueError(f"cannot build a request for invalid address {options.address.raw!r}")
        cookie = parse_cookie(options.cookie)
        return PreparedRequest(
            address=options.address,
            headers=tuple(options.headers.items()),
            cookie=None if cookie.is_absent else cookie,
            timeout=options.timeout,
        )

    async def fetch(self, options: RequestOptions) -> FetchOutcome:
        """
        Fetch the address of *options*.

        Returns FetchResult on any HTTP response, FetchError on an invalid
        address, a transport failure or cancellation of the calling task.
        """
        address = options.address
        if not isinstance(address, Address):
            logger.warning("Skipping invalid address %r: %s", address.raw, address.reason)
            return FetchError(address, FetchErrorCause.INVALID_ADDRESS, address.reason)

        request = self.build_request(options)
        try:
            response = await self.transport.send(request)
        except asyncio.CancelledError:
            logger.warning("Fetch of %s interrupted", address)
            return FetchError(address, FetchErrorCause.INTERRUPTED, "cancelled")
        except (TransportError, ClientError, asyncio.TimeoutError, OSError) as exc:
            logger.warning("Failed %s: %s", address, exc)
            return FetchError(address, FetchErrorCause.TRANSPORT_FAILURE, str(exc))

        final = Address.parse(response.url)
        if not isinstance(final, Address):
            final = address
        logger.debug("Fetched %s -> %s (HTTP %s, %d chars)", address, final, response.status, len(response.body))
        return FetchResult(address=final, status=response.status, body=response.body)


__all__ = ["Fetcher"]
