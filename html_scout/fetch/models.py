# html_scout/fetch/models.py
"""
Data models for the HtmlScout fetch layer.

An :class:`Address` is always well-formed; text that does not parse is
kept as an :class:`InvalidAddress` instead of being replaced. A finished
fetch is exactly one of :class:`FetchResult` or :class:`FetchError`.
"""
from __future__ import annotations

import enum
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, List, Union
from urllib.parse import urlsplit

# Characters never allowed unescaped in a URI (RFC 3986, appendix C).
_FORBIDDEN_RE = re.compile(r'[\x00-\x20\x7f<>"{}|\\^`]')
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_NETWORK_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


@dataclass(frozen=True, slots=True)
class InvalidAddress:
    """Text that failed to parse as an absolute address."""

    raw: str
    reason: str

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True, slots=True)
class Address:
    """An absolute, well-formed resource locator."""

    url: str

    @classmethod
    def parse(cls, raw: str) -> Union[Address, InvalidAddress]:
        if not isinstance(raw, str) or not raw:
            return InvalidAddress(str(raw or ""), "empty address")
        bad = _FORBIDDEN_RE.search(raw)
        if bad:
            return InvalidAddress(raw, f"illegal character {bad.group()!r} at index {bad.start()}")
        if _BAD_ESCAPE_RE.search(raw):
            return InvalidAddress(raw, "malformed percent escape")
        try:
            parts = urlsplit(raw)
            parts.port  # raises ValueError for non-numeric or out-of-range ports
        except ValueError as exc:
            return InvalidAddress(raw, str(exc))
        if not parts.scheme:
            return InvalidAddress(raw, "missing scheme")
        if parts.scheme.lower() in _NETWORK_SCHEMES and not parts.hostname:
            return InvalidAddress(raw, "missing host")
        return cls(raw)

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    def __str__(self) -> str:
        return self.url


AddressLike = Union[Address, InvalidAddress]


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    copied: Dict[str, str] = {}
    seen = set()
    for name, value in (headers or {}).items():
        key = name.lower()
        if key in seen:
            raise ValueError(f"duplicate header name: {name!r}")
        seen.add(key)
        copied[name] = value
    return MappingProxyType(copied)


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Everything needed to send one GET request.

    Instances are immutable. Use :meth:`derive` to get options for
    another address; cookie, headers and timeout are carried over by value.
    """

    address: AddressLike
    cookie: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if isinstance(self.address, str):
            object.__setattr__(self, "address", Address.parse(self.address))
        elif not isinstance(self.address, (Address, InvalidAddress)):
            raise TypeError(f"address must be str or Address, got {type(self.address).__name__}")
        if self.timeout < 0:
            raise ValueError("timeout must be >= 0")
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    def __hash__(self) -> int:
        # the frozen header view is not hashable itself
        return hash((self.address, self.cookie, tuple(self.headers.items()), self.timeout))

    @property
    def is_valid(self) -> bool:
        return isinstance(self.address, Address)

    def derive(self, address: Union[str, AddressLike]) -> RequestOptions:
        """Return a fresh copy pointing at *address*."""
        return replace(self, address=address, headers=dict(self.headers))


class FetchErrorCause(str, enum.Enum):
    INVALID_ADDRESS = "invalid_address"
    TRANSPORT_FAILURE = "transport_failure"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Captured response: final address (after redirects), status and body."""

    address: Address
    status: int
    body: str

    ok = True


@dataclass(frozen=True, slots=True)
class FetchError:
    """Why a single target could not be fetched."""

    address: AddressLike
    cause: FetchErrorCause
    detail: str = ""

    ok = False


FetchOutcome = Union[FetchResult, FetchError]


class ResponseSet(Mapping[Address, str]):
    """Address → body mapping of one fan-out batch, plus its failures."""

    __slots__ = ("_bodies", "errors")

    def __init__(self) -> None:
        self._bodies: Dict[Address, str] = {}
        self.errors: List[FetchError] = []

    def add(self, outcome: FetchOutcome) -> None:
        if isinstance(outcome, FetchResult):
            self._bodies[outcome.address] = outcome.body
        else:
            self.errors.append(outcome)

    def __getitem__(self, key: Address) -> str:
        return self._bodies[key]

    def __iter__(self) -> Iterator[Address]:
        return iter(self._bodies)

    def __len__(self) -> int:
        return len(self._bodies)

    def urls(self) -> List[str]:
        return [str(a) for a in self._bodies]

    def __repr__(self) -> str:
        return f"<ResponseSet responses={len(self._bodies)} errors={len(self.errors)}>"


__all__ = (
    "Address",
    "InvalidAddress",
    "AddressLike",
    "RequestOptions",
    "FetchErrorCause",
    "FetchResult",
    "FetchError",
    "FetchOutcome",
    "ResponseSet",
)
