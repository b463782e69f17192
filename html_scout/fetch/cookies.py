# html_scout/fetch/cookies.py
"""
Single-cookie codec.

A raw ``name=value`` string becomes a :class:`Cookie` scoped to ``/`` with
legacy (version 0) semantics. Input without ``=``, with an empty name or
with a name that is not a legal cookie token yields :data:`ABSENT_COOKIE`;
malformed input never raises.
"""
from __future__ import annotations

from dataclasses import dataclass
from http.cookies import CookieError, Morsel

from html_scout.logger import logger

ABSENT_NAME = "none"


@dataclass(frozen=True, slots=True)
class Cookie:
    """One cookie to present to the target host and all its sub-paths."""

    name: str
    value: str
    path: str = "/"
    version: int = 0

    @property
    def is_absent(self) -> bool:
        return self is ABSENT_COOKIE

    def to_morsel(self) -> Morsel:
        """Morsel carrying the value verbatim (version 0, no quoting)."""
        morsel: Morsel = Morsel()
        morsel.set(self.name, self.value, self.value)
        morsel["path"] = self.path
        return morsel


ABSENT_COOKIE = Cookie(name=ABSENT_NAME, value="")


def _is_legal_name(name: str) -> bool:
    # Morsel rejects empty names, separators and reserved attribute names
    try:
        Morsel().set(name, "", "")
    except CookieError:
        return False
    return True


def parse_cookie(raw: str) -> Cookie:
    """Split *raw* once on the first ``=``; no usable name means no cookie."""
    if not raw or "=" not in raw:
        return ABSENT_COOKIE
    name, _, value = raw.partition("=")
    if not _is_legal_name(name):
        logger.warning("Ignoring cookie %r: illegal cookie name %r", raw, name)
        return ABSENT_COOKIE
    return Cookie(name=name, value=value)


__all__ = ["Cookie", "ABSENT_COOKIE", "parse_cookie"]
