# File: html_scout/utils.py
"""html_scout.utils: Helpers for reading sub-path and header files and parsing CLI values."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Sequence, Union

from html_scout.logger import logger

__all__: Sequence[str] = (
    "read_wordlist",
    "parse_header_string",
    "read_header_file",
    "parse_timeout",
    "merge_headers",
)

_TIMEOUT_RE = re.compile(r"^([0-9]+)s$")


def read_wordlist(path: Union[str, Path]) -> List[str]:
    """Read one entry per line, skipping blank lines and surrounding whitespace."""
    p = Path(path)
    if not p.is_file():
        logger.error("Wordlist not found: %s", p)
        raise FileNotFoundError(f"Wordlist file not found: {p}")
    words = [line.strip() for line in p.read_text(encoding="utf-8").splitlines() if line.strip()]
    logger.debug("Loaded %d entries from wordlist %s", len(words), p)
    return words


def _split_header(pair: str) -> tuple[str, str]:
    name, sep, value = pair.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid header format: {pair!r} (expected name=value)")
    return name, value.strip()


def parse_header_string(raw: str) -> Dict[str, str]:
    """Parse ``name=value(;name=value)*`` into an ordered mapping."""
    headers: Dict[str, str] = {}
    for pair in raw.split(";"):
        if not pair.strip():
            continue
        name, value = _split_header(pair)
        headers[name] = value
    if not headers:
        raise ValueError(f"Invalid header format: {raw!r} (expected name=value)")
    return headers


def read_header_file(path: Union[str, Path]) -> Dict[str, str]:
    """Read one ``name=value`` header per line."""
    headers: Dict[str, str] = {}
    for line in read_wordlist(path):
        name, value = _split_header(line)
        headers[name] = value
    return headers


def merge_headers(*groups: Dict[str, str]) -> Dict[str, str]:
    """Merge header mappings; a later name replaces an earlier one case-insensitively."""
    merged: Dict[str, str] = {}
    for group in groups:
        for name, value in group.items():
            for existing in [k for k in merged if k.lower() == name.lower()]:
                del merged[existing]
            merged[name] = value
    return merged


def parse_timeout(raw: str) -> float:
    """Parse ``<integer>s`` (e.g. ``40s``) into seconds."""
    match = _TIMEOUT_RE.match(raw.strip())
    if not match:
        raise ValueError(f"Invalid timeout format: {raw!r} (expected e.g. 40s)")
    return float(match.group(1))
