# === FILE: html_scout/parser/html_parser.py ===
"""Markup inspection for HtmlScout.

Two read-only projections of a parsed document are provided:

* comments: the raw text of every ``<!-- ... -->`` node, in document order.
* hidden fields: the serialized markup of every element whose ``type``
  attribute is ``hidden`` (typically ``<input type="hidden">``).

Neither function modifies the tree, and both return an empty list when
nothing matches. :func:`scan_markup` parses a body once and runs whichever
searches are requested.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4 import Comment as CommentNode
from bs4.element import Tag

__all__: Sequence[str] = (
    "Comment",
    "HiddenField",
    "PageFindings",
    "parse_markup",
    "find_comments",
    "find_hidden_fields",
    "scan_markup",
)


@dataclass(frozen=True, slots=True)
class Comment:
    """Text of one comment node."""

    text: str


@dataclass(frozen=True, slots=True)
class HiddenField:
    """Serialized markup of one element with ``type="hidden"``."""

    markup: str


@dataclass(slots=True)
class PageFindings:
    """What the scanner found in one response body."""

    comments: list[Comment] = field(default_factory=list)
    hidden_fields: list[HiddenField] = field(default_factory=list)


def parse_markup(text: str, parser: str = "html.parser") -> BeautifulSoup:
    """Parse *text* into a BeautifulSoup tree with the given tree builder."""
    return BeautifulSoup(text, parser)


def find_comments(tree: Tag) -> list[Comment]:
    return [Comment(str(node)) for node in tree.descendants if isinstance(node, CommentNode)]


def find_hidden_fields(tree: Tag) -> list[HiddenField]:
    return [HiddenField(str(element)) for element in tree.select('[type="hidden"]')]


def scan_markup(
    text: str,
    *,
    comments: bool = True,
    hidden: bool = True,
    parser: str = "html.parser",
) -> PageFindings:
    """Parse *text* and collect the requested findings."""
    findings = PageFindings()
    if not (comments or hidden):
        return findings
    tree = parse_markup(text, parser)
    if comments:
        findings.comments = find_comments(tree)
    if hidden:
        findings.hidden_fields = find_hidden_fields(tree)
    return findings
