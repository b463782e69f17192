# File: html_scout/parser/__init__.py
"""html_scout.parser: comment and hidden-field search in fetched markup."""

from .html_parser import (
    Comment,
    HiddenField,
    PageFindings,
    find_comments,
    find_hidden_fields,
    parse_markup,
    scan_markup,
)

__all__ = [
    "Comment",
    "HiddenField",
    "PageFindings",
    "find_comments",
    "find_hidden_fields",
    "parse_markup",
    "scan_markup",
]
