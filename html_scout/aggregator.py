# File: html_scout/aggregator.py
"""html_scout.aggregator: Collects fetch outcomes and findings into a scan report."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Mapping, TypedDict

from html_scout.fetch.models import Address, FetchError, FetchOutcome, FetchResult
from html_scout.parser.html_parser import scan_markup


class PageInfo(TypedDict):
    """Findings for one fetched address."""

    url: str
    comments: List[str]
    hidden_fields: List[str]


class ErrorInfo(TypedDict):
    """A target that could not be fetched."""

    url: str
    cause: str
    detail: str


@dataclass(slots=True)
class ScanReport:
    """Result of one scan: per-page findings and per-target failures."""

    pages: List[PageInfo] = field(default_factory=list)
    errors: List[ErrorInfo] = field(default_factory=list)
    searched_comments: bool = False
    searched_hidden: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """JSON representation of the report."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def _page_info(url: str, body: str, comments: bool, hidden: bool, parser: str) -> PageInfo:
    findings = scan_markup(body, comments=comments, hidden=hidden, parser=parser)
    return {
        "url": url,
        "comments": [c.text for c in findings.comments],
        "hidden_fields": [h.markup for h in findings.hidden_fields],
    }


def _error_info(error: FetchError) -> ErrorInfo:
    return {"url": str(error.address), "cause": error.cause.value, "detail": error.detail}


def aggregate_results(
    bodies: Mapping[Address, str],
    errors: Iterable[FetchError] = (),
    *,
    comments: bool = False,
    hidden: bool = False,
    parser: str = "html.parser",
) -> ScanReport:
    """Scan every body and assemble the ScanReport, pages sorted by URL."""
    report = ScanReport(searched_comments=comments, searched_hidden=hidden)
    for address in sorted(bodies, key=str):
        report.pages.append(_page_info(str(address), bodies[address], comments, hidden, parser))
    report.errors = [_error_info(e) for e in errors]
    return report


def aggregate_outcome(
    outcome: FetchOutcome,
    *,
    comments: bool = False,
    hidden: bool = False,
    parser: str = "html.parser",
) -> ScanReport:
    """ScanReport for a single fetch."""
    if isinstance(outcome, FetchResult):
        return aggregate_results({outcome.address: outcome.body}, comments=comments, hidden=hidden, parser=parser)
    return aggregate_results({}, [outcome], comments=comments, hidden=hidden, parser=parser)


__all__ = ["PageInfo", "ErrorInfo", "ScanReport", "aggregate_results", "aggregate_outcome"]
