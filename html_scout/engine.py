# File: html_scout/engine.py
"""html_scout.engine: Orchestration layer that runs the fetches and builds the report."""

from __future__ import annotations

from typing import Optional, Sequence

from html_scout.aggregator import ScanReport, aggregate_outcome, aggregate_results
from html_scout.config import ScanSettings
from html_scout.fanout.multi_fetcher import MultiFetcher
from html_scout.fetch.fetcher import Fetcher
from html_scout.fetch.models import RequestOptions
from html_scout.fetch.transport import Transport, build_transport
from html_scout.logger import logger

__all__ = ["Engine", "start_scan"]


class Engine:
    """Facade for the CLI and tests: fetch the root or its sub-paths, then scan the markup."""

    def __init__(self, settings: Optional[ScanSettings] = None, transport: Optional[Transport] = None) -> None:
        self.settings = settings or ScanSettings()
        self.transport: Transport = transport or build_transport(
            http_version=self.settings.http_version,
            follow_redirects=self.settings.follow_redirects,
        )

    async def scan(
        self,
        options: RequestOptions,
        sub_paths: Sequence[str] = (),
        *,
        comments: bool = False,
        hidden: bool = False,
    ) -> ScanReport:
        """Fetch *options* (fanned out over *sub_paths* when given) and scan every body."""
        parser = self.settings.markup_parser
        if sub_paths:
            logger.info("Scanning %d sub-paths under %s", len(sub_paths), options.address)
            runner = MultiFetcher(
                self.transport,
                pool_cap=self.settings.pool_cap,
                wait_ceiling=self.settings.wait_ceiling,
            )
            responses = await runner.fetch_all(options, sub_paths)
            return aggregate_results(
                responses, responses.errors, comments=comments, hidden=hidden, parser=parser
            )

        logger.info("Scanning %s", options.address)
        outcome = await Fetcher(self.transport).fetch(options)
        return aggregate_outcome(outcome, comments=comments, hidden=hidden, parser=parser)


async def start_scan(
    settings: ScanSettings,
    options: RequestOptions,
    sub_paths: Sequence[str] = (),
    *,
    comments: bool = False,
    hidden: bool = False,
    transport: Optional[Transport] = None,
) -> ScanReport:
    """Run one scan with a fresh :class:`Engine` and return its report."""
    engine = Engine(settings, transport)
    return await engine.scan(options, sub_paths, comments=comments, hidden=hidden)
