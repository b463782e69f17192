"""Concurrent fetching of many sub-paths under one root address."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Union

from html_scout.fetch.fetcher import Fetcher
from html_scout.fetch.models import (
    Address,
    FetchOutcome,
    InvalidAddress,
    RequestOptions,
    ResponseSet,
)
from html_scout.fetch.transport import Transport
from html_scout.logger import logger

DEFAULT_POOL_CAP = 16
DEFAULT_WAIT_CEILING = 60.0


def derive_address(root: Union[Address, InvalidAddress], sub_path: str) -> Union[Address, InvalidAddress]:
    """Append *sub_path* to the string form of *root* and parse the result."""
    if isinstance(root, InvalidAddress):
        return InvalidAddress(f"{root.raw}{sub_path}", f"root address is invalid: {root.reason}")
    return Address.parse(f"{root}{sub_path}")


class MultiFetcher:
    """Fan a shared set of request options out over many sub-paths."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        pool_cap: int = DEFAULT_POOL_CAP,
        wait_ceiling: float = DEFAULT_WAIT_CEILING,
    ) -> None:
        """Create a fan-out runner; *pool_cap* bounds the concurrent fetches."""
        if pool_cap < 1:
            raise ValueError("pool_cap must be >= 1")
        if wait_ceiling <= 0:
            raise ValueError("wait_ceiling must be > 0")
        self.fetcher = Fetcher(transport)
        self.pool_cap = pool_cap
        self.wait_ceiling = wait_ceiling

    def derive_targets(self, root_options: RequestOptions, sub_paths: Sequence[str]) -> List[RequestOptions]:
        """Build one options copy per sub-path, skipping the ones that do not parse."""
        targets: List[RequestOptions] = []
        for sub_path in sub_paths:
            address = derive_address(root_options.address, sub_path)
            if isinstance(address, InvalidAddress):
                logger.warning("Skipping sub-path %r: %s", sub_path, address.reason)
                continue
            targets.append(root_options.derive(address))
        return targets

    async def _worker(
        self,
        jobs: asyncio.Queue[RequestOptions],
        results: asyncio.Queue[FetchOutcome],
        abandoned: asyncio.Event,
    ) -> None:
        while not abandoned.is_set():
            try:
                options = jobs.get_nowait()
            except asyncio.QueueEmpty:
                return
            outcome = await self.fetcher.fetch(options)
            if abandoned.is_set():
                return
            results.put_nowait(outcome)

    async def fetch_all(self, root_options: RequestOptions, sub_paths: Sequence[str]) -> ResponseSet:
        """Fetch every sub-path and collect the bodies of the successful ones.

        Failures never abort the batch: unparsable sub-paths are skipped,
        failed fetches end up in ``ResponseSet.errors`` and fetches still
        running after ``wait_ceiling`` seconds are abandoned.
        """
        responses = ResponseSet()
        if not sub_paths:
            return responses

        targets = self.derive_targets(root_options, sub_paths)
        if not targets:
            return responses

        jobs: asyncio.Queue[RequestOptions] = asyncio.Queue()
        for options in targets:
            jobs.put_nowait(options)
        results: asyncio.Queue[FetchOutcome] = asyncio.Queue()
        abandoned = asyncio.Event()

        pool_size = min(len(targets), self.pool_cap)
        logger.info("Fetching %d targets with %d workers", len(targets), pool_size)
        workers = [asyncio.create_task(self._worker(jobs, results, abandoned)) for _ in range(pool_size)]

        try:
            _, pending = await asyncio.wait(workers, timeout=self.wait_ceiling)
            reason = f"wait ceiling of {self.wait_ceiling:.1f} s reached"
        except asyncio.CancelledError:
            pending = {w for w in workers if not w.done()}
            reason = "interrupted by cancellation"

        if pending:
            abandoned.set()
            logger.warning(
                "Abandoning %d unfinished workers, %s (%d targets never started); returning partial results",
                len(pending),
                reason,
                jobs.qsize(),
            )
            for worker in pending:
                worker.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        while not results.empty():
            responses.add(results.get_nowait())

        logger.info("Collected %d responses, %d errors", len(responses), len(responses.errors))
        return responses


async def fetch_all(
    root_options: RequestOptions,
    sub_paths: Sequence[str],
    transport: Optional[Transport] = None,
    pool_cap: int = DEFAULT_POOL_CAP,
    wait_ceiling: float = DEFAULT_WAIT_CEILING,
) -> ResponseSet:
    """Run one :class:`MultiFetcher` batch and return its responses."""
    runner = MultiFetcher(transport, pool_cap=pool_cap, wait_ceiling=wait_ceiling)
    return await runner.fetch_all(root_options, sub_paths)
