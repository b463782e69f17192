# File: html_scout/fanout/__init__.py
"""html_scout.fanout: concurrent fetching of sub-paths under a root address."""

from .multi_fetcher import DEFAULT_POOL_CAP, DEFAULT_WAIT_CEILING, MultiFetcher, derive_address, fetch_all

__all__ = ["MultiFetcher", "derive_address", "fetch_all", "DEFAULT_POOL_CAP", "DEFAULT_WAIT_CEILING"]
