# File: tests/test_multi_fetcher.py
import asyncio
import time

import pytest

from html_scout.fanout.multi_fetcher import MultiFetcher, derive_address, fetch_all
from html_scout.fetch.models import Address, FetchErrorCause, InvalidAddress, RequestOptions

from conftest import StubTransport


class SlowPathTransport(StubTransport):
    """Answers immediately, except for URLs ending in /slow which hang."""

    async def send(self, request):
        if request.address.url.endswith("/slow"):
            self.requests.append(request)
            await asyncio.sleep(30)
        return await super().send(request)


def test_derive_address_concatenates():
    assert derive_address(Address("http://example.test/"), "a/b") == Address("http://example.test/a/b")
    assert isinstance(derive_address(Address("http://example.test/"), "bad path"), InvalidAddress)
    assert isinstance(derive_address(InvalidAddress("x y", "bad"), "a"), InvalidAddress)


def test_invalid_pool_settings():
    with pytest.raises(ValueError):
        MultiFetcher(StubTransport(), pool_cap=0)
    with pytest.raises(ValueError):
        MultiFetcher(StubTransport(), wait_ceiling=0)


@pytest.mark.asyncio()
async def test_empty_sub_paths_do_nothing(stub_transport, root_options):
    responses = await MultiFetcher(stub_transport).fetch_all(root_options, [])
    assert len(responses) == 0
    assert responses.errors == []
    assert stub_transport.requests == []


@pytest.mark.asyncio()
async def test_every_sub_path_is_fetched(stub_transport, root_options):
    responses = await MultiFetcher(stub_transport).fetch_all(root_options, ["a", "b", "c/d"])

    assert sorted(responses.urls()) == [
        "http://example.test/a",
        "http://example.test/b",
        "http://example.test/c/d",
    ]
    assert responses[Address("http://example.test/c/d")] == "/c/d"


@pytest.mark.asyncio()
async def test_malformed_sub_path_is_skipped(stub_transport, root_options):
    sub_paths = ["one", "bad path", "two", "three"]
    responses = await MultiFetcher(stub_transport).fetch_all(root_options, sub_paths)

    assert len(responses) == len(sub_paths) - 1
    assert "http://example.test/bad path" not in stub_transport.urls
    for name in ("one", "two", "three"):
        assert responses[Address(f"http://example.test/{name}")] == f"/{name}"


@pytest.mark.asyncio()
async def test_invalid_root_skips_everything(stub_transport):
    options = RequestOptions("no scheme here/")
    responses = await MultiFetcher(stub_transport).fetch_all(options, ["a", "b"])

    assert len(responses) == 0
    assert stub_transport.requests == []


@pytest.mark.asyncio()
async def test_derived_requests_share_options_but_not_address(stub_transport, root_options):
    await MultiFetcher(stub_transport).fetch_all(root_options, ["x", "y"])

    assert sorted(stub_transport.urls) == ["http://example.test/x", "http://example.test/y"]
    for request in stub_transport.requests:
        assert request.headers == (("X-First", "1"), ("X-Second", "2"))
        assert request.cookie is not None and request.cookie.name == "PHPSESSID"
        assert request.timeout == 5.0
    assert root_options.address == Address("http://example.test/")


@pytest.mark.asyncio()
async def test_fifty_concurrent_fetches_stay_consistent(root_options):
    transport = StubTransport(delay=0.01)
    sub_paths = [f"page{i}" for i in range(50)]
    responses = await MultiFetcher(transport, pool_cap=50).fetch_all(root_options, sub_paths)

    assert len(responses) == 50
    assert len(set(responses)) == 50
    for address, body in responses.items():
        assert body == address.url.removeprefix("http://example.test")


@pytest.mark.asyncio()
async def test_pool_is_bounded(root_options):
    transport = StubTransport(delay=0.02)
    sub_paths = [f"p{i}" for i in range(12)]
    responses = await MultiFetcher(transport, pool_cap=3).fetch_all(root_options, sub_paths)

    assert len(responses) == 12
    assert transport.max_in_flight <= 3


@pytest.mark.asyncio()
async def test_fetches_run_concurrently(root_options):
    transport = StubTransport(delay=0.3)
    start = time.perf_counter()
    await MultiFetcher(transport, pool_cap=4).fetch_all(root_options, ["a", "b", "c", "d"])
    elapsed = time.perf_counter() - start

    assert elapsed < 0.3 * 2
    assert transport.max_in_flight == 4


@pytest.mark.asyncio()
async def test_failures_are_collected_not_raised(root_options):
    transport = StubTransport(failures={"http://example.test/down"})
    responses = await MultiFetcher(transport).fetch_all(root_options, ["up", "down"])

    assert responses.urls() == ["http://example.test/up"]
    assert len(responses.errors) == 1
    error = responses.errors[0]
    assert error.cause is FetchErrorCause.TRANSPORT_FAILURE
    assert str(error.address) == "http://example.test/down"


@pytest.mark.asyncio()
async def test_fetches_past_wait_ceiling_are_abandoned(root_options, log_records):
    transport = SlowPathTransport()
    start = time.perf_counter()
    responses = await MultiFetcher(transport, wait_ceiling=0.3).fetch_all(
        root_options, ["fast", "slow", "other"]
    )
    elapsed = time.perf_counter() - start

    assert elapsed < 5
    assert sorted(responses.urls()) == ["http://example.test/fast", "http://example.test/other"]
    assert Address("http://example.test/slow") not in responses
    assert responses.errors == []
    messages = [r.getMessage() for r in log_records]
    assert any("wait ceiling of 0.3 s reached" in m for m in messages)
    assert not any("interrupted by cancellation" in m for m in messages)


@pytest.mark.asyncio()
async def test_external_cancellation_returns_partial_results(root_options, log_records):
    transport = SlowPathTransport()
    runner = MultiFetcher(transport, pool_cap=2, wait_ceiling=30)
    task = asyncio.create_task(runner.fetch_all(root_options, ["fast", "slow"]))
    await asyncio.sleep(0.2)
    task.cancel()
    responses = await task

    assert responses.urls() == ["http://example.test/fast"]
    messages = [r.getMessage() for r in log_records]
    assert any("interrupted by cancellation" in m for m in messages)
    assert not any("wait ceiling" in m for m in messages)


@pytest.mark.asyncio()
async def test_module_level_fetch_all(stub_transport, root_options):
    responses = await fetch_all(root_options, ["a"], transport=stub_transport, pool_cap=1)
    assert responses.urls() == ["http://example.test/a"]


@pytest.mark.asyncio()
async def test_no_memoization(stub_transport, root_options):
    runner = MultiFetcher(stub_transport)
    await runner.fetch_all(root_options, ["a", "b"])
    await runner.fetch_all(root_options, ["a", "b"])
    assert len(stub_transport.requests) == 4
