import sys
import os

ROOT_DIR = os.path.abspath(os.path.join(__file__, "..", "..", "src"))
sys.path.insert(0, ROOT_DIR)

import asyncio
import logging
import pytest
import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer

from searchflow.core.errors import BackendError
from searchflow.core.types import SearchResult
from searchflow.search.aggregator import SearchAggregator
from searchflow.search.backend.base import SearchBackend
from searchflow.search.backend.searxng import SearxngBackend
from searchflow.config import default_config
from searchflow.tools.search_tool import WebSearchTool


def _hit(name: str) -> SearchResult:
    return SearchResult(title=f"Title {name}", url=f"https://example.com/{name}", snippet=f"Snippet {name}")


# ------------------------------
# 轻量 Mock 后端
# ------------------------------
class FakeBackend(SearchBackend):
    """Serves pages from a dict; a value that is an exception is raised instead."""

    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    async def fetch_page(self, session, query: str, pageno: int):
        self.requested.append(pageno)
        page = self.pages.get(pageno, [])
        if isinstance(page, Exception):
            raise page
        return list(page)


def _aggregate(backend, limit, query="rust ownership"):
    return asyncio.run(SearchAggregator(backend).aggregate(None, query, limit))


def test_dedup_across_pages_keeps_first_seen_order():
    a, b, c = _hit("a"), _hit("b"), _hit("c")
    backend = FakeBackend({1: [a, b], 2: [a, c], 3: []})
    results = _aggregate(backend, 3)
    assert [r.url for r in results] == [a.url, b.url, c.url]
    assert backend.requested == [1, 2]


def test_pagination_stops_on_empty_page_when_backend_runs_dry():
    a, b = _hit("a"), _hit("b")
    backend = FakeBackend({1: [a, b], 2: [a], 3: []})
    results = _aggregate(backend, 3)
    assert [r.url for r in results] == [a.url, b.url]
    assert backend.requested == [1, 2, 3]


def test_stops_mid_page_once_limit_is_reached():
    hits = [_hit(str(i)) for i in range(10)]
    backend = FakeBackend({1: hits})
    results = _aggregate(backend, 4)
    assert results == hits[:4]
    assert backend.requested == [1]


def test_short_pages_keep_paginating():
    backend = FakeBackend({1: [_hit("a")], 2: [_hit("b")], 3: [_hit("c")], 4: [_hit("d")]})
    results = _aggregate(backend, 3)
    assert len(results) == 3
    assert backend.requested == [1, 2, 3]


def test_duplicates_within_one_page_are_dropped():
    a = _hit("a")
    backend = FakeBackend({1: [a, a, _hit("b"), a]})
    results = _aggregate(backend, 5)
    assert [r.url for r in results] == [a.url, "https://example.com/b"]


def test_first_page_failure_propagates():
    backend = FakeBackend({1: BackendError("down")})
    with pytest.raises(BackendError):
        _aggregate(backend, 3)


def test_later_page_failure_returns_partial_results():
    a, b = _hit("a"), _hit("b")
    backend = FakeBackend({1: [a, b], 2: BackendError("page 2 broke")})
    results = _aggregate(backend, 5)
    assert [r.url for r in results] == [a.url, b.url]


@pytest.mark.parametrize("limit", [1, 2, 3, 5, 8, 20])
def test_never_exceeds_limit_and_never_duplicates(limit):
    pages = {n: [_hit(str((n * 3 + k) % 7)) for k in range(4)] for n in range(1, 6)}
    results = _aggregate(FakeBackend(pages), limit)
    urls = [r.url for r in results]
    assert len(urls) <= limit
    assert len(set(urls)) == len(urls)


def test_non_positive_limit_rejected():
    with pytest.raises(ValueError):
        _aggregate(FakeBackend({}), 0)


# ------------------------------
# 本地 SearxNG 模拟服务
# ------------------------------
def _searxng_app(pages, seen_params: list, status: int = 200, raw_body: str = None) -> web.Application:
    async def search(request):
        seen_params.append(dict(request.query))
        if status != 200:
            return web.Response(status=status, text="error")
        if raw_body is not None:
            return web.Response(text=raw_body, content_type="text/html")
        pageno = int(request.query["pageno"])
        return web.json_response({"results": pages.get(pageno, [])})

    app = web.Application()
    app.router.add_get("/search", search)
    return app


def _raw(name: str, **extra):
    return {"title": f" Title {name} ", "url": f"https://example.com/{name}", "content": f"Snippet {name}", **extra}


async def _with_searxng(app, fn):
    async with TestServer(app) as server:
        backend = SearxngBackend(str(server.make_url("/")), timeout=2.0)
        async with aiohttp.ClientSession() as session:
            return await fn(backend, session)


def test_searxng_request_parameters_and_parsing():
    seen: list = []
    pages = {1: [_raw("a", engines=["google", "bing"], score=1.5), _raw("b")]}

    results = asyncio.run(_with_searxng(
        _searxng_app(pages, seen),
        lambda backend, session: backend.fetch_page(session, "rust ownership", 1),
    ))

    assert seen == [{"q": "rust ownership", "format": "json", "pageno": "1"}]
    assert results[0] == SearchResult(
        title="Title a",
        url="https://example.com/a",
        snippet="Snippet a",
        engines=["google", "bing"],
        score=1.5,
    )
    assert results[1].engines == [] and results[1].score == 0.0


def test_searxng_bad_status_is_backend_error():
    with pytest.raises(BackendError):
        asyncio.run(_with_searxng(
            _searxng_app({}, [], status=500),
            lambda backend, session: backend.fetch_page(session, "q", 1),
        ))


def test_searxng_malformed_body_is_backend_error():
    with pytest.raises(BackendError):
        asyncio.run(_with_searxng(
            _searxng_app({}, [], raw_body="<html>not json</html>"),
            lambda backend, session: backend.fetch_page(session, "q", 1),
        ))


def test_aggregate_against_searxng_walks_pages():
    seen: list = []
    pages = {1: [_raw("a"), _raw("b")], 2: [_raw("a"), _raw("c")], 3: []}

    results = asyncio.run(_with_searxng(
        _searxng_app(pages, seen),
        lambda backend, session: SearchAggregator(backend).aggregate(session, "rust ownership", 10),
    ))

    assert [r.url for r in results] == ["https://example.com/a", "https://example.com/b", "https://example.com/c"]
    assert [p["pageno"] for p in seen] == ["1", "2", "3"]


@pytest.mark.parametrize("bad", [
    {"title": 123, "url": "https://example.com/x", "content": "c"},
    {"title": "t", "url": ["https://example.com/x"], "content": "c"},
    {"title": "t", "url": "https://example.com/x", "content": "c", "engines": "google"},
    {"title": "t", "url": "https://example.com/x", "content": "c", "score": "high"},
    "not an object",
])
def test_malformed_first_page_is_backend_error(bad):
    with pytest.raises(BackendError, match="malformed"):
        asyncio.run(_with_searxng(
            _searxng_app({1: [bad]}, []),
            lambda backend, session: SearchAggregator(backend).aggregate(session, "q", 3),
        ))


def test_results_field_not_a_list_is_backend_error():
    with pytest.raises(BackendError):
        asyncio.run(_with_searxng(
            _searxng_app({1: {"title": "t"}}, []),
            lambda backend, session: backend.fetch_page(session, "q", 1),
        ))


def test_malformed_later_page_returns_partial_results():
    seen: list = []
    pages = {1: [_raw("a")], 2: [{"title": ["oops"], "url": "https://example.com/b", "content": "c"}]}

    results = asyncio.run(_with_searxng(
        _searxng_app(pages, seen),
        lambda backend, session: SearchAggregator(backend).aggregate(session, "q", 3),
    ))

    assert [r.url for r in results] == ["https://example.com/a"]
    assert [p["pageno"] for p in seen] == ["1", "2"]


def test_search_tool_over_searxng_survives_malformed_later_page():
    pages = {1: [_raw("a")], 2: [{"title": ["oops"], "url": "https://example.com/b", "content": "c"}]}

    async def _run():
        async with TestServer(_searxng_app(pages, [])) as server:
            config = default_config()
            config["search"]["base_url"] = str(server.make_url("/"))
            tool = WebSearchTool(config, logger=logging.getLogger("searchflow.test"))
            return await tool.asearch("q", limit=3)

    results = asyncio.run(_run())
    assert [r["url"] for r in results] == ["https://example.com/a"]


if __name__ == "__main__":
    test_dedup_across_pages_keeps_first_seen_order()
    test_aggregate_against_searxng_walks_pages()
    print("END")
