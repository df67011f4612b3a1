from __future__ import annotations
import asyncio
from typing import Optional, List, Dict, Any
import aiohttp
from aiohttp import ClientTimeout

from .base import SearchBackend
from ...core.errors import BackendError
from ...core.types import SearchResult


# -------- Searxng Backend --------
class SearxngBackend(SearchBackend):
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        user_agent: str = "searchflow/1.0",
        proxy: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.proxy = proxy

    async def fetch_page(self, session: Optional[aiohttp.ClientSession], query: str, pageno: int) -> List[SearchResult]:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self._request(own_session, query, pageno)
        return await self._request(session, query, pageno)

    async def _request(self, session: aiohttp.ClientSession, query: str, pageno: int) -> List[SearchResult]:
        params = {"q": query, "format": "json", "pageno": str(pageno)}
        kwargs: Dict[str, Any] = {
            "params": params,
            "headers": {"User-Agent": self.user_agent, "Accept": "application/json"},
            "timeout": ClientTimeout(total=self.timeout),
        }
        if self.proxy:
            kwargs["proxy"] = self.proxy
        try:
            async with session.get(f"{self.base_url}/search", **kwargs) as resp:
                if resp.status != 200:
                    raise BackendError(f"searxng page {pageno}: unexpected status code: {resp.status}")
                js = await resp.json(content_type=None)
        except BackendError:
            raise
        except asyncio.TimeoutError as e:
            raise BackendError(f"searxng page {pageno}: request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise BackendError(f"searxng page {pageno}: request failed: {e}") from e
        except ValueError as e:
            raise BackendError(f"searxng page {pageno}: failed to parse response: {e}") from e

        if not isinstance(js, dict):
            raise BackendError(f"searxng page {pageno}: response is not a JSON object")
        hits = js.get("results")
        if hits is None:
            return []
        if not isinstance(hits, list):
            raise BackendError(f"searxng page {pageno}: 'results' is not a list")
        return [self._to_result(h, pageno) for h in hits]

    @staticmethod
    def _to_result(h: Any, pageno: int) -> SearchResult:
        # standardize fields; a wrongly typed field makes the whole page unusable
        if not isinstance(h, dict):
            raise BackendError(f"searxng page {pageno}: malformed result {h!r}")
        title = _str_field(h, "title", pageno)
        url = _str_field(h, "url", pageno)
        snippet = _str_field(h, "content", pageno) or _str_field(h, "snippet", pageno)
        engines = h.get("engines")
        if engines is None:
            engines = []
        elif not isinstance(engines, list) or not all(isinstance(e, str) for e in engines):
            raise BackendError(f"searxng page {pageno}: malformed 'engines' {engines!r}")
        score = h.get("score")
        if score is None:
            score = 0.0
        elif isinstance(score, bool) or not isinstance(score, (int, float)):
            raise BackendError(f"searxng page {pageno}: malformed 'score' {score!r}")
        return SearchResult(title=title.strip(), url=url, snippet=snippet, engines=list(engines), score=float(score))


def _str_field(h: Dict[str, Any], key: str, pageno: int) -> str:
    value = h.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BackendError(f"searxng page {pageno}: malformed '{key}' {value!r}")
    return value
