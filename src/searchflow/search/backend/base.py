from __future__ import annotations
from typing import List, Optional
import aiohttp

from ...core.types import SearchResult


class SearchBackend:
    async def fetch_page(self, session: Optional[aiohttp.ClientSession], query: str, pageno: int) -> List[SearchResult]:
        """Return one page of results (1-based ``pageno``). An empty list means no more results.
        Raise BackendError when the page cannot be retrieved."""
        raise NotImplementedError
