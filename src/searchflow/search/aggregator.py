from __future__ import annotations
import logging
from logging import Logger
from typing import List, Optional, Set

import aiohttp

from ..core.errors import BackendError
from ..core.interfaces import CanFetchPage
from ..core.types import SearchResult


class SearchAggregator:
    """Collect up to ``limit`` unique results by walking backend pages in order.

    Pages are requested strictly one after another; each page is deduplicated
    against everything seen earlier in the same call, keeping first-seen order.
    """

    def __init__(self, backend: CanFetchPage, logger: Optional[Logger] = None):
        self.backend = backend
        self.logger = logger or logging.getLogger(__name__)

    async def aggregate(self, session: Optional[aiohttp.ClientSession], query: str, limit: int) -> List[SearchResult]:
        """Run the query across successive pages.

        Args:
            session (aiohttp.ClientSession): Session passed through to the backend
            query (str): Search query
            limit (int): Maximum number of unique results, must be positive

        Raises:
            ValueError: when limit is not positive
            BackendError: only when the first page request fails

        Returns:
            List[SearchResult]: At most ``limit`` results with distinct URLs
        """
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        results: List[SearchResult] = []
        seen: Set[str] = set()
        pageno = 1
        requested = 0
        while len(results) < limit:
            requested += 1
            try:
                page = await self.backend.fetch_page(session, query, pageno)
            except BackendError as e:
                if results:
                    self.logger.info(f"Page {pageno} failed after {len(results)} results, stopping: {e}")
                    break
                raise
            if not page:
                break

            for r in page:
                if len(results) >= limit:
                    break
                if r.url in seen:
                    continue
                seen.add(r.url)
                results.append(r)
            pageno += 1

        self.logger.debug(f"Aggregated {len(results)} results for {query!r} over {requested} page request(s)")
        return results
