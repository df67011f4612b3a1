# src/core/interfaces.py
from typing import List, Optional, Protocol

import aiohttp

from .types import SearchResult


class CanFetchPage(Protocol):
    """Protocol for a component that retrieves a single result page from a search backend.
    Page indices are 1-based.
    """
    async def fetch_page(self, session: Optional[aiohttp.ClientSession], query: str, pageno: int) -> List[SearchResult]:
        """Fetch one page of results

        Args:
            session (aiohttp.ClientSession): Shared HTTP session of the current call
            query (str): Search query
            pageno (int): 1-based page index

        Raises:
            BackendError: when the page cannot be retrieved or parsed

        Returns:
            List[SearchResult]: Results in backend order, empty when no more results exist
        """
        ...


class CanFetchContent(Protocol):
    """Protocol for a component that downloads the text body of a URL under a deadline.
    """
    async def fetch(self, session: Optional[aiohttp.ClientSession], url: str, timeout: float) -> str:
        """
        Raises:
            FetchError: on invalid URL, transport failure/timeout, bad status or non-text content
        """
        ...


class CanSummarize(Protocol):
    """Protocol for a component that condenses page content with respect to a query.
    """
    async def summarize(self, content: str, query: str, source_url: str, max_tokens: int) -> str:
        """
        Raises:
            SummarizeError: when the completion backend fails or returns nothing
        """
        ...
