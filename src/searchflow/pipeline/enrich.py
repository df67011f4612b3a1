from __future__ import annotations
import asyncio
import logging
from logging import Logger
from typing import List, Optional, Sequence

import aiohttp

from ..core.errors import FetchError, SummarizeError
from ..core.interfaces import CanFetchContent, CanSummarize
from ..core.types import EnrichedResult, SearchResult
from ..utils.html_util import html_to_text, looks_like_html

DEFAULT_CONCURRENCY = 8
DEFAULT_ITEM_TIMEOUT = 5.0


class EnrichmentPipeline:
    """Attach page summaries to search results.

    Every result gets its own fetch+summarize task. Tasks run concurrently
    behind a semaphore and each one writes into its own slot of a pre-sized
    output list, so the output always lines up with the input. A failing
    item keeps its snippet and loses only the summary.
    """

    def __init__(
        self,
        fetcher: CanFetchContent,
        summarizer: Optional[CanSummarize],
        *,
        extract_text: bool = False,
        max_content_chars: Optional[int] = None,
        logger: Optional[Logger] = None,
    ):
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.extract_text = extract_text
        self.max_content_chars = max_content_chars
        self.logger = logger or logging.getLogger(__name__)

    async def enrich(
        self,
        session: Optional[aiohttp.ClientSession],
        results: Sequence[SearchResult],
        query: str,
        *,
        summary_enabled: bool,
        max_summary_tokens: int,
        concurrency: int = DEFAULT_CONCURRENCY,
        per_item_timeout: float = DEFAULT_ITEM_TIMEOUT,
        deadline: Optional[float] = None,
    ) -> List[EnrichedResult]:
        """Enrich ``results`` in input order.

        Args:
            session (aiohttp.ClientSession): Session handed to the fetcher
            results (Sequence[SearchResult]): Results to enrich
            query (str): The query the summaries should focus on
            summary_enabled (bool): When False no network call is made and summaries stay empty
            max_summary_tokens (int): Target summary length
            concurrency (int, optional): Max tasks in flight. Defaults to 8.
            per_item_timeout (float, optional): Fetch deadline per page in seconds. Defaults to 5.0.
            deadline (float, optional): Overall budget in seconds; unfinished items degrade. Defaults to None.
                The deadline never aborts the call, even when it expires before any item
                started (every item then degrades). Aborting is left to the caller:
                cancelling the task that awaits ``enrich`` cancels and awaits all items,
                then re-raises ``CancelledError``.

        Returns:
            List[EnrichedResult]: Same length and order as ``results``
        """
        if not summary_enabled or self.summarizer is None or not results:
            return [EnrichedResult.from_search_result(r) for r in results]
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        out: List[Optional[EnrichedResult]] = [None] * len(results)
        sem = asyncio.Semaphore(concurrency)

        async def _run(idx: int, result: SearchResult) -> None:
            async with sem:
                try:
                    out[idx] = await self._enrich_one(session, result, query, max_summary_tokens, per_item_timeout)
                except Exception:
                    self.logger.warning(f"Unexpected error while enriching {result.url}", exc_info=True)

        tasks = [asyncio.create_task(_run(i, r)) for i, r in enumerate(results)]
        try:
            _, pending = await asyncio.wait(tasks, timeout=deadline)
            if pending:
                self.logger.info(f"Enrichment deadline of {deadline}s hit, dropping {len(pending)} unfinished item(s)")
        finally:
            for t in tasks:
                if not t.done():
                    t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        return [o if o is not None else EnrichedResult.from_search_result(r) for o, r in zip(out, results)]

    async def _enrich_one(
        self,
        session: Optional[aiohttp.ClientSession],
        result: SearchResult,
        query: str,
        max_summary_tokens: int,
        timeout: float,
    ) -> EnrichedResult:
        try:
            content = await self.fetcher.fetch(session, result.url, timeout=timeout)
        except FetchError as e:
            self.logger.debug(f"Skipping summary for {result.url}: {e}")
            return EnrichedResult.from_search_result(result)

        content = self._prepare(content)
        try:
            summary = await self.summarizer.summarize(content, query, result.url, max_summary_tokens)
        except SummarizeError as e:
            self.logger.debug(f"Summary failed for {result.url}: {e}")
            return EnrichedResult.from_search_result(result)
        return EnrichedResult.from_search_result(result, summary=summary)

    def _prepare(self, content: str) -> str:
        if self.extract_text and looks_like_html(content):
            content = html_to_text(content)
        if self.max_content_chars:
            content = content[: self.max_content_chars]
        return content
