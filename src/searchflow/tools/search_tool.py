from __future__ import annotations
import json
import time
from logging import Logger
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from .base import BaseTool, ToolCallRequest, ToolCallResult
from ..config import FULL_CONFIG, default_config, merge_config
from ..core.errors import BackendError, ConfigError, InputError
from ..core.interfaces import CanFetchContent, CanFetchPage, CanSummarize
from ..fetch.fetcher import PageFetcher
from ..pipeline.enrich import EnrichmentPipeline
from ..search.aggregator import SearchAggregator
from ..search.backend.searxng import SearxngBackend
from ..summary.openai import OpenaiSummarizer
from ..utils.async_util import run_sync
from ..utils.log_util import get_logger


class WebSearchTool(BaseTool):
    """The single ``websearch`` operation: aggregate results, then optionally summarize each page.

    ``asearch`` is the async entry point; ``call`` and ``run_one`` are blocking
    wrappers that turn the two fatal errors (bad input, unreachable backend)
    into an error payload instead of raising.
    """

    name = "websearch"
    description = (
        "Search the web using SearxNG. Optionally add 'site:website.com' to the query "
        "to search within a specific website."
    )
    parameters = {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "The search query"},
            "limit": {"type": "integer", "minimum": 1, "description": "Maximum number of search results (default: 10)"},
            "summary": {"type": "boolean", "description": "Summarize each result page with an LLM"},
            "maxSummaryTokens": {"type": "integer", "minimum": 1, "description": "Target length of each summary in tokens"},
        },
        "required": ["query"],
    }

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        backend: Optional[CanFetchPage] = None,
        fetcher: Optional[CanFetchContent] = None,
        summarizer: Optional[CanSummarize] = None,
        logger: Optional[Logger] = None,
    ):
        super().__init__(config=merge_config(FULL_CONFIG, config) if config else default_config())
        self.logger = logger or get_logger(self.config, "searchflow")

        search_config = self.config["search"]
        fetch_config = self.config["fetch"]
        if backend is None:
            if not search_config["base_url"]:
                raise ConfigError("search.base_url is required")
            backend = SearxngBackend(
                search_config["base_url"],
                timeout=search_config["timeout"],
                user_agent=search_config["user_agent"],
                proxy=search_config["proxy"],
            )
        self.aggregator = SearchAggregator(backend, logger=self.logger)
        self.fetcher = fetcher or PageFetcher(
            user_agent=fetch_config["user_agent"],
            proxy=fetch_config["proxy"],
            logger=self.logger,
        )
        self.summarizer = summarizer

    # --- async API ---
    async def asearch(
        self,
        query: Any,
        limit: Any = None,
        summary: Optional[bool] = None,
        max_summary_tokens: Any = None,
    ) -> List[Dict[str, Any]]:
        """Search and return JSON-ready result dicts in backend order.

        Raises:
            InputError: missing query or non-integer limit / token budget
            BackendError: the first search page could not be retrieved
        """
        if not isinstance(query, str) or not query.strip():
            raise InputError("query is required")
        search_config = self.config["search"]
        fetch_config = self.config["fetch"]
        summary_config = self.config["summary"]
        limit = _positive_int("limit", limit, search_config["default_limit"])
        max_summary_tokens = _positive_int("maxSummaryTokens", max_summary_tokens, summary_config["max_tokens"])
        summary_enabled = summary_config["enabled"] if summary is None else bool(summary)

        async with aiohttp.ClientSession() as session:
            start = time.perf_counter()
            try:
                results = await self.aggregator.aggregate(session, query, limit)
            finally:
                self.logger.debug(f"SearxNG search query={query!r} duration_ms={(time.perf_counter() - start) * 1000:.0f}")
            self.logger.debug(f"SearxNG search query={query!r} results={len(results)}")

            summarizer, owned = self._open_summarizer() if summary_enabled else (None, False)
            try:
                pipeline = EnrichmentPipeline(
                    self.fetcher,
                    summarizer,
                    extract_text=fetch_config["extract_text"],
                    max_content_chars=fetch_config["max_content_chars"],
                    logger=self.logger,
                )
                start = time.perf_counter()
                enriched = await pipeline.enrich(
                    session,
                    results,
                    query,
                    summary_enabled=summarizer is not None,
                    max_summary_tokens=max_summary_tokens,
                    concurrency=fetch_config["concurrency"],
                    per_item_timeout=fetch_config["timeout"],
                    deadline=fetch_config["deadline"],
                )
                if summarizer is not None:
                    summarized = sum(1 for e in enriched if e.summary is not None)
                    self.logger.debug(
                        f"Enrichment summarized={summarized}/{len(enriched)} "
                        f"duration_ms={(time.perf_counter() - start) * 1000:.0f}"
                    )
            finally:
                if owned:
                    await summarizer.aclose()
        return [e.to_dict() for e in enriched]

    def _open_summarizer(self) -> Tuple[Optional[CanSummarize], bool]:
        if self.summarizer is not None:
            return self.summarizer, False
        try:
            return OpenaiSummarizer(self.config, logger=self.logger), True
        except ConfigError as e:
            self.logger.warning(f"Summaries requested but no summarizer is available, returning snippets only: {e}")
            return None, False

    # --- public sync API ---
    def call(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Blocking call with protocol-style arguments (``query``, ``limit``, ``summary``, ``maxSummaryTokens``)."""
        try:
            results = run_sync(self.asearch(
                arguments.get("query"),
                limit=arguments.get("limit"),
                summary=arguments.get("summary"),
                max_summary_tokens=arguments.get("maxSummaryTokens", arguments.get("max_summary_tokens")),
            ))
        except InputError as e:
            return {"is_error": True, "message": str(e)}
        except BackendError as e:
            return {"is_error": True, "message": f"search failed: {e}"}
        return {"is_error": False, "results": results}

    def run_one(self, call: ToolCallRequest, **kwargs: Any) -> ToolCallResult:
        arguments = _parse_arguments(call.content)
        payload = self.call(arguments)
        if payload["is_error"]:
            output, error, meta = payload["message"], payload["message"], {}
        else:
            output = json.dumps(payload["results"], ensure_ascii=False)
            error, meta = None, {"count": len(payload["results"])}
        return ToolCallResult(
            tool_name=self.name,
            request_content=call.content,
            output=output,
            meta={**(call.meta or {}), **meta},
            error=error,
            index=call.index,
            call=call,
        )


def _positive_int(name: str, value: Any, default: int) -> int:
    """None or non-positive values fall back to ``default``."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise InputError(f"{name} must be an integer")
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise InputError(f"{name} must be an integer") from e
    return n if n > 0 else default


def _parse_arguments(content: Any) -> Dict[str, Any]:
    if isinstance(content, dict):
        return content
    text = str(content or "").strip()
    if text.startswith("{"):
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError:
            loaded = None
        if isinstance(loaded, dict):
            return loaded
    return {"query": text}
