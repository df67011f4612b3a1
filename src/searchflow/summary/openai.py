from __future__ import annotations
import logging
import math
import os
from logging import Logger
from typing import Any, Dict, Mapping, Optional

import httpx
import openai
from openai import AsyncOpenAI

from ..core.errors import CompletionError, ConfigError
from .prompts import system_prompt, user_prompt

# Sent with every request so the provider can attribute traffic to this tool.
ATTRIBUTION_HEADERS: Dict[str, str] = {
    "HTTP-Referer": "https://github.com/searchflow/searchflow",
    "X-Title": "searchflow",
}

# The length limit in the prompt is only advisory, so the hard budget gets some slack.
TOKEN_MARGIN = 1.25


def request_budget(max_tokens: int) -> int:
    return math.ceil(max_tokens * TOKEN_MARGIN)


class HeaderTransport(httpx.AsyncBaseTransport):
    """Transport wrapper that stamps fixed headers on each outbound request."""

    def __init__(self, base: Optional[httpx.AsyncBaseTransport] = None, headers: Optional[Mapping[str, str]] = None):
        self.base = base or httpx.AsyncHTTPTransport()
        self.headers = dict(ATTRIBUTION_HEADERS if headers is None else headers)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        for key, value in self.headers.items():
            request.headers[key] = value
        return await self.base.handle_async_request(request)

    async def aclose(self) -> None:
        await self.base.aclose()


def build_http_client(transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 30.0) -> httpx.AsyncClient:
    """httpx client for the completion API with attribution headers applied at the transport level."""
    return httpx.AsyncClient(transport=HeaderTransport(transport), timeout=timeout)


class OpenaiSummarizer:
    """Summarize page content through an OpenAI-compatible chat completion API.

    Reads the ``summary`` section of the config: ``model`` and ``api_key`` are
    required (the key falls back to ``OPENAI_API_KEY``), ``url`` selects a
    compatible provider, ``timeout`` and ``max_retries`` tune the client.
    """

    def __init__(self, config: Dict[str, Any], logger: Optional[Logger] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._parse_config()

        self._owns_http_client = http_client is None
        self.http_client = http_client or build_http_client(timeout=self.timeout)
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
            http_client=self.http_client,
        )

    async def summarize(self, content: str, query: str, source_url: str, max_tokens: int) -> str:
        """Summarize ``content`` with respect to ``query``.

        Raises:
            ValueError: when max_tokens is not positive
            CompletionError: when the API call fails, returns no choices or only blank text
        """
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")
        messages = [
            {"role": "system", "content": system_prompt(max_tokens)},
            {"role": "user", "content": user_prompt(content, query, source_url)},
        ]
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=request_budget(max_tokens),
            )
        except openai.OpenAIError as e:
            raise CompletionError(f"failed to create chat completion: {e}") from e

        if not resp.choices:
            raise CompletionError("no response choices returned from LLM")
        summary = (resp.choices[0].message.content or "").strip()
        if not summary:
            raise CompletionError("LLM returned an empty summary")
        return summary

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()

    def _parse_config(self):
        summary_config = self.config["summary"]
        self.model = summary_config.get("model") or ""
        self.api_key = summary_config.get("api_key") or os.environ.get("OPENAI_API_KEY", "")
        self.base_url = summary_config.get("url") or None
        self.timeout = float(summary_config.get("timeout", 30))
        self.max_retries = int(summary_config.get("max_retries", 0))
        if not self.model:
            raise ConfigError("summary.model is not configured")
        if not self.api_key:
            raise ConfigError("summary.api_key is not configured (set summary.api_key or OPENAI_API_KEY)")
