from __future__ import annotations
import asyncio
import logging
from logging import Logger
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import aiohttp
from aiohttp import ClientTimeout

from ..core.errors import BadStatus, FetchError, InvalidURL, RequestFailed, UnsupportedContentType
from .content_type import is_text_like

DEFAULT_USER_AGENT = "searchflow/1.0"


class PageFetcher:
    """Download the text body of a result page.

    Only 2xx responses with a text-like Content-Type are accepted; everything
    else is reported as a :class:`FetchError` subclass so that callers can
    degrade the single item instead of failing the batch.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: Optional[str] = None,
        logger: Optional[Logger] = None,
    ):
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,text/plain;q=0.8,*/*;q=0.5",
        }
        self.proxy = proxy
        self.logger = logger or logging.getLogger(__name__)

    async def fetch(self, session: Optional[aiohttp.ClientSession], url: str, timeout: float = 5.0) -> str:
        """Fetch ``url`` and return its decoded body.

        Args:
            session (aiohttp.ClientSession, optional): Session to reuse. A throwaway one is opened when None.
            url (str): Absolute http(s) URL
            timeout (float, optional): Hard deadline in seconds for connect + read. Defaults to 5.0.

        Raises:
            InvalidURL: missing scheme or host
            RequestFailed: transport error or deadline exceeded
            BadStatus: status outside 200-299
            UnsupportedContentType: declared type is not text-like
        """
        self._validate(url)
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self._get(own_session, url, timeout)
        return await self._get(session, url, timeout)

    @staticmethod
    def _validate(url: str) -> None:
        try:
            parsed = urlsplit(url or "")
        except ValueError as e:
            raise InvalidURL(f"invalid URL: {e}", url) from e
        if not parsed.scheme:
            raise InvalidURL(f"URL missing scheme: {url}", url)
        if not parsed.netloc:
            raise InvalidURL(f"URL missing host: {url}", url)

    async def _get(self, session: aiohttp.ClientSession, url: str, timeout: float) -> str:
        kwargs: Dict[str, Any] = {"headers": self.headers, "timeout": ClientTimeout(total=timeout)}
        if self.proxy:
            kwargs["proxy"] = self.proxy
        try:
            async with session.get(url, **kwargs) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise BadStatus(resp.status, url)
                content_type = resp.headers.get("Content-Type", "")
                if not is_text_like(content_type):
                    raise UnsupportedContentType(content_type, url)
                body = await resp.text(errors="replace")
        except FetchError:
            raise
        except asyncio.TimeoutError as e:
            raise RequestFailed(f"request timed out after {timeout}s", url) from e
        except aiohttp.ClientError as e:
            raise RequestFailed(f"request failed: {e}", url) from e
        self.logger.debug(f"Fetched {url} ({len(body)} chars)")
        return body
