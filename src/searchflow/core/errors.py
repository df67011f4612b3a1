# src/core/errors.py
from __future__ import annotations
from typing import Optional


class SearchFlowError(Exception):
    """Base class for every error raised by searchflow."""


class InputError(SearchFlowError):
    """Raised when a search call is missing required arguments or they are malformed.
    Raised before any network activity.
    """


class BackendError(SearchFlowError):
    """Raised when the search backend cannot be reached or answers garbage."""


class ConfigError(SearchFlowError, ValueError):
    """Raised when a config file has an unexpected shape or unknown keys."""


# -------- per-item errors, always recovered inside the pipeline --------
class FetchError(SearchFlowError):
    """Base class for page fetch failures."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class InvalidURL(FetchError):
    pass


class RequestFailed(FetchError):
    pass


class BadStatus(FetchError):
    def __init__(self, status: int, url: str = ""):
        super().__init__(f"unexpected status code: {status}", url)
        self.status = status


class UnsupportedContentType(FetchError):
    def __init__(self, content_type: Optional[str], url: str = ""):
        super().__init__(f"unsupported content type: {content_type or '(none)'}", url)
        self.content_type = content_type or ""


class SummarizeError(SearchFlowError):
    """Base class for summarization failures."""


class CompletionError(SummarizeError):
    """The completion backend failed or returned no choices."""
